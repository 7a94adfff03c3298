# schemas.py (Pydantic v2)
from enum import Enum
from pydantic import BaseModel, EmailStr, Field
from typing import Any, Optional, List
from datetime import datetime

from models.Notification import NotificationType


# ---------- Action results ----------
class ErrorCode(str, Enum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    INVALID_OPERATION = "INVALID_OPERATION"
    STORE_FAILURE = "STORE_FAILURE"

class ActionResult(BaseModel):
    """Outcome of a service action: either data or an error code with a message."""
    success: bool
    error: Optional[ErrorCode] = None
    message: Optional[str] = None
    data: Optional[Any] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ActionResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: ErrorCode, message: str) -> "ActionResult":
        return cls(success=False, error=error, message=message)


# ---------- Identity ----------
class ExternalIdentity(BaseModel):
    """Caller identity as asserted by the identity provider (decoded ID token)."""
    uid: str
    email: EmailStr
    username: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None


# ---------- Users ----------
class UserSummary(BaseModel):
    id: str
    name: Optional[str] = None
    username: str
    image_url: Optional[str] = None

    class Config:
        from_attributes = True

class UserRead(UserSummary):
    email: EmailStr
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class UserWithCounts(UserRead):
    followers_count: int = 0
    following_count: int = 0
    posts_count: int = 0

class SuggestedUser(UserSummary):
    followers_count: int = 0


# ---------- Profiles ----------
class ProfileRead(BaseModel):
    id: str
    name: Optional[str] = None
    username: str
    bio: Optional[str] = None
    image_url: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    created_at: datetime
    followers_count: int = 0
    following_count: int = 0
    posts_count: int = 0

    class Config:
        from_attributes = True

class ProfileUpdate(BaseModel):
    """Partial update; only these fields are editable by the owner"""
    name: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None


# ---------- Posts ----------
class PostCreate(BaseModel):
    content: Optional[str] = None
    image_url: Optional[str] = None

class PostRead(BaseModel):
    id: str
    author_id: str
    content: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ---------- Comments ----------
class CommentCreate(BaseModel):
    content: str

class CommentRead(BaseModel):
    id: str
    content: str
    author_id: str
    post_id: str
    created_at: datetime
    author: Optional[UserSummary] = None

    class Config:
        from_attributes = True


# ---------- Feed ----------
class LikeRead(BaseModel):
    user_id: str

    class Config:
        from_attributes = True

class PostCounts(BaseModel):
    likes: int = 0

class FeedPost(PostRead):
    author: UserSummary
    comments: List[CommentRead] = []
    likes: List[LikeRead] = []
    count: PostCounts = Field(default_factory=PostCounts, alias="_count")

    class Config:
        from_attributes = True
        populate_by_name = True

class PostWithCounts(BaseModel):
    """Profile tab entry: post, author and aggregate counts"""
    post: PostRead
    author: UserSummary
    likes_count: int = 0
    comments_count: int = 0


# ---------- Follows ----------
class FollowRead(BaseModel):
    follower_id: str
    following_id: str
    created_at: datetime

    class Config:
        from_attributes = True


# ---------- Notifications ----------
class NotificationPost(BaseModel):
    id: str
    content: Optional[str] = None
    image_url: Optional[str] = None

    class Config:
        from_attributes = True

class NotificationComment(BaseModel):
    id: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True

class NotificationRead(BaseModel):
    id: str
    type: NotificationType
    read: bool
    created_at: datetime
    # Context may be missing once the referenced row is gone
    creator: Optional[UserSummary] = None
    post: Optional[NotificationPost] = None
    comment: Optional[NotificationComment] = None

    class Config:
        from_attributes = True

class MarkReadRequest(BaseModel):
    notification_ids: List[str] = []


# ---------- Profile page ----------
class ProfilePage(BaseModel):
    profile: ProfileRead
    posts: List[PostWithCounts] = []
    liked_posts: List[PostWithCounts] = []
    is_following: bool = False
