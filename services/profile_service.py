import logging
from typing import Optional

from sqlalchemy import desc, distinct, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from models.Comment import Comment
from models.Like import Like
from models.Post import Post
from models.User import User
from schemas import (
    ActionResult,
    ErrorCode,
    PostRead,
    PostWithCounts,
    ProfilePage,
    ProfileRead,
    ProfileUpdate,
    UserRead,
    UserSummary,
)
from services.follow_service import compute_counts, is_following
from services.post_service import count_posts

logger = logging.getLogger("socialnet.api.profiles")

EDITABLE_FIELDS = ("name", "bio", "location", "website")


def _load_profile(db: Session, username: str) -> Optional[ProfileRead]:
    user = db.query(User).filter(User.username == username).first()
    if not user:
        return None

    # Independent aggregates; joining them would multiply rows across dimensions
    counts = compute_counts(db, user.id)
    return ProfileRead(
        id=user.id,
        name=user.name,
        username=user.username,
        bio=user.bio,
        image_url=user.image_url,
        location=user.location,
        website=user.website,
        created_at=user.created_at,
        followers_count=counts["followers_count"],
        following_count=counts["following_count"],
        posts_count=count_posts(db, user.id),
    )


def get_profile_by_username(db: Session, username: str) -> ActionResult:
    """Profile with counts; data is None when no user has that username."""
    try:
        profile = _load_profile(db, username)
    except SQLAlchemyError:
        logger.exception("Error fetching profile %s", username)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Failed to fetch profile")
    return ActionResult.ok(profile)


def _posts_with_counts_query(db: Session):
    likes_count = func.count(distinct(Like.user_id)).label("likes_count")
    comments_count = func.count(distinct(Comment.id)).label("comments_count")
    return (
        db.query(Post, User, likes_count, comments_count)
        .join(User, User.id == Post.author_id)
        .outerjoin(Like, Like.post_id == Post.id)
        .outerjoin(Comment, Comment.post_id == Post.id)
        .group_by(Post.id, User.id)
        .order_by(desc(Post.created_at))
    )


def _to_post_with_counts(row) -> PostWithCounts:
    post, author, likes_count, comments_count = row
    return PostWithCounts(
        post=PostRead.model_validate(post),
        author=UserSummary.model_validate(author),
        likes_count=likes_count,
        comments_count=comments_count,
    )


def _user_posts(db: Session, user_id: str):
    rows = _posts_with_counts_query(db).filter(Post.author_id == user_id).all()
    return [_to_post_with_counts(row) for row in rows]


def _user_liked_posts(db: Session, user_id: str):
    liked = aliased(Like)
    liked_post_ids = select(liked.post_id).where(liked.user_id == user_id)
    rows = _posts_with_counts_query(db).filter(Post.id.in_(liked_post_ids)).all()
    return [_to_post_with_counts(row) for row in rows]


def get_user_posts(db: Session, user_id: str) -> ActionResult:
    try:
        posts = _user_posts(db, user_id)
    except SQLAlchemyError:
        logger.exception("Error fetching user posts for %s", user_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Failed to fetch user posts")
    return ActionResult.ok(posts)


def get_user_liked_posts(db: Session, user_id: str) -> ActionResult:
    try:
        posts = _user_liked_posts(db, user_id)
    except SQLAlchemyError:
        logger.exception("Error fetching liked posts for %s", user_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Failed to fetch liked posts")
    return ActionResult.ok(posts)


def get_profile_page(db: Session, viewer_id: Optional[str], username: str) -> ActionResult:
    """Everything a profile page shows; data is None for an unknown username."""
    try:
        profile = _load_profile(db, username)
        if profile is None:
            return ActionResult.ok(None)

        page = ProfilePage(
            profile=profile,
            posts=_user_posts(db, profile.id),
            liked_posts=_user_liked_posts(db, profile.id),
            is_following=is_following(db, viewer_id, profile.id),
        )
    except SQLAlchemyError:
        logger.exception("Error building profile page for %s", username)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Failed to fetch profile")

    return ActionResult.ok(page)


def update_profile(db: Session, actor_id: Optional[str], fields: ProfileUpdate) -> ActionResult:
    """Partial update of the caller's own profile."""
    if not actor_id:
        return ActionResult.fail(ErrorCode.UNAUTHENTICATED, "Unauthorized")

    try:
        user = db.query(User).filter(User.id == actor_id).first()
        if not user:
            return ActionResult.fail(ErrorCode.NOT_FOUND, "User not found")

        update_data = fields.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            if key in EDITABLE_FIELDS:
                setattr(user, key, value)

        db.commit()
        db.refresh(user)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error updating profile %s", actor_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Failed to update profile")

    return ActionResult.ok(UserRead.model_validate(user))
