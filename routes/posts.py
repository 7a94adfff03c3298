from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from schemas import ActionResult, CommentCreate, CommentRead, FeedPost, PostCreate, PostRead
from services import feed_service, post_service
from utils.auth import get_current_user_id
from utils.results import raise_for_result

router = APIRouter(prefix="/posts", tags=["Posts"])


@router.post("/", response_model=PostRead, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: PostCreate,
    current_user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    result = post_service.create_post(db, current_user_id, payload.content, payload.image_url)
    return raise_for_result(result).data


@router.get("/", response_model=List[FeedPost])
def get_posts(db: Session = Depends(get_db)):
    """
    Global feed: every post, newest first, with author, comments and likes.
    """
    return raise_for_result(feed_service.list_posts(db)).data


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: str,
    current_user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Delete a post (only author can delete).
    """
    raise_for_result(post_service.delete_post(db, current_user_id, post_id))
    return None


# ---------- Likes ----------

@router.post("/{post_id}/like", response_model=ActionResult)
def toggle_like(
    post_id: str,
    current_user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Like a post, or remove the like if already liked.
    """
    return raise_for_result(post_service.toggle_like(db, current_user_id, post_id))


# ---------- Comments ----------

@router.get("/{post_id}/comments", response_model=List[CommentRead])
def list_comments(post_id: str, db: Session = Depends(get_db)):
    return raise_for_result(post_service.get_comments(db, post_id)).data


@router.post("/{post_id}/comments", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
def create_comment(
    post_id: str,
    payload: CommentCreate,
    current_user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    result = post_service.create_comment(db, current_user_id, post_id, payload.content)
    return raise_for_result(result).data


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    comment_id: str,
    current_user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Delete one of the caller's comments; other ids are ignored.
    """
    raise_for_result(post_service.delete_comment(db, current_user_id, comment_id))
    return None
