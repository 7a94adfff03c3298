from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from schemas import ActionResult, FollowRead
from services import follow_service
from utils.auth import get_current_user_id
from utils.results import raise_for_result

router = APIRouter(prefix="/follows", tags=["Follows"])


@router.post("/{target_id}/toggle", response_model=ActionResult)
def toggle_follow(
    target_id: str,
    current_user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Follow a user, or unfollow if already following.
    """
    return raise_for_result(follow_service.toggle_follow(db, current_user_id, target_id))


@router.get("/{target_id}/status")
def is_following(
    target_id: str,
    current_user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Check if the caller is following another user.
    """
    return {"is_following": follow_service.is_following(db, current_user_id, target_id)}


@router.get("/{user_id}/following", response_model=List[FollowRead])
def get_following(
    user_id: str,
    db: Session = Depends(get_db)
):
    """
    Get list of users that a user is following.
    """
    return raise_for_result(follow_service.list_following(db, user_id)).data


@router.get("/{user_id}/followers", response_model=List[FollowRead])
def get_followers(
    user_id: str,
    db: Session = Depends(get_db)
):
    """
    Get list of users that follow a user.
    """
    return raise_for_result(follow_service.list_followers(db, user_id)).data
