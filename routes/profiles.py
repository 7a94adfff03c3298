from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from schemas import PostWithCounts, ProfilePage, ProfileRead, ProfileUpdate, UserRead
from services import profile_service
from utils.auth import get_current_user_id
from utils.results import raise_for_result

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.patch("/me", response_model=UserRead)
def update_profile(
    payload: ProfileUpdate,
    current_user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Update the caller's own profile (name, bio, location, website).
    """
    return raise_for_result(profile_service.update_profile(db, current_user_id, payload)).data


@router.get("/{username}", response_model=ProfileRead)
def get_profile(username: str, db: Session = Depends(get_db)):
    profile = raise_for_result(profile_service.get_profile_by_username(db, username)).data
    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


@router.get("/{username}/page", response_model=ProfilePage)
def get_profile_page(
    username: str,
    current_user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Profile, authored posts, liked posts and whether the caller follows the user.
    """
    page = raise_for_result(profile_service.get_profile_page(db, current_user_id, username)).data
    if page is None:
        raise HTTPException(status_code=404, detail="User not found")
    return page


@router.get("/id/{user_id}/posts", response_model=List[PostWithCounts])
def get_user_posts(user_id: str, db: Session = Depends(get_db)):
    return raise_for_result(profile_service.get_user_posts(db, user_id)).data


@router.get("/id/{user_id}/likes", response_model=List[PostWithCounts])
def get_user_liked_posts(user_id: str, db: Session = Depends(get_db)):
    return raise_for_result(profile_service.get_user_liked_posts(db, user_id)).data
