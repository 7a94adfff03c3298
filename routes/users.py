from typing import List, Optional
from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session

from config import get_settings
from schemas import ExternalIdentity, SuggestedUser, UserRead, UserWithCounts
from database import get_db
from services import follow_service, identity_service
from utils.auth import get_current_identity, get_current_user_id
from utils.results import raise_for_result

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/sync", response_model=UserRead)
def sync_user(
    identity: Optional[ExternalIdentity] = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Create the caller's user record on first sign-in, or return the existing one.
    """
    return raise_for_result(identity_service.sync_user(db, identity)).data


@router.get("/me", response_model=UserWithCounts)
def get_me(
    identity: Optional[ExternalIdentity] = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Current user with follower, following and post counts.
    """
    if identity is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    user = raise_for_result(identity_service.get_user_by_external_id(db, identity.uid)).data
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/suggested", response_model=List[SuggestedUser])
def get_suggested_users(
    current_user_id: Optional[str] = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    A few random users the caller does not follow yet.
    """
    limit = get_settings().SUGGESTED_USERS_LIMIT
    return follow_service.get_suggested_users(db, current_user_id, limit=limit).data
