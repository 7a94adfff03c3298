"""
Request-boundary authentication.

The caller's identity is resolved once here and handed to the services as an
explicit argument; nothing below the routes reads request state.
"""
import logging
from typing import Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from schemas import ExternalIdentity
from services import firebase_service
from services.identity_service import current_internal_user_id, resolve_or_provision_user
from utils.errors import InvalidTokenError, UserNotFoundError

logger = logging.getLogger("socialnet.api.auth")

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Optional[ExternalIdentity]:
    """Decoded Firebase identity of the caller, or None without a bearer token."""
    if credentials is None:
        return None

    try:
        claims = firebase_service.verify_id_token(credentials.credentials)
        return firebase_service.identity_from_claims(claims)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user_id(
    identity: Optional[ExternalIdentity] = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Optional[str]:
    """
    Internal id of the caller, or None when unauthenticated.
    An identity seen for the first time is provisioned on the spot; if that
    fails the caller is treated as unauthenticated.
    """
    try:
        return current_internal_user_id(db, identity)
    except UserNotFoundError:
        logger.info("No user record for identity %s; provisioning", identity.uid)

    try:
        return resolve_or_provision_user(db, identity).id
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Could not provision user for identity %s", identity.uid)
        return None
