"""
Identity resolution: maps the identity provider's user onto an internal User.

Users are provisioned lazily, the first time an authenticated identity shows up.
The unique constraint on ``firebase_uid`` is the final arbiter when two requests
for a never-seen identity race each other.
"""
import logging
import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.User import User
from schemas import ActionResult, ErrorCode, ExternalIdentity, UserRead, UserWithCounts
from services.follow_service import compute_counts
from services.post_service import count_posts
from utils.errors import UserNotFoundError

logger = logging.getLogger("socialnet.api.identity")


def get_user_by_firebase_uid(db: Session, firebase_uid: str) -> Optional[User]:
    return db.query(User).filter(User.firebase_uid == firebase_uid).first()


def _default_username(identity: ExternalIdentity) -> str:
    return identity.username or identity.email.split("@")[0]


def _available_username(db: Session, username: str) -> str:
    if not db.query(User.id).filter(User.username == username).first():
        return username
    return f"{username}_{uuid.uuid4().hex[:6]}"


def _insert_user(db: Session, identity: ExternalIdentity, username: str) -> User:
    user = User(
        firebase_uid=identity.uid,
        email=identity.email,
        username=username,
        name=identity.name,
        image_url=identity.picture,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def resolve_or_provision_user(db: Session, identity: ExternalIdentity) -> User:
    """Return the internal user for `identity`, creating it on first sight.

    Raises IntegrityError when the identity collides with another user on a
    column other than the username (e.g. an email already in use).
    """
    existing = get_user_by_firebase_uid(db, identity.uid)
    if existing:
        return existing

    username = _available_username(db, _default_username(identity))
    try:
        new_user = _insert_user(db, identity, username)
    except IntegrityError:
        db.rollback()
        # A concurrent request provisioned the same identity first
        existing = get_user_by_firebase_uid(db, identity.uid)
        if existing is not None:
            logger.info("User %s was provisioned concurrently; using existing record", identity.uid)
            return existing
        if not db.query(User.id).filter(User.username == username).first():
            raise
        # Someone else took the username between the check and the insert
        logger.info("Username %s taken concurrently; retrying with a suffix", username)
        new_user = _insert_user(db, identity, f"{username}_{uuid.uuid4().hex[:6]}")

    logger.info("Provisioned user %s for identity %s", new_user.id, identity.uid)
    return new_user


def current_internal_user_id(db: Session, identity: Optional[ExternalIdentity]) -> Optional[str]:
    """Internal id of the caller, or None when unauthenticated.

    Raises UserNotFoundError when the identity is known to the provider but has
    no internal record; the caller decides whether to provision or give up.
    """
    if identity is None:
        return None

    user_id = db.query(User.id).filter(User.firebase_uid == identity.uid).scalar()
    if user_id is None:
        raise UserNotFoundError("User not found")
    return user_id


def sync_user(db: Session, identity: Optional[ExternalIdentity]) -> ActionResult:
    """Provision-or-fetch the caller's user record."""
    if identity is None:
        return ActionResult.fail(ErrorCode.UNAUTHENTICATED, "Unauthorized")

    try:
        user = resolve_or_provision_user(db, identity)
    except IntegrityError:
        db.rollback()
        logger.warning("Identity %s conflicts with an existing account", identity.uid)
        return ActionResult.fail(ErrorCode.INVALID_OPERATION, "Identity conflicts with an existing account")
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error syncing user %s", identity.uid)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Error syncing user")

    return ActionResult.ok(UserRead.model_validate(user))


def get_user_by_external_id(db: Session, firebase_uid: str) -> ActionResult:
    """User for an external id with follower/following/post counts; data is None if unknown."""
    try:
        user = get_user_by_firebase_uid(db, firebase_uid)
        if not user:
            return ActionResult.ok(None)

        counts = compute_counts(db, user.id)
        profile = UserWithCounts(
            **UserRead.model_validate(user).model_dump(),
            followers_count=counts["followers_count"],
            following_count=counts["following_count"],
            posts_count=count_posts(db, user.id),
        )
    except SQLAlchemyError:
        logger.exception("Error fetching user %s", firebase_uid)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Failed to fetch user")

    return ActionResult.ok(profile)
