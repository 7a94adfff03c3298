import logging
from typing import Optional

from sqlalchemy import distinct, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from models.Follow import Follow
from models.Notification import NotificationType
from models.User import User
from schemas import ActionResult, ErrorCode, FollowRead, SuggestedUser
from services.notification_service import emit_notification

logger = logging.getLogger("socialnet.api.follows")


def _get_follow(db: Session, follower_id: str, following_id: str) -> Optional[Follow]:
    return db.query(Follow).filter(
        Follow.follower_id == follower_id,
        Follow.following_id == following_id
    ).first()


def toggle_follow(db: Session, actor_id: Optional[str], target_id: str) -> ActionResult:
    """
    Follow `target_id`, or unfollow if the edge already exists.
    A new edge and its FOLLOW notification are committed together.
    """
    if not actor_id:
        return ActionResult.fail(ErrorCode.UNAUTHENTICATED, "Unauthorized")
    if actor_id == target_id:
        return ActionResult.fail(ErrorCode.INVALID_OPERATION, "You cannot follow yourself")

    try:
        if not db.query(User.id).filter(User.id == target_id).first():
            return ActionResult.fail(ErrorCode.NOT_FOUND, "User not found")

        existing = _get_follow(db, actor_id, target_id)
        if existing:
            db.delete(existing)
            db.commit()
            return ActionResult.ok({"following": False})

        db.add(Follow(follower_id=actor_id, following_id=target_id))
        db.flush()
        emit_notification(db, recipient_id=target_id, actor_id=actor_id, type=NotificationType.FOLLOW)
        db.commit()
    except IntegrityError:
        db.rollback()
        return _settle_follow_conflict(db, actor_id, target_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error in toggle_follow %s -> %s", actor_id, target_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Error toggling follow")

    return ActionResult.ok({"following": True})


def _settle_follow_conflict(db: Session, actor_id: str, target_id: str) -> ActionResult:
    """Report what the store holds after a follow insert hit a constraint."""
    try:
        if not db.query(User.id).filter(User.id == target_id).first():
            logger.info("User %s deleted while %s was following them", target_id, actor_id)
            return ActionResult.fail(ErrorCode.NOT_FOUND, "User not found")
        following = _get_follow(db, actor_id, target_id) is not None
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error re-reading follow %s -> %s", actor_id, target_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Error toggling follow")

    if not following:
        logger.error("Follow %s -> %s rejected by the store", actor_id, target_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Error toggling follow")

    # Lost a race against an identical follow
    logger.info("Follow %s -> %s already present", actor_id, target_id)
    return ActionResult.ok({"following": True})


def is_following(db: Session, actor_id: Optional[str], target_id: str) -> bool:
    """Check if the caller follows `target_id`; False whenever that cannot be determined."""
    if not actor_id:
        return False
    try:
        return _get_follow(db, actor_id, target_id) is not None
    except SQLAlchemyError:
        logger.exception("Error checking follow status")
        return False


def compute_counts(db: Session, user_id: str) -> dict:
    followers_count = (
        db.query(func.count(distinct(Follow.follower_id)))
        .filter(Follow.following_id == user_id)
        .scalar()
    )
    following_count = (
        db.query(func.count(distinct(Follow.following_id)))
        .filter(Follow.follower_id == user_id)
        .scalar()
    )
    return {
        "followers_count": followers_count or 0,
        "following_count": following_count or 0,
    }


def list_followers(db: Session, user_id: str) -> ActionResult:
    try:
        follows = db.query(Follow).filter(Follow.following_id == user_id).all()
    except SQLAlchemyError:
        logger.exception("Error listing followers of %s", user_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Failed to fetch followers")
    return ActionResult.ok([FollowRead.model_validate(f) for f in follows])


def list_following(db: Session, user_id: str) -> ActionResult:
    try:
        follows = db.query(Follow).filter(Follow.follower_id == user_id).all()
    except SQLAlchemyError:
        logger.exception("Error listing users followed by %s", user_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Failed to fetch following")
    return ActionResult.ok([FollowRead.model_validate(f) for f in follows])


def get_suggested_users(db: Session, actor_id: Optional[str], limit: int = 3) -> ActionResult:
    """
    Random users the caller does not follow yet, with their follower counts.
    Empty when unauthenticated or on any store failure.
    """
    if not actor_id:
        return ActionResult.ok([])

    followed = aliased(Follow)
    already_following = select(followed.following_id).where(followed.follower_id == actor_id)
    followers_count = func.count(Follow.follower_id).label("followers_count")

    try:
        rows = (
            db.query(User, followers_count)
            .outerjoin(Follow, Follow.following_id == User.id)
            .filter(User.id != actor_id, User.id.notin_(already_following))
            .group_by(User.id)
            .order_by(func.random())
            .limit(limit)
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Error fetching suggested users")
        return ActionResult.ok([])

    return ActionResult.ok([
        SuggestedUser(
            id=user.id,
            name=user.name,
            username=user.username,
            image_url=user.image_url,
            followers_count=count,
        )
        for user, count in rows
    ])
