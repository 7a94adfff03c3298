import logging
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from models.Notification import Notification, NotificationType
from schemas import ActionResult, ErrorCode, NotificationRead

logger = logging.getLogger("socialnet.api.notifications")


def emit_notification(
    db: Session,
    recipient_id: str,
    actor_id: str,
    type: NotificationType,
    post_id: Optional[str] = None,
    comment_id: Optional[str] = None,
) -> Optional[Notification]:
    """Add a notification to the session unless the actor is the recipient.

    Does not commit: the caller owns the transaction. Returns None for a
    skipped self-notification.
    """
    if recipient_id == actor_id:
        return None

    if type in (NotificationType.LIKE, NotificationType.COMMENT) and post_id is None:
        raise ValueError(f"{type.value} notifications need a post_id")
    if type == NotificationType.COMMENT and comment_id is None:
        raise ValueError("COMMENT notifications need a comment_id")
    if type == NotificationType.FOLLOW and (post_id or comment_id):
        raise ValueError("FOLLOW notifications carry no post or comment")

    notification = Notification(
        user_id=recipient_id,
        creator_id=actor_id,
        type=type,
        post_id=post_id,
        comment_id=comment_id,
    )
    db.add(notification)
    return notification


def get_notifications(db: Session, user_id: Optional[str]) -> ActionResult:
    """Newest-first notifications for `user_id` with creator/post/comment context.

    Degrades to an empty list when unauthenticated or when the store fails.
    """
    if not user_id:
        return ActionResult.ok([])

    try:
        notifications = (
            db.query(Notification)
            .options(
                joinedload(Notification.creator),
                joinedload(Notification.post),
                joinedload(Notification.comment),
            )
            .filter(Notification.user_id == user_id)
            .order_by(desc(Notification.created_at))
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Error fetching notifications for %s", user_id)
        return ActionResult.ok([])

    return ActionResult.ok([NotificationRead.model_validate(n) for n in notifications])


def mark_notifications_as_read(db: Session, user_id: Optional[str], notification_ids: List[str]) -> ActionResult:
    """Set read=True on the caller's notifications among `notification_ids`.

    Empty input is a successful no-op; unknown ids are ignored.
    """
    if not user_id:
        return ActionResult.fail(ErrorCode.UNAUTHENTICATED, "Unauthorized")
    if not notification_ids:
        return ActionResult.ok()

    try:
        (
            db.query(Notification)
            .filter(Notification.id.in_(notification_ids), Notification.user_id == user_id)
            .update({Notification.read: True}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error marking notifications as read")
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Failed to mark notifications as read")

    return ActionResult.ok()


def get_unread_count(db: Session, user_id: Optional[str]) -> ActionResult:
    if not user_id:
        return ActionResult.ok(0)

    try:
        count = (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.read.is_(False))
            .count()
        )
    except SQLAlchemyError:
        logger.exception("Error counting unread notifications for %s", user_id)
        return ActionResult.ok(0)

    return ActionResult.ok(count)
