import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from models.Comment import Comment
from models.Like import Like
from models.Notification import NotificationType
from models.Post import Post
from schemas import ActionResult, CommentRead, ErrorCode, PostRead
from services.notification_service import emit_notification

logger = logging.getLogger("socialnet.api.posts")


def count_posts(db: Session, user_id: str) -> int:
    return db.query(Post).filter(Post.author_id == user_id).count()


def create_post(db: Session, actor_id: Optional[str], content: Optional[str], image_url: Optional[str]) -> ActionResult:
    if not actor_id:
        return ActionResult.fail(ErrorCode.UNAUTHENTICATED, "Unauthorized")

    content = content.strip() if content else None
    if not content and not image_url:
        return ActionResult.fail(ErrorCode.INVALID_OPERATION, "A post needs text or an image")

    try:
        post = Post(author_id=actor_id, content=content, image_url=image_url)
        db.add(post)
        db.commit()
        db.refresh(post)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error in create_post")
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Error creating post")

    return ActionResult.ok(PostRead.model_validate(post))


def _get_like(db: Session, actor_id: str, post_id: str) -> Optional[Like]:
    return db.query(Like).filter(
        Like.post_id == post_id,
        Like.user_id == actor_id
    ).first()


def toggle_like(db: Session, actor_id: Optional[str], post_id: str) -> ActionResult:
    """
    Like `post_id`, or remove the like if it already exists.
    The like and the author's LIKE notification are committed together;
    the (user, post) unique constraint settles concurrent double-likes.
    """
    if not actor_id:
        return ActionResult.fail(ErrorCode.UNAUTHENTICATED, "Unauthorized")

    try:
        post = db.query(Post).filter(Post.id == post_id).first()
        if not post:
            return ActionResult.fail(ErrorCode.NOT_FOUND, "Post not found")

        existing = _get_like(db, actor_id, post_id)
        if existing:
            db.delete(existing)
            db.commit()
            return ActionResult.ok({"liked": False})

        db.add(Like(post_id=post_id, user_id=actor_id))
        db.flush()
        emit_notification(
            db,
            recipient_id=post.author_id,
            actor_id=actor_id,
            type=NotificationType.LIKE,
            post_id=post_id,
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        return _settle_like_conflict(db, actor_id, post_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error in toggle_like on %s", post_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Error toggling like")

    return ActionResult.ok({"liked": True})


def _settle_like_conflict(db: Session, actor_id: str, post_id: str) -> ActionResult:
    """Report what the store holds after a like insert hit a constraint."""
    try:
        if not db.query(Post.id).filter(Post.id == post_id).first():
            logger.info("Post %s deleted while %s was liking it", post_id, actor_id)
            return ActionResult.fail(ErrorCode.NOT_FOUND, "Post not found")
        liked = _get_like(db, actor_id, post_id) is not None
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error re-reading like on %s", post_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Error toggling like")

    if not liked:
        logger.error("Like on %s by %s rejected by the store", post_id, actor_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Error toggling like")

    # Lost a race against an identical like
    logger.info("Like on %s by %s already present", post_id, actor_id)
    return ActionResult.ok({"liked": True})


def create_comment(db: Session, actor_id: Optional[str], post_id: str, content: str) -> ActionResult:
    """
    Add a comment, then notify the post author in a second commit.
    A failure in the second step leaves the comment without a notification.
    """
    if not actor_id:
        return ActionResult.fail(ErrorCode.UNAUTHENTICATED, "Unauthorized")

    content = (content or "").strip()
    if not content:
        return ActionResult.fail(ErrorCode.INVALID_OPERATION, "Comment content cannot be empty")

    try:
        post = db.query(Post).filter(Post.id == post_id).first()
        if not post:
            return ActionResult.fail(ErrorCode.NOT_FOUND, "Post not found")
        author_id = post.author_id

        comment = Comment(content=content, post_id=post_id, author_id=actor_id)
        db.add(comment)
        db.commit()
        db.refresh(comment)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error in create_comment on %s", post_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Error creating comment")

    try:
        emit_notification(
            db,
            recipient_id=author_id,
            actor_id=actor_id,
            type=NotificationType.COMMENT,
            post_id=post_id,
            comment_id=comment.id,
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Comment %s saved but its notification was not", comment.id)

    return ActionResult.ok(CommentRead.model_validate(comment))


def delete_comment(db: Session, actor_id: Optional[str], comment_id: str) -> ActionResult:
    """Delete a comment owned by the caller; anything else is a silent no-op."""
    if not actor_id:
        return ActionResult.fail(ErrorCode.UNAUTHENTICATED, "Unauthorized")

    try:
        comment = db.query(Comment).filter(
            Comment.id == comment_id,
            Comment.author_id == actor_id
        ).first()
        if comment:
            db.delete(comment)
            db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Error in delete_comment %s", comment_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Error deleting comment")

    return ActionResult.ok()


def delete_post(db: Session, actor_id: Optional[str], post_id: str) -> ActionResult:
    """Delete a post (only author can delete). Likes, comments and notifications go with it."""
    try:
        post = db.query(Post).filter(Post.id == post_id).first()
        if not post:
            return ActionResult.fail(ErrorCode.NOT_FOUND, "Post not found")

        if not actor_id:
            return ActionResult.fail(ErrorCode.UNAUTHENTICATED, "Unauthorized")
        if post.author_id != actor_id:
            return ActionResult.fail(ErrorCode.FORBIDDEN, "Unauthorized - no delete permission")

        db.delete(post)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to delete post %s", post_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Failed to delete post")

    return ActionResult.ok()


def get_comments(db: Session, post_id: str) -> ActionResult:
    try:
        if not db.query(Post.id).filter(Post.id == post_id).first():
            return ActionResult.fail(ErrorCode.NOT_FOUND, "Post not found")

        comments = (
            db.query(Comment)
            .options(joinedload(Comment.author))
            .filter(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc())
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Error fetching comments for %s", post_id)
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Failed to fetch comments")

    return ActionResult.ok([CommentRead.model_validate(c) for c in comments])
