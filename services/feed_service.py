import logging

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from models.Comment import Comment
from models.Post import Post
from schemas import ActionResult, CommentRead, ErrorCode, FeedPost, LikeRead, UserSummary

logger = logging.getLogger("socialnet.api.feed")


def _to_feed_post(post: Post) -> FeedPost:
    """Helper to convert a loaded Post into the denormalized feed entry"""
    return FeedPost(
        id=post.id,
        author_id=post.author_id,
        content=post.content,
        image_url=post.image_url,
        created_at=post.created_at,
        updated_at=post.updated_at,
        author=UserSummary.model_validate(post.author),
        comments=[CommentRead.model_validate(comment) for comment in post.comments],
        likes=[LikeRead(user_id=like.user_id) for like in post.likes],
        _count={"likes": len(post.likes)},
    )


def list_posts(db: Session) -> ActionResult:
    """
    Every post, newest first, with author, comments (each with its author)
    and likes. Comments and likes are loaded with one query per group,
    restricted to the fetched posts. No pagination.
    """
    try:
        posts = (
            db.query(Post)
            .options(
                joinedload(Post.author),
                selectinload(Post.comments).joinedload(Comment.author),
                selectinload(Post.likes),
            )
            .order_by(desc(Post.created_at))
            .all()
        )
    except SQLAlchemyError:
        logger.exception("Error in list_posts")
        return ActionResult.fail(ErrorCode.STORE_FAILURE, "Failed to fetch posts")

    return ActionResult.ok([_to_feed_post(post) for post in posts])
