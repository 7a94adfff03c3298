from .User import User
from .Post import Post
from .Comment import Comment
from .Like import Like
from .Follow import Follow
from .Notification import Notification, NotificationType

__all__ = [
    "User",
    "Post",
    "Comment",
    "Like",
    "Follow",
    "Notification",
    "NotificationType",
]
