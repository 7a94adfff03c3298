from . import users
from . import posts
from . import follows
from . import notifications
from . import profiles

__all__ = [
    "users",
    "posts",
    "follows",
    "notifications",
    "profiles",
]
