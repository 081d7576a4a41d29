"""SQLAlchemy models for the Threadline application."""

from .follow import Follow
from .thread import Thread
from .user import User
from .view import ThreadView
from .vote import ReactionType, Vote

__all__ = [
    "Follow",
    "Thread",
    "ThreadView",
    "User",
    "ReactionType", "Vote",
]
