"""Store capabilities and their SQLAlchemy implementations."""

from .follow_repo import FollowGraph, FollowRepository
from .thread_repo import ThreadRepository, ThreadStore
from .user_repo import UserDirectory, UserRepository
from .vote_repo import VoteLedger, VoteRepository

__all__ = [
    "FollowGraph", "FollowRepository",
    "ThreadRepository", "ThreadStore",
    "UserDirectory", "UserRepository",
    "VoteLedger", "VoteRepository",
]
