"""Follow listing schemas."""

from datetime import datetime

from pydantic import BaseModel


class FollowEntry(BaseModel):
    """A user appearing in a follower or following list."""

    id: int
    name: str | None
    handle: str | None
    profile_img_url: str | None
    bio: str | None
    followed_at: datetime
