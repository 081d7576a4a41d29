"""Thread-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ThreadCreate(BaseModel):
    """Schema for creating a new thread or reply."""

    title: str | None = Field(None, max_length=300)
    content: str = Field(..., min_length=1, max_length=10000)
    parent_thread: int | None = Field(
        None, ge=1, le=2**63 - 1, description="Parent thread ID for replies"
    )


class ThreadUpdate(BaseModel):
    """Schema for replacing a thread's editable fields."""

    title: str | None = Field(None, max_length=300)
    content: str = Field(..., min_length=1, max_length=10000)
    parent_thread: int | None = Field(
        None, ge=1, le=2**63 - 1, description="Parent thread ID for replies"
    )


class AuthorProfile(BaseModel):
    """Public slice of the author's profile attached to each thread."""

    id: int
    handle: str | None
    profile_img_url: str | None

    model_config = ConfigDict(from_attributes=True)


class ThreadOut(BaseModel):
    """A thread as read back from the store, with its derived counters."""

    id: int
    user_id: int
    title: str | None
    content: str
    parent_thread: int | None
    created_at: datetime
    updated_at: datetime
    vote_score: int = 0
    view_count: int = 0
    reply_count: int = 0
    author: AuthorProfile | None = None


class ReactedThreadOut(ThreadOut):
    """A thread in the viewer's upvoted or downvoted list."""

    reacted_at: datetime
