from __future__ import annotations

from pydantic import BaseModel, Field


# PUBLIC_INTERFACE
class User(BaseModel):
    """A user as seen by the client. ``id`` is 0 on a draft that was never saved."""

    id: int = Field(default=0, description="Server-assigned identifier")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Contact email")


# PUBLIC_INTERFACE
class Task(BaseModel):
    """A task as seen by the client."""

    id: int = Field(default=0, description="Server-assigned identifier")
    title: str = Field(..., description="Short title")
    description: str = Field(default="", description="Detailed description")
    completed: bool = Field(default=False, description="Completion status flag")


class UserDraft(BaseModel):
    name: str
    email: str


class TaskDraft(BaseModel):
    title: str
    description: str = ""
