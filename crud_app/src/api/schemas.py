from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Largest id a signed 64-bit primary key can hold; path ids outside 1..MAX_ID are rejected
MAX_ID = 2**63 - 1


def _require_text(value: str, field: str) -> str:
    """Strip whitespace and reject blank values (presence check only)."""
    if value is None:
        raise ValueError(f"{field} is required")
    s = value.strip()
    if not s:
        raise ValueError(f"{field} must not be blank")
    return s


# PUBLIC_INTERFACE
class UserCreate(BaseModel):
    """
    Draft of a user. Any client-supplied id is ignored; the store assigns one.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"example": {"name": "Ada Lovelace", "email": "ada@x.com"}},
    )

    name: str = Field(..., description="Display name of the user")
    email: str = Field(..., description="Contact email of the user")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _require_text(v, "name")

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _require_text(v, "email")


# PUBLIC_INTERFACE
class UserOut(BaseModel):
    """
    Schema returned by the API for a user.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"id": 3, "name": "Ada Lovelace", "email": "ada@x.com"}}
    )

    id: int = Field(..., description="Unique identifier of the user")
    name: str = Field(..., description="Display name of the user")
    email: str = Field(..., description="Contact email of the user")


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Draft of a task. Tasks always start out not completed, so a client-supplied
    ``completed`` (or ``id``) is ignored.
    """

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={"example": {"title": "Buy groceries", "description": "Milk, eggs, bread"}},
    )

    title: str = Field(..., description="Short title for the task")
    description: Optional[str] = Field(default="", description="Optional detailed description")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _require_text(v, "title")

    @field_validator("description")
    @classmethod
    def normalize_description(cls, v: Optional[str]) -> str:
        # null and missing are both stored as an empty description
        return v or ""


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 5,
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Short title for the task")
    description: str = Field(default="", description="Detailed description")
    completed: bool = Field(..., description="Completion status flag")
