from __future__ import annotations

from typing import TypedDict


# PUBLIC_INTERFACE
class UserEntity(TypedDict):
    """
    A user record as held by the resource stores.

    Fields:
    - id: Unique integer identifier, assigned by the store
    - name: Display name
    - email: Contact address (stored as given)
    """

    id: int
    name: str
    email: str


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A task record as held by the resource stores.

    Fields:
    - id: Unique integer identifier, assigned by the store
    - title: Short title
    - description: Free text, may be empty
    - completed: Completion flag, False on creation and only changed by toggling
    """

    id: int
    title: str
    description: str
    completed: bool
