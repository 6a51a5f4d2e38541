from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path, Request, status

from ..errors import NotFoundError, store_failures
from ..repositories import UserRepository
from ..schemas import MAX_ID, UserCreate, UserOut

router = APIRouter(
    prefix="/api/users",
    tags=["users"],
)


def _get_repo(request: Request) -> UserRepository:
    """
    Dependency returning the users store owned by the running application.
    """
    return request.app.state.users


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[UserOut],
    summary="List Users",
    description="Return every user in insertion order.",
    responses={
        200: {"description": "Users retrieved successfully"},
        500: {"description": "Store unavailable"},
    },
)
def list_users(repo: UserRepository = Depends(_get_repo)) -> List[UserOut]:
    with store_failures("users_fetch_failed", "Error fetching users"):
        users = repo.list()
    return [UserOut(**u) for u in users]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    description="Create a user. The server assigns the id; any id in the payload is ignored.",
    responses={
        201: {"description": "User created successfully"},
        400: {"description": "Validation error"},
        500: {"description": "Store unavailable"},
    },
)
def create_user(payload: UserCreate, repo: UserRepository = Depends(_get_repo)) -> UserOut:
    with store_failures("user_create_failed", "Error creating user"):
        created = repo.create(payload)
    return UserOut(**created)


# PUBLIC_INTERFACE
@router.delete(
    "/{user_id}",
    response_model=UserOut,
    summary="Delete User",
    description="Delete a user by ID and return the deleted user.",
    responses={
        200: {"description": "User deleted"},
        400: {"description": "Non-numeric or out-of-range id"},
        404: {"description": "User not found"},
        500: {"description": "Store unavailable"},
    },
)
def delete_user(
    user_id: int = Path(..., ge=1, le=MAX_ID, description="Id of the user to delete"),
    repo: UserRepository = Depends(_get_repo),
) -> UserOut:
    """
    Delete a user. Returns the removed user, 404 if no user has this id.
    """
    with store_failures("user_delete_failed", "Error deleting user"):
        deleted = repo.remove(user_id)
    if deleted is None:
        raise NotFoundError("User not found", code="user_not_found")
    return UserOut(**deleted)
