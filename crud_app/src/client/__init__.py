"""
Async client for the users & tasks REST backend.

``UserGateway``/``TaskGateway`` wrap the HTTP calls and turn every failure into a
``DomainError``; ``UsersComponent``/``TasksComponent`` keep a local list in sync
with the server.
"""
from .components import LoadState, TasksComponent, UsersComponent
from .errors import DomainError, Err, Ok, Result
from .gateway import TaskGateway, UserGateway
from .models import Task, TaskDraft, User, UserDraft

__all__ = [
    "DomainError",
    "Err",
    "LoadState",
    "Ok",
    "Result",
    "Task",
    "TaskDraft",
    "TaskGateway",
    "TasksComponent",
    "User",
    "UserDraft",
    "UserGateway",
    "UsersComponent",
]
