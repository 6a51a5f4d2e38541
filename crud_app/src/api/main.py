import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import AppError, ValidationError
from .repositories import TaskRepository, UserRepository, build_repositories
from .routers import tasks as tasks_router
from .routers import users as users_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "users", "description": "List, create and delete users."},
    {"name": "tasks", "description": "List, create, toggle and delete tasks."},
]

_NOISY_LOGGERS = ("httpx", "sqlalchemy.engine", "uvicorn.access")


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the server process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError as ``{"error": code, "message": message}``."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Return a consistent JSON structure for request validation errors
    (non-numeric path ids, missing or blank required fields, malformed bodies).

    Response format:
        {
            "error": "validation_error",
            "message": "Request validation failed",
            "detail": [... pydantic/fastapi error details ...]
        }
    """
    body = ValidationError().to_dict()
    body["detail"] = jsonable_encoder(exc.errors())
    return JSONResponse(status_code=ValidationError.status_code, content=body)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=AppError().to_dict())


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    users: Optional[UserRepository] = None,
    tasks: Optional[TaskRepository] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    The stores are owned by the application (``app.state.users`` / ``app.state.tasks``)
    and reached by the routers through dependencies. Pass both stores or neither;
    when neither is given they are built from ``settings`` via ``build_repositories``.

    Raises:
        ValueError: if only one of ``users`` and ``tasks`` is given.
    """
    if (users is None) != (tasks is None):
        raise ValueError("create_app needs both users and tasks stores, or neither")
    settings = settings or get_settings()
    if users is None:
        users, tasks = build_repositories(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.users.close()
        app.state.tasks.close()

    app = FastAPI(
        title="Users & Tasks Backend",
        description="REST API for users and tasks backed by an in-memory or SQL store.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.users = users
    app.state.tasks = tasks

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS)
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and the active storage backend.
        """
        return {"message": "Healthy", "backend": settings.persistence_backend}

    app.include_router(users_router.router)
    app.include_router(tasks_router.router)
    return app
