"""FastAPI application exposing the user endpoints."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, List, NamedTuple, Optional

from email_validator import EmailNotValidError, validate_email
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import ServiceConfig
from .database import StorageError, UserStore, current_timestamp
from .models import User

logger = logging.getLogger("users_api.api")

NOT_FOUND_MESSAGE = "not found"


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be empty")
        return value

    @field_validator("email")
    @classmethod
    def _require_email_address(cls, value: str) -> str:
        # Stored exactly as submitted; display-name forms are not addresses.
        if "<" in value or ">" in value:
            raise ValueError("value is not a valid email address")
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValueError(f"value is not a valid email address: {exc}") from exc
        return value


class UserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    email: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        created_at=user.created_at,
    )


def error_response(status_code: int, message: str) -> JSONResponse:
    """Render the ``{"error": message}`` body shared by every failure."""

    return JSONResponse(status_code=status_code, content={"error": message})


def format_validation_errors(errors: Iterable[dict[str, Any]]) -> str:
    messages: List[str] = []
    for error in errors:
        location = [part for part in error.get("loc", ()) if isinstance(part, str) and part != "body"]
        message = str(error.get("msg") or "invalid value")
        if location:
            messages.append(f"{'.'.join(location)}: {message}")
        else:
            messages.append(message)
    return "; ".join(messages) or "invalid request"


def get_store(request: Request) -> UserStore:
    return request.app.state.database


def list_users(store: UserStore = Depends(get_store)) -> List[UserResponse]:
    return [user_to_response(user) for user in store.list_users()]


def create_user(payload: CreateUserRequest, store: UserStore = Depends(get_store)) -> UserResponse:
    user = store.create_user(
        payload.name,
        payload.email,
        created_at=current_timestamp(),
    )
    logger.info("Created user %s", user.id)
    return user_to_response(user)


def get_user(user_id: str, store: UserStore = Depends(get_store)) -> UserResponse:
    user = store.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    return user_to_response(user)


class Route(NamedTuple):
    method: str
    path: str
    endpoint: Callable[..., Any]
    status_code: int
    response_model: Any


USER_ROUTES = (
    Route("GET", "/", list_users, status.HTTP_200_OK, List[UserResponse]),
    Route("POST", "/", create_user, status.HTTP_201_CREATED, UserResponse),
    Route("GET", "/{user_id}", get_user, status.HTTP_200_OK, UserResponse),
)


def build_user_router(prefix: str) -> APIRouter:
    router = APIRouter(prefix=prefix)
    for route in USER_ROUTES:
        router.add_api_route(
            route.path,
            route.endpoint,
            methods=[route.method],
            status_code=route.status_code,
            response_model=route.response_model,
            name=route.endpoint.__name__,
        )
    return router


def create_app(
    *,
    database: UserStore,
    config: ServiceConfig | None = None,
) -> FastAPI:
    """Build the ASGI app around an already opened user store."""

    if config is None:
        config = ServiceConfig()

    app = FastAPI(
        title="Users API",
        description="CRUD-style endpoints over a single user table",
        version="1.0.0",
    )
    app.state.database = database
    app.include_router(build_user_router(config.route_prefix))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, format_validation_errors(exc.errors()))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(_: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        response = error_response(exc.status_code, detail)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error("Storage error during %s %s: %s", request.method, request.url.path, exc)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error during %s %s", request.method, request.url.path)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    return app


__all__ = [
    "CreateUserRequest",
    "USER_ROUTES",
    "UserResponse",
    "build_user_router",
    "create_app",
    "error_response",
    "format_validation_errors",
    "user_to_response",
]
