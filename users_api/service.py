"""HTTP API exposing CRUD operations over the in-memory user store."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Literal

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from .config import Settings, load_settings
from .errors import UserNotFoundError
from .models import User
from .store import UserStore

logger = logging.getLogger("usersapi.service")


class CreateUserRequest(BaseModel):
    name: str
    email: str


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    created_at: datetime


class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    service: str


def _generate_user_id() -> str:
    return str(uuid.uuid4())


def _current_timestamp() -> datetime:
    return datetime.now(timezone.utc)


def build_user(payload: CreateUserRequest) -> User:
    """Turn a create request into a new :class:`User` with a fresh id."""

    return User(
        id=_generate_user_id(),
        name=payload.name,
        email=payload.email,
        created_at=_current_timestamp(),
    )


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        created_at=user.created_at,
    )


def create_app(
    *,
    store: UserStore | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create the users API application.

    The store lives on ``app.state`` for the lifetime of the application and
    reaches the handlers through a dependency.
    """

    if settings is None:
        settings = load_settings()
    if store is None:
        store = UserStore()

    app = FastAPI(
        title="Users API",
        description="In-memory CRUD service for user records",
        version="1.0.0",
    )
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=settings.trusted_proxy_hosts)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.store = store
    app.state.settings = settings

    def get_store() -> UserStore:
        return store

    def get_user(user_id: str, db: UserStore = Depends(get_store)) -> User:
        user = db.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    @app.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(service=settings.service_name)

    @app.get("/users", response_model=List[UserResponse])
    def list_users(db: UserStore = Depends(get_store)) -> List[UserResponse]:
        return [user_to_response(user) for user in db.list()]

    @app.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
    def create_user(payload: CreateUserRequest, db: UserStore = Depends(get_store)) -> UserResponse:
        user = build_user(payload)
        db.insert(user)
        logger.info("Created user %s (%d stored)", user.id, len(db))
        return user_to_response(user)

    @app.get("/users/{user_id}", response_model=UserResponse)
    def read_user(user: User = Depends(get_user)) -> UserResponse:
        return user_to_response(user)

    @app.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_user(user_id: str, db: UserStore = Depends(get_store)) -> Response:
        if not db.remove(user_id):
            raise UserNotFoundError(user_id)
        logger.info("Deleted user %s (%d stored)", user_id, len(db))
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.exception_handler(UserNotFoundError)
    async def handle_user_not_found(_: Request, exc: UserNotFoundError):
        logger.debug("Lookup for unknown user %s", exc.user_id)
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "User not found"})

    return app


__all__ = [
    "CreateUserRequest",
    "HealthResponse",
    "UserResponse",
    "build_user",
    "create_app",
    "user_to_response",
]
