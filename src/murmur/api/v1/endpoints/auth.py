# src/murmur/api/v1/endpoints/auth.py
"""Authentication endpoints for the Murmur API."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Response, status

from murmur.api.v1.dependencies import CurrentUserDep, SessionDep, UserServiceDep
from murmur.core.security import issue_access_token
from murmur.models import User
from murmur.schemas.user import (
    AuthResponse,
    LoginRequest,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserPrivate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        user=UserPrivate.model_validate(user),
        access_token=issue_access_token(user.id),
        token_type="bearer",
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    db: SessionDep,
    users: UserServiceDep,
) -> AuthResponse:
    """Create an account and return it together with an access token.

    Raises:
        ConflictError: If the username or email is already taken (409).
    """
    user = users.create(
        username=payload.username,
        email=payload.email,
        display_name=payload.display_name,
        password=payload.password,
    )
    db.commit()
    db.refresh(user)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(payload: LoginRequest, db: SessionDep, users: UserServiceDep) -> AuthResponse:
    """Exchange an email-or-username and password for an access token."""
    user = users.authenticate(payload.identifier, payload.password)
    db.commit()
    db.refresh(user)
    logger.info("User %s logged in", user.id)
    return _auth_response(user)


@router.get("/me", response_model=UserPrivate)
async def read_me(current_user: CurrentUserDep) -> User:
    return current_user


@router.put("/me", response_model=UserPrivate)
async def update_me(
    payload: ProfileUpdateRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
    users: UserServiceDep,
) -> User:
    """Update display name, bio or avatar; omitted fields are left unchanged."""
    users.update_profile(
        current_user,
        display_name=payload.display_name,
        bio=payload.bio,
        avatar=payload.avatar,
    )
    db.commit()
    db.refresh(current_user)
    return current_user


@router.put("/me/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    payload: PasswordChangeRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
    users: UserServiceDep,
) -> Response:
    users.change_password(current_user, payload.current_password, payload.new_password)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
