"""Shared API dependencies for authentication and service wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from murmur.core.errors import AuthError, InactiveAccountError
from murmur.core.security import verify_access_token
from murmur.core.settings import settings
from murmur.db.session import get_db
from murmur.models import User
from murmur.services import (
    FeedService,
    FollowService,
    LikeService,
    MurmurService,
    NotificationService,
    UserService,
)

logger = logging.getLogger(__name__)

# Missing headers are reported as Anonymous rather than rejected outright.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


@dataclass(frozen=True)
class Authenticated:
    user: User


@dataclass(frozen=True)
class Anonymous:
    pass


@dataclass(frozen=True)
class Rejected:
    reason: str


AuthResult = Authenticated | Anonymous | Rejected


def resolve_auth(credentials: CredentialsDep, db: SessionDep) -> AuthResult:
    """Classify the bearer credentials of the current request.

    Returns:
        ``Anonymous`` when no token was sent, ``Rejected`` when the token is
        bad or names a missing or inactive user, ``Authenticated`` otherwise.
    """
    if credentials is None or not credentials.credentials:
        return Anonymous()
    try:
        user_id = verify_access_token(credentials.credentials)
    except AuthError as err:
        return Rejected(err.message)

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        return Rejected(InactiveAccountError().message)
    return Authenticated(user)


AuthResultDep = Annotated[AuthResult, Depends(resolve_auth)]


def get_current_user(auth: AuthResultDep) -> User:
    """Require an authenticated user.

    Raises:
        HTTPException: 401 for anonymous or rejected requests.
    """
    if isinstance(auth, Authenticated):
        return auth.user
    detail = auth.reason if isinstance(auth, Rejected) else "Access token required"
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_optional_user(auth: AuthResultDep) -> User | None:
    """Return the caller when authenticated; a rejected token reads as anonymous."""
    if isinstance(auth, Authenticated):
        return auth.user
    if isinstance(auth, Rejected):
        logger.debug("Ignoring rejected token on optional-auth route: %s", auth.reason)
    return None


# Type aliases for current user dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]


def get_notification_service_dep(db: SessionDep) -> NotificationService:
    return NotificationService(db)


NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service_dep)]


def get_follow_service_dep(
    db: SessionDep, notifications: NotificationServiceDep
) -> FollowService:
    return FollowService(db, notifications)


def get_like_service_dep(db: SessionDep, notifications: NotificationServiceDep) -> LikeService:
    return LikeService(db, notifications)


FollowServiceDep = Annotated[FollowService, Depends(get_follow_service_dep)]
LikeServiceDep = Annotated[LikeService, Depends(get_like_service_dep)]


def get_murmur_service_dep(
    db: SessionDep, likes: LikeServiceDep, notifications: NotificationServiceDep
) -> MurmurService:
    return MurmurService(db, likes, notifications)


MurmurServiceDep = Annotated[MurmurService, Depends(get_murmur_service_dep)]


def get_user_service_dep(
    db: SessionDep, follows: FollowServiceDep, likes: LikeServiceDep
) -> UserService:
    return UserService(db, follows, likes)


def get_feed_service_dep(
    db: SessionDep, murmurs: MurmurServiceDep, likes: LikeServiceDep
) -> FeedService:
    return FeedService(db, murmurs, likes)


UserServiceDep = Annotated[UserService, Depends(get_user_service_dep)]
FeedServiceDep = Annotated[FeedService, Depends(get_feed_service_dep)]


def page_param(page: int = Query(1, ge=1, description="1-based page number")) -> int:
    return page


def limit_param(
    limit: int = Query(
        settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Items per page",
    ),
) -> int:
    return limit


PageDep = Annotated[int, Depends(page_param)]
LimitDep = Annotated[int, Depends(limit_param)]
