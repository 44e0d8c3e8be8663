"""Identity store: registration, credentials and profile mutation."""
from __future__ import annotations

import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from murmur.core.errors import ConflictError, InvalidCredentialsError, NotFoundError
from murmur.core.security import hash_password, verify_password
from murmur.db.time import utcnow
from murmur.models import User
from murmur.services.content import escape_like
from murmur.services.engagement import LikeService
from murmur.services.graph import FollowService

logger = logging.getLogger(__name__)

__all__ = ["UserService"]


class UserService:
    """CRUD-style helpers for managing users."""

    def __init__(
        self,
        db: Session,
        follows: FollowService | None = None,
        likes: LikeService | None = None,
    ) -> None:
        self.db = db
        self.follows = follows or FollowService(db)
        self.likes = likes or LikeService(db)

    def find_by_id(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def find_by_username(self, username: str) -> User | None:
        return self.db.query(User).filter(User.username == username).first()

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def get_or_404(self, user_id: int) -> User:
        """Return the user or raise :class:`NotFoundError`."""
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def create(self, username: str, email: str, display_name: str, password: str) -> User:
        """Register a new account with a hashed password.

        Raises:
            ConflictError: If the email or the username is already registered.
        """
        email = email.strip().lower()
        if self.find_by_email(email) is not None:
            raise ConflictError("Email already registered")
        if self.find_by_username(username) is not None:
            raise ConflictError("Username already taken")

        user = User(
            username=username,
            email=email,
            display_name=display_name.strip(),
            password_hash=hash_password(password),
        )
        try:
            with self.db.begin_nested():
                self.db.add(user)
                self.db.flush()
        except IntegrityError as err:
            # A concurrent registration claimed the key between check and insert.
            message = str(err.orig).lower()
            field = "Email already registered" if "email" in message else "Username already taken"
            raise ConflictError(field) from err

        logger.info("Registered user %s (%s)", user.id, user.username)
        return user

    def authenticate(self, identifier: str, password: str) -> User:
        """Resolve an email or username plus password to an active user.

        Unknown user, inactive account and wrong password are reported with
        the same error so callers cannot probe for accounts.

        Raises:
            InvalidCredentialsError: On any mismatch.
        """
        identifier = identifier.strip()
        user = (
            self.db.query(User)
            .filter(or_(User.email == identifier.lower(), User.username == identifier))
            .first()
        )
        if user is None or not user.is_active:
            raise InvalidCredentialsError()
        if not verify_password(password, user.password_hash):
            logger.info("Failed login for user %s", user.id)
            raise InvalidCredentialsError()

        user.last_login = utcnow()
        self.db.flush()
        return user

    def update_profile(
        self,
        user: User,
        *,
        display_name: str | None = None,
        bio: str | None = None,
        avatar: str | None = None,
    ) -> User:
        """Apply partial updates; fields left as None are unchanged."""
        if display_name is not None:
            user.display_name = display_name.strip()
        if bio is not None:
            user.bio = bio.strip()
        if avatar is not None:
            user.avatar = avatar
        self.db.flush()
        return user

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        """Replace the password after checking the current one.

        Raises:
            InvalidCredentialsError: If ``current_password`` is wrong.
        """
        if not verify_password(current_password, user.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")
        user.password_hash = hash_password(new_password)
        self.db.flush()
        logger.info("User %s changed password", user.id)

    def _search_query(self, query_text: str) -> Query[User]:
        pattern = f"%{escape_like(query_text)}%"
        return self.db.query(User).filter(
            User.is_active.is_(True),
            or_(
                User.username.ilike(pattern, escape="\\"),
                User.display_name.ilike(pattern, escape="\\"),
            ),
        )

    def search(self, query_text: str, page: int = 1, limit: int = 20) -> tuple[list[User], int]:
        """Find active users by username or display name, most followed first."""
        query = self._search_query(query_text)
        total = query.count()
        users = (
            query.order_by(User.followers_count.desc(), User.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return users, total

    def deactivate(self, user: User) -> User:
        user.is_active = False
        self.db.flush()
        logger.info("Deactivated user %s", user.id)
        return user

    def delete(self, user_id: int) -> bool:
        """Hard-delete a user and everything hanging off the account.

        Follow and like edges are removed explicitly; murmurs and
        notifications go with the row through the foreign-key cascade.
        Counters on other users and murmurs are not adjusted here.
        """
        user = self.find_by_id(user_id)
        if user is None:
            return False

        with self.db.begin_nested():
            self.follows.remove_all_for_user(user_id)
            self.likes.delete_all_for_user(user_id)
            self.db.delete(user)
            self.db.flush()
        self.db.expire_all()
        logger.warning("Hard-deleted user %s", user_id)
        return True
