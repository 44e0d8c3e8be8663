"""Credential hashing and access-token helpers."""
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import nacl.pwhash
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError
from nacl.exceptions import CryptoError

from murmur.core.errors import InvalidTokenError, TokenExpiredError
from murmur.core.settings import settings


def hash_password(plain: str) -> str:
    """Return an argon2id hash of ``plain`` in libsodium's modular crypt format."""
    return nacl.pwhash.str(plain.encode("utf-8")).decode("ascii")


def verify_password(plain: str, hashed: str) -> bool:
    """Check ``plain`` against a hash produced by :func:`hash_password`.

    Returns:
        True on a match; False for a mismatch or an unreadable hash.
    """
    try:
        return nacl.pwhash.verify(hashed.encode("ascii"), plain.encode("utf-8"))
    except (CryptoError, UnicodeEncodeError):
        return False


def issue_access_token(user_id: int, ttl: timedelta | None = None) -> str:
    """Create a signed JWT whose subject is ``user_id``."""
    if ttl is None:
        ttl = timedelta(minutes=settings.access_token_expire_minutes)
    claims: dict[str, object] = {
        "sub": str(user_id),
        "exp": datetime.now(UTC) + ttl,
    }
    encoded_jwt: str = jwt.encode(
        claims,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def verify_access_token(token: str) -> int:
    """Return the user id carried by ``token``.

    Raises:
        TokenExpiredError: If the signature is valid but ``exp`` has passed.
        InvalidTokenError: For any other malformed or tampered token.
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except ExpiredSignatureError as err:
        raise TokenExpiredError() from err
    except JWTError as err:
        raise InvalidTokenError() from err

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError) as err:
        raise InvalidTokenError() from err
