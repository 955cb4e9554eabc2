from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

from workforce_api.util.time import utcnow


_pwd = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
_JWT_ALG = "HS256"


class TokenError(Exception):
    reason = "Invalid token"


class TokenMalformed(TokenError):
    reason = "Malformed token"


class TokenExpired(TokenError):
    reason = "Token expired"


class TokenInvalidSignature(TokenError):
    reason = "Invalid token signature"


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except (ValueError, TypeError):
        # Unknown or corrupted hash format.
        return False


def create_access_token(
    *,
    secret: str,
    user_id: int,
    role: str,
    expires_delta: timedelta,
) -> str:
    """Mint a signed token. A negative `expires_delta` yields an already-expired token."""
    if not secret:
        raise ValueError("jwt_secret_blank")

    now = utcnow()
    exp = now + expires_delta

    payload: Dict[str, Any] = {
        "sub": str(int(user_id)),
        "role": str(role),
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALG)


def verify_access_token(*, token: str, secret: str) -> Dict[str, Any]:
    """Verify signature and expiry, return the claims.

    Raises TokenMalformed when the token is not a compact JWS or lacks a
    usable subject, TokenExpired past `exp`, TokenInvalidSignature when any
    signed segment fails verification.
    """
    if not secret:
        raise ValueError("jwt_secret_blank")

    parts = (token or "").split(".")
    if len(parts) != 3 or not all(parts):
        raise TokenMalformed()

    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[_JWT_ALG],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpired() from e
    except jwt.MissingRequiredClaimError as e:
        raise TokenMalformed() from e
    except jwt.InvalidTokenError as e:
        # Header/payload/signature tampering all surface here once the
        # three-segment shape is intact.
        raise TokenInvalidSignature() from e

    try:
        claims["sub"] = int(claims["sub"])
    except (TypeError, ValueError) as e:
        raise TokenMalformed() from e
    return claims
