from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from workforce_api.context import AppContext, get_context
from workforce_api.errors import Forbidden, Unauthorized

from .security import TokenError, verify_access_token


_bearer = HTTPBearer(auto_error=False)


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    ctx: AppContext = Depends(get_context),
) -> Dict[str, Any]:
    """Authenticate a request from `Authorization: Bearer <jwt>`.

    Verification is stateless (signature + expiry only). On success the
    identity is attached to `request.state.identity` for later dependencies.
    """

    if credentials is None or not credentials.credentials:
        raise Unauthorized("No token provided", kind="NoToken")

    try:
        claims = verify_access_token(token=credentials.credentials, secret=ctx.jwt_secret)
    except TokenError as e:
        _debug(f"Rejected token: {e.reason}")
        raise Unauthorized(e.reason, kind=type(e).__name__)

    identity = {
        "id": claims["sub"],
        "role": claims.get("role"),
        "iat": claims.get("iat"),
        "exp": claims.get("exp"),
    }
    request.state.identity = identity
    return identity


def require_roles(*roles: str) -> Callable[..., Dict[str, Any]]:
    """Build a dependency that admits only identities holding one of `roles`."""

    allowed = frozenset(roles)

    def _require(
        request: Request,
        _user: Dict[str, Any] = Depends(get_current_user),
    ) -> Dict[str, Any]:
        # Read back what authentication attached; never trust a missing identity.
        identity = getattr(request.state, "identity", None)
        if not identity:
            raise Unauthorized("Not authenticated", kind="NoIdentity")
        if identity.get("role") not in allowed:
            raise Forbidden("Forbidden: insufficient role")
        return identity

    return _require


require_admin = require_roles("admin")
