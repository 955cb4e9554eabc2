"""Authentication / authorization helpers.

Auth is intentionally lightweight:

- Users table (email/password hash + free-text role)
- Stateless JWT access tokens (HS256), sent as `Authorization: Bearer <token>`
- Role gating via FastAPI dependencies (`require_roles`, `require_admin`)
"""

from .deps import get_current_user, require_admin, require_roles
from .crud import bootstrap_admin_if_needed, create_user

__all__ = [
    "get_current_user",
    "require_admin",
    "require_roles",
    "bootstrap_admin_if_needed",
    "create_user",
]
