import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load a local .env file if present (no-op otherwise).
load_dotenv()


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Read a yes/no style env var (1/0, true/false, yes/no, y/n, on/off).

    Unset or unrecognized values give `default`.
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default)


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    Field defaults are the local-dev values, `from_env()` overlays the
    environment (and a `.env` file, loaded at import).
    """

    # -----------------
    # Storage
    # -----------------
    # Preferred: set WORKFORCE_DATABASE_URL (or DATABASE_URL) to use Postgres.
    # Fallback: WORKFORCE_DB_PATH for SQLite.
    DB_DSN: str = ""

    # Upper bound on concurrently open storage connections.
    DB_POOL_SIZE: int = 10
    DB_CONNECT_TIMEOUT_SECONDS: int = 10
    # Postgres only; 0 disables the server-side statement timeout.
    DB_STATEMENT_TIMEOUT_MS: int = 15000

    # -----------------
    # Auth (JWT)
    # -----------------
    # The default only exists for local runs. Always set AUTH_JWT_SECRET when deployed.
    AUTH_JWT_SECRET: str = "dev-only-secret-change-me-before-deploying"
    AUTH_TOKEN_EXPIRE_MINUTES: int = 60

    # Bootstrap first admin user if users table is empty.
    # Set the password to an empty string to disable bootstrapping.
    AUTH_BOOTSTRAP_ADMIN_EMAIL: str = "admin@example.com"
    AUTH_BOOTSTRAP_ADMIN_USERNAME: str = "admin"
    AUTH_BOOTSTRAP_ADMIN_PASSWORD: str = "admin"

    # When enabled, every /api/<resource> route requires a valid bearer token
    # and /api/users additionally requires the admin role.
    AUTH_PROTECT_RESOURCES: bool = False

    # -----------------
    # HTTP
    # -----------------
    CORS_ALLOW_ORIGINS: str = "*"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3000

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            DB_DSN=(
                os.environ.get("WORKFORCE_DATABASE_URL")
                or os.environ.get("DATABASE_URL")
                or os.environ.get("WORKFORCE_DB_PATH", "./workforce.sqlite")
            ),
            DB_POOL_SIZE=_env_int("DB_POOL_SIZE", 10),
            DB_CONNECT_TIMEOUT_SECONDS=_env_int("DB_CONNECT_TIMEOUT_SECONDS", 10),
            DB_STATEMENT_TIMEOUT_MS=_env_int("DB_STATEMENT_TIMEOUT_MS", 15000),
            AUTH_JWT_SECRET=_env_str("AUTH_JWT_SECRET", "dev-only-secret-change-me-before-deploying"),
            AUTH_TOKEN_EXPIRE_MINUTES=_env_int("AUTH_TOKEN_EXPIRE_MINUTES", 60),
            AUTH_BOOTSTRAP_ADMIN_EMAIL=_env_str("AUTH_BOOTSTRAP_ADMIN_EMAIL", "admin@example.com"),
            AUTH_BOOTSTRAP_ADMIN_USERNAME=_env_str("AUTH_BOOTSTRAP_ADMIN_USERNAME", "admin"),
            AUTH_BOOTSTRAP_ADMIN_PASSWORD=_env_str("AUTH_BOOTSTRAP_ADMIN_PASSWORD", "admin"),
            AUTH_PROTECT_RESOURCES=_env_bool("AUTH_PROTECT_RESOURCES", False) is True,
            CORS_ALLOW_ORIGINS=_env_str("CORS_ALLOW_ORIGINS", "*"),
            API_HOST=_env_str("API_HOST", "0.0.0.0"),
            # PORT is what most hosting platforms inject.
            API_PORT=_env_int("API_PORT", _env_int("PORT", 3000)),
        )


def load_config() -> Config:
    return Config.from_env()
