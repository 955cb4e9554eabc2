from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict

from workforce_api import __version__
from workforce_api.api.routes import build_resource_router, build_schedules_router
from workforce_api.auth import get_current_user, require_admin
from workforce_api.auth.crud import (
    bootstrap_admin_if_needed,
    create_user,
    list_users,
    verify_user_credentials,
)
from workforce_api.auth.security import create_access_token, hash_password
from workforce_api.config import Config, load_config
from workforce_api.context import AppContext, build_context, get_context
from workforce_api.db import init_db
from workforce_api.errors import Unauthorized, ValidationError, install_error_handlers, storage_errors
from workforce_api.resources.registry import RESOURCES, SCHEDULES


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


class RegisterRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = None
    password: Optional[str] = None


def create_app(cfg: Optional[Config] = None) -> FastAPI:
    cfg = cfg or load_config()
    ctx = build_context(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Ensure schema exists.
        init_db(ctx.db)

        # First start on an empty users table seeds the admin account.
        boot = bootstrap_admin_if_needed(ctx.db, cfg)
        if boot:
            _debug(f"Bootstrapped initial admin user: email={boot.get('email')} role={boot.get('role')}")
        try:
            yield
        finally:
            ctx.db.close()

    app = FastAPI(title="Workforce Management API", version=__version__, lifespan=lifespan)
    # Handlers reach config + storage through this (see context.get_context).
    app.state.ctx = ctx

    install_error_handlers(app)

    _cors_origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
    if _cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=_cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # -----------------------------
    # Health
    # -----------------------------

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok"}

    # -----------------------------
    # Auth
    # -----------------------------

    @app.post("/api/auth/register", status_code=201)
    def auth_register(payload: RegisterRequest, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
        missing = [
            f
            for f in ("username", "email", "password")
            if not (getattr(payload, f) or "").strip()
        ]
        if missing:
            raise ValidationError("Missing required fields: " + ", ".join(missing), kind="MissingFields")

        password_hash = hash_password(str(payload.password))
        with storage_errors("registering user", duplicate_message="Email already exists"):
            with ctx.db.connect() as conn:
                user_id = create_user(
                    conn,
                    username=str(payload.username),
                    email=str(payload.email),
                    password_hash=password_hash,
                )
        return {"message": "User registered successfully", "id": user_id}

    @app.post("/api/auth/login")
    def auth_login(payload: LoginRequest, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
        if not (payload.email or "").strip() or not payload.password:
            raise ValidationError("Missing required fields", kind="MissingFields")

        with storage_errors("logging in"):
            user_row = verify_user_credentials(ctx.db, str(payload.email), str(payload.password))
        if user_row is None:
            raise Unauthorized("Invalid credentials", kind="InvalidCredentials")

        token = create_access_token(
            secret=ctx.jwt_secret,
            user_id=int(user_row["id"]),
            role=str(user_row["role"]),
            expires_delta=ctx.token_ttl,
        )
        return {
            "token": token,
            "user": {
                "id": int(user_row["id"]),
                "username": user_row["username"],
                "role": user_row["role"],
            },
        }

    @app.get("/api/auth/profile")
    def auth_profile(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        return user

    @app.get("/api/auth/admin")
    def auth_admin(_admin: Dict[str, Any] = Depends(require_admin)) -> Dict[str, Any]:
        return {"message": "Admin route"}

    # -----------------------------
    # Users
    # -----------------------------

    users_deps = [Depends(require_admin)] if cfg.AUTH_PROTECT_RESOURCES else []

    @app.get("/api/users", dependencies=users_deps)
    def users_list(ctx: AppContext = Depends(get_context)) -> List[Dict[str, Any]]:
        with storage_errors("fetching users"):
            with ctx.db.connect() as conn:
                return list_users(conn)

    # -----------------------------
    # Resources
    # -----------------------------

    resource_deps = [Depends(get_current_user)] if cfg.AUTH_PROTECT_RESOURCES else []
    for res in RESOURCES.values():
        if res is SCHEDULES:
            app.include_router(build_schedules_router(dependencies=resource_deps))
        else:
            app.include_router(build_resource_router(res, dependencies=resource_deps))

    return app


# `uvicorn workforce_api.api.server:app`
app = create_app()
