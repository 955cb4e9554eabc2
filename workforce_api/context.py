from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from fastapi import HTTPException, Request

from workforce_api.config import Config
from workforce_api.db import Database


@dataclass(frozen=True)
class AppContext:
    """Everything a request handler needs that outlives the request.

    Built once by the app factory and stored on `app.state.ctx`.
    """

    cfg: Config
    db: Database

    @property
    def jwt_secret(self) -> str:
        return self.cfg.AUTH_JWT_SECRET

    @property
    def token_ttl(self) -> timedelta:
        return timedelta(minutes=int(self.cfg.AUTH_TOKEN_EXPIRE_MINUTES))


def build_context(cfg: Config) -> AppContext:
    return AppContext(cfg=cfg, db=Database.from_config(cfg))


def get_context(request: Request) -> AppContext:
    ctx = getattr(request.app.state, "ctx", None)
    if ctx is None:
        raise HTTPException(status_code=500, detail="server_config_missing")
    return ctx
