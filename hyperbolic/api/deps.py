"""
hyperbolic.api.deps — FastAPI dependency injection
===================================================
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import Depends, Header
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from hyperbolic.config import HyperbolicConfig, load_config
from hyperbolic.context import RequestContext
from hyperbolic.database.engine import create_db_engine
from hyperbolic.errors import AuthenticationError

_WEAK_SECRETS = frozenset({
    "hyperbolic-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = "HS256"


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    too short (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> HyperbolicConfig:
    return load_config()


def get_session(engine: Annotated[Engine, Depends(get_engine)]):
    with Session(engine) as session:
        yield session


def decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except InvalidTokenError:
        raise AuthenticationError("Invalid token") from None
    if not payload.get("sub"):
        raise AuthenticationError("Invalid token")
    return payload


def get_request_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Caller identity from an optional bearer token.

    A missing header yields an anonymous context; a malformed or invalid
    token is rejected outright.
    """
    if not authorization:
        return RequestContext()
    if not authorization.startswith("Bearer "):
        raise AuthenticationError("Missing token")
    payload = decode_token(authorization.split(" ", 1)[1])
    return RequestContext(identity=str(payload["sub"]), is_staff=bool(payload.get("is_staff")))


def require_context(
    ctx: Annotated[RequestContext, Depends(get_request_context)],
) -> RequestContext:
    ctx.require_identity()
    return ctx


def require_staff(
    ctx: Annotated[RequestContext, Depends(get_request_context)],
) -> RequestContext:
    ctx.require_staff()
    return ctx
