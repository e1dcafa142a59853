"""
Password hashing and access tokens for catalog users.

The access token only carries who is calling: `sub` is the `usuarios.id`
that product ownership (`produtos.usuario_id`) is compared against.
"""

from __future__ import annotations

import time
from typing import Any
from uuid import UUID

import bcrypt
import jwt

from core import config

TOKEN_TYPE = "access"


class AuthSecurityError(RuntimeError):
    pass


def jwt_secret() -> str:
    # Development default; deployments set JWT_SECRET.
    return config.env_str("JWT_SECRET", "dev-change-this-secret")


def jwt_algorithm() -> str:
    return config.env_str("JWT_ALG", "HS256")


def access_token_expire_minutes() -> int:
    return config.env_int("ACCESS_TOKEN_EXPIRE_MIN", 15)


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """
    False for empty input or a stored value that is not a bcrypt hash.
    """
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def build_access_token(*, user_id: str, email: str) -> str:
    issued_at = now_epoch_s()
    return jwt.encode(
        {
            "sub": str(user_id),
            "email": email,
            "type": TOKEN_TYPE,
            "iat": issued_at,
            "exp": issued_at + access_token_expire_minutes() * 60,
        },
        jwt_secret(),
        algorithm=jwt_algorithm(),
    )


def decode_access_token(token: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError("Access token is empty.")

    try:
        payload = jwt.decode(raw, jwt_secret(), algorithms=[jwt_algorithm()])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError("Invalid access token.") from exc

    if str(payload.get("type") or "").strip().lower() != TOKEN_TYPE:
        raise AuthSecurityError("Token is not an access token.")
    return payload


def token_user_id(payload: dict[str, Any]) -> UUID:
    """
    The user id a decoded access token was issued for.
    """
    try:
        return UUID(str(payload.get("sub") or "").strip())
    except ValueError as exc:
        raise AuthSecurityError("Invalid access token subject.") from exc
