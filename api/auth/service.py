"""
Auth business logic.

Only identifies the requester: password login issues a short-lived access
token, and protected routes resolve that token back to an active user.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from users import repository as user_repository

from . import schemas, security

logger = logging.getLogger(__name__)


async def login(payload: schemas.LoginRequest) -> schemas.TokenResponse:
    user_row = await user_repository.get_user_by_email(payload.email)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    if not bool(user_row.get("is_active", False)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive.",
        )

    is_valid = security.verify_password(payload.password, str(user_row.get("password_hash") or ""))
    if not is_valid:
        logger.info("login_failed user_id=%s", user_row["id"])
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )

    access_token = security.build_access_token(
        user_id=str(user_row["id"]),
        email=str(user_row["email"]),
    )
    return schemas.TokenResponse(
        access_token=access_token,
        expires_in=security.access_token_expire_minutes() * 60,
    )


async def get_user_from_access_token(access_token: str) -> dict:
    try:
        payload = security.decode_access_token(access_token)
        user_id = security.token_user_id(payload)
    except security.AuthSecurityError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc

    user_row = await user_repository.get_user_by_id(user_id)
    if user_row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found.",
        )
    if not bool(user_row.get("is_active", False)):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User is inactive.",
        )
    return user_row
