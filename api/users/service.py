"""
User business logic.
"""

from __future__ import annotations

import logging
from uuid import UUID

import asyncpg

from auth import security
from core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError

from . import repository, schemas

logger = logging.getLogger(__name__)


def _to_user_response(user_row: dict) -> schemas.UserResponse:
    return schemas.UserResponse(
        id=user_row["id"],
        name=str(user_row["name"]),
        email=str(user_row["email"]),
        is_active=bool(user_row["is_active"]),
        created_at=user_row["created_at"],
    )


def _ensure_self(user_id: UUID, *, current_user_id: str) -> None:
    if str(user_id) != str(current_user_id):
        logger.warning("user_access_denied user_id=%s current_user_id=%s", user_id, current_user_id)
        raise AuthorizationError("Users may only change their own account.")


async def register(payload: schemas.CreateUserRequest) -> schemas.UserResponse:
    existing = await repository.get_user_by_email(payload.email)
    if existing is not None:
        raise ConflictError("Email is already registered.")

    password_hash = security.hash_password(payload.password)
    try:
        user_row = await repository.create_user(
            name=payload.name,
            email=payload.email,
            password_hash=password_hash,
        )
    except asyncpg.UniqueViolationError as exc:
        raise ConflictError("Email is already registered.") from exc

    logger.info("user_created user_id=%s", user_row["id"])
    return _to_user_response(user_row)


async def get_user(user_id: UUID) -> schemas.UserResponse:
    user_row = await repository.get_user_by_id(user_id)
    if user_row is None:
        raise NotFoundError("User not found.")
    return _to_user_response(user_row)


async def list_users(*, limit: int = 100, offset: int = 0) -> schemas.UserListResponse:
    rows = await repository.list_users(limit=limit, offset=offset)
    return schemas.UserListResponse(
        users=[_to_user_response(row) for row in rows],
        count=len(rows),
        limit=limit,
        offset=offset,
    )


async def update_user(
    user_id: UUID,
    payload: schemas.UpdateUserRequest,
    *,
    current_user_id: str,
) -> schemas.UserResponse:
    _ensure_self(user_id, current_user_id=current_user_id)

    patch = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    if not patch:
        raise ValidationError("Provide at least one field to update.")

    fields: dict = {}
    if "name" in patch:
        fields["name"] = patch["name"]
    if "email" in patch:
        other = await repository.get_user_by_email(patch["email"])
        if other is not None and str(other["id"]) != str(user_id):
            raise ConflictError("Email is already registered.")
        fields["email"] = patch["email"]
    if "password" in patch:
        fields["password_hash"] = security.hash_password(patch["password"])

    try:
        user_row = await repository.update_user(user_id, fields=fields)
    except asyncpg.UniqueViolationError as exc:
        raise ConflictError("Email is already registered.") from exc
    if user_row is None:
        raise NotFoundError("User not found.")

    logger.info("user_updated user_id=%s fields=%s", user_id, ",".join(sorted(fields)))
    return _to_user_response(user_row)


async def delete_user(user_id: UUID, *, current_user_id: str) -> schemas.DeleteUserResponse:
    _ensure_self(user_id, current_user_id=current_user_id)

    row = await repository.soft_delete_user(user_id)
    if row is None:
        raise NotFoundError("User not found.")

    logger.info("user_deleted user_id=%s", user_id)
    return schemas.DeleteUserResponse(user_id=row["id"], deleted_at=row["deleted_at"])


def me(current_user: dict) -> schemas.UserResponse:
    return _to_user_response(current_user)
