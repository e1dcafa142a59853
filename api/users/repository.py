"""
User persistence helpers.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from core import db

_USER_SELECT = """
    id,
    nome AS name,
    email,
    is_active,
    created_at,
    updated_at,
    deleted_at
"""

# API field -> `usuarios` column.
USER_COLUMNS: dict[str, str] = {
    "name": "nome",
    "email": "email",
    "password_hash": "senha",
}


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


async def create_user(*, name: str, email: str, password_hash: str, is_active: bool = True) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO usuarios (nome, email, senha, is_active)
        VALUES ($1, $2, $3, $4)
        RETURNING {_USER_SELECT}
        """,
        name,
        normalize_email(email),
        password_hash,
        is_active,
    )
    if row is None:
        raise RuntimeError("Failed to create user.")
    return row


async def get_user_by_email(email: str) -> dict | None:
    """
    Active user by email, including the password hash (login only).
    """
    return await db.fetch_one(
        f"""
        SELECT {_USER_SELECT}, senha AS password_hash
        FROM usuarios
        WHERE lower(email) = lower($1)
          AND deleted_at IS NULL
        """,
        normalize_email(email),
    )


async def get_user_by_id(user_id: UUID) -> dict | None:
    return await db.fetch_one(
        f"""
        SELECT {_USER_SELECT}
        FROM usuarios
        WHERE id = $1
          AND deleted_at IS NULL
        """,
        user_id,
    )


async def list_users(*, limit: int = 100, offset: int = 0) -> list[dict[str, Any]]:
    return await db.fetch_all(
        f"""
        SELECT {_USER_SELECT}
        FROM usuarios
        WHERE deleted_at IS NULL
        ORDER BY created_at DESC, id DESC
        LIMIT $1
        OFFSET $2
        """,
        limit,
        offset,
    )


async def update_user(user_id: UUID, *, fields: dict[str, Any]) -> dict | None:
    unknown = set(fields) - set(USER_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown user fields: {sorted(unknown)}")

    assignments = ["updated_at = now()"]
    args: list[Any] = [user_id]
    for field, value in fields.items():
        if field == "email":
            value = normalize_email(value)
        args.append(value)
        assignments.append(f"{USER_COLUMNS[field]} = ${len(args)}")

    return await db.fetch_one(
        f"""
        UPDATE usuarios
        SET {", ".join(assignments)}
        WHERE id = $1
          AND deleted_at IS NULL
        RETURNING {_USER_SELECT}
        """,
        *args,
    )


async def soft_delete_user(user_id: UUID) -> dict | None:
    return await db.fetch_one(
        """
        UPDATE usuarios
        SET deleted_at = now(),
            updated_at = now()
        WHERE id = $1
          AND deleted_at IS NULL
        RETURNING id, deleted_at
        """,
        user_id,
    )
