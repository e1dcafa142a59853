"""
Product persistence (raw SQL).

Column names in the `produtos` tables are mapped to API field names with
explicit aliases. Characteristics and images are fetched with a second query
keyed by product ids and merged into each product dict, so every read returns
the full aggregate.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from uuid import UUID

import asyncpg

from core import db

# API field -> `produtos` column.
PRODUCT_COLUMNS: dict[str, str] = {
    "owner_user_id": "usuario_id",
    "name": "nome",
    "price": "valor",
    "quantity": "quantidade",
    "description": "descricao",
    "category": "categoria",
}

_PRODUCT_SELECT = """
    p.id,
    p.usuario_id AS owner_user_id,
    p.nome AS name,
    p.valor AS price,
    p.quantidade AS quantity,
    p.descricao AS description,
    p.categoria AS category,
    p.created_at,
    p.updated_at,
    p.deleted_at
"""


def _like_term(search: str) -> str:
    """
    Lower-case a name search and escape LIKE wildcards so `%` and `_` match
    literally. Pair with `ESCAPE '\\'` in SQL.
    """
    q = (search or "").strip().lower()
    return q.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _characteristic_records(product_id: UUID, items: list[dict[str, Any]]) -> list[tuple]:
    return [
        (product_id, position, str(item["name"]), str(item["description"]))
        for position, item in enumerate(items)
    ]


def _image_records(product_id: UUID, items: list[dict[str, Any]]) -> list[tuple]:
    return [
        (product_id, position, str(item["url"]), str(item["description"]))
        for position, item in enumerate(items)
    ]


async def _insert_children(
    conn: asyncpg.Connection,
    product_id: UUID,
    *,
    characteristics: list[dict[str, Any]] | None,
    images: list[dict[str, Any]] | None,
) -> None:
    if characteristics:
        await conn.executemany(
            """
            INSERT INTO produto_caracteristicas (produto_id, posicao, nome, descricao)
            VALUES ($1, $2, $3, $4)
            """,
            _characteristic_records(product_id, characteristics),
        )
    if images:
        await conn.executemany(
            """
            INSERT INTO produto_imagens (produto_id, posicao, url, descricao)
            VALUES ($1, $2, $3, $4)
            """,
            _image_records(product_id, images),
        )


async def _fetch_children(
    conn: asyncpg.Connection | asyncpg.Pool,
    product_ids: list[UUID],
) -> tuple[dict[UUID, list[dict]], dict[UUID, list[dict]]]:
    characteristics: dict[UUID, list[dict]] = {pid: [] for pid in product_ids}
    images: dict[UUID, list[dict]] = {pid: [] for pid in product_ids}
    if not product_ids:
        return characteristics, images

    for row in await conn.fetch(
        """
        SELECT id, produto_id, nome AS name, descricao AS description
        FROM produto_caracteristicas
        WHERE produto_id = ANY($1::uuid[])
        ORDER BY produto_id, posicao
        """,
        product_ids,
    ):
        characteristics[row["produto_id"]].append(
            {"id": row["id"], "name": row["name"], "description": row["description"]}
        )

    for row in await conn.fetch(
        """
        SELECT id, produto_id, url, descricao AS description
        FROM produto_imagens
        WHERE produto_id = ANY($1::uuid[])
        ORDER BY produto_id, posicao
        """,
        product_ids,
    ):
        images[row["produto_id"]].append(
            {"id": row["id"], "url": row["url"], "description": row["description"]}
        )

    return characteristics, images


async def _attach_children(
    conn: asyncpg.Connection | asyncpg.Pool,
    rows: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    characteristics, images = await _fetch_children(conn, [row["id"] for row in rows])
    for row in rows:
        row["characteristics"] = characteristics.get(row["id"], [])
        row["images"] = images.get(row["id"], [])
    return rows


async def _get_product(
    conn: asyncpg.Connection | asyncpg.Pool,
    product_id: UUID,
    *,
    include_deleted: bool,
) -> dict[str, Any] | None:
    row = await conn.fetchrow(
        f"""
        SELECT {_PRODUCT_SELECT}
        FROM produtos p
        WHERE p.id = $1
          AND ($2 OR p.deleted_at IS NULL)
        """,
        product_id,
        include_deleted,
    )
    if row is None:
        return None
    return (await _attach_children(conn, [dict(row)]))[0]


async def create_product(
    *,
    owner_user_id: str,
    name: str,
    price: Decimal,
    quantity: int,
    description: str,
    category: str,
    characteristics: list[dict[str, Any]] | None = None,
    images: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """
    Insert a product and its characteristics/images in a single transaction.
    Returns the stored aggregate.
    """
    async with db.transaction() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO produtos (usuario_id, nome, valor, quantidade, descricao, categoria)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING id
            """,
            owner_user_id,
            name,
            price,
            quantity,
            description,
            category,
        )
        if row is None or "id" not in row:
            raise RuntimeError("Failed to insert product.")

        product_id = row["id"]
        await _insert_children(
            conn,
            product_id,
            characteristics=characteristics,
            images=images,
        )

        product = await _get_product(conn, product_id, include_deleted=False)
        if product is None:
            raise RuntimeError("Inserted product could not be read back.")
        return product


async def get_product(product_id: UUID, *, include_deleted: bool = False) -> dict[str, Any] | None:
    return await _get_product(db.pool(), product_id, include_deleted=include_deleted)


async def list_products(
    *,
    owner_user_id: str | None = None,
    category: str | None = None,
    search: str = "",
    include_deleted: bool = False,
    limit: int = 100,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """
    List products, newest first. Soft-deleted rows are excluded unless
    `include_deleted` is set.
    """
    q = _like_term(search)
    rows = await db.fetch_all(
        f"""
        SELECT {_PRODUCT_SELECT}
        FROM produtos p
        WHERE ($1::text IS NULL OR p.usuario_id = $1)
          AND ($2::text IS NULL OR lower(p.categoria) = lower($2))
          AND ($3 = '' OR lower(p.nome) LIKE ('%' || $3 || '%') ESCAPE '\\')
          AND ($4 OR p.deleted_at IS NULL)
        ORDER BY p.created_at DESC, p.id DESC
        LIMIT $5
        OFFSET $6
        """,
        owner_user_id,
        category,
        q,
        include_deleted,
        limit,
        offset,
    )
    return await _attach_children(db.pool(), rows)


async def count_products(
    *,
    owner_user_id: str | None = None,
    category: str | None = None,
    search: str = "",
    include_deleted: bool = False,
) -> int:
    q = _like_term(search)
    row = await db.fetch_one(
        """
        SELECT count(*) AS n
        FROM produtos p
        WHERE ($1::text IS NULL OR p.usuario_id = $1)
          AND ($2::text IS NULL OR lower(p.categoria) = lower($2))
          AND ($3 = '' OR lower(p.nome) LIKE ('%' || $3 || '%') ESCAPE '\\')
          AND ($4 OR p.deleted_at IS NULL)
        """,
        owner_user_id,
        category,
        q,
        include_deleted,
    )
    return int((row or {}).get("n", 0))


async def update_product(
    product_id: UUID,
    *,
    fields: dict[str, Any],
    characteristics: list[dict[str, Any]] | None = None,
    images: list[dict[str, Any]] | None = None,
) -> dict[str, Any] | None:
    """
    Patch scalar fields and optionally replace child collections, in one
    transaction. Returns the updated aggregate, or None when the product is
    unknown or soft-deleted.
    """
    unknown = set(fields) - set(PRODUCT_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown product fields: {sorted(unknown)}")

    assignments = ["updated_at = now()"]
    args: list[Any] = [product_id]
    for field, value in fields.items():
        args.append(value)
        assignments.append(f"{PRODUCT_COLUMNS[field]} = ${len(args)}")

    async with db.transaction() as conn:
        row = await conn.fetchrow(
            f"""
            UPDATE produtos
            SET {", ".join(assignments)}
            WHERE id = $1
              AND deleted_at IS NULL
            RETURNING id
            """,
            *args,
        )
        if row is None:
            return None

        if characteristics is not None:
            await conn.execute(
                "DELETE FROM produto_caracteristicas WHERE produto_id = $1",
                product_id,
            )
        if images is not None:
            await conn.execute(
                "DELETE FROM produto_imagens WHERE produto_id = $1",
                product_id,
            )
        await _insert_children(
            conn,
            product_id,
            characteristics=characteristics,
            images=images,
        )

        return await _get_product(conn, product_id, include_deleted=False)


async def soft_delete_product(product_id: UUID) -> dict[str, Any] | None:
    """
    Mark a product deleted. Returns `{id, deleted_at}`, or None when the
    product is unknown or already deleted.
    """
    return await db.fetch_one(
        """
        UPDATE produtos
        SET deleted_at = now(),
            updated_at = now()
        WHERE id = $1
          AND deleted_at IS NULL
        RETURNING id, deleted_at
        """,
        product_id,
    )


async def restore_product(product_id: UUID) -> dict[str, Any] | None:
    row = await db.fetch_one(
        """
        UPDATE produtos
        SET deleted_at = NULL,
            updated_at = now()
        WHERE id = $1
          AND deleted_at IS NOT NULL
        RETURNING id
        """,
        product_id,
    )
    if row is None:
        return None
    return await get_product(product_id)
