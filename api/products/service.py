"""
Product business logic.

Scope:
- ownership: only the owning user may change or delete a product
- aggregate responses (product + characteristics + images)
- translating repository absence into NotFound
"""

from __future__ import annotations

import logging
from uuid import UUID

from core.errors import AuthorizationError, NotFoundError, ValidationError

from . import repository, schemas

logger = logging.getLogger(__name__)


def _to_product_response(row: dict) -> schemas.ProductResponse:
    return schemas.ProductResponse(
        id=row["id"],
        owner_user_id=str(row["owner_user_id"]),
        name=str(row["name"]),
        price=row["price"],
        quantity=int(row["quantity"]),
        description=str(row["description"]),
        category=str(row["category"]),
        characteristics=[
            schemas.CharacteristicResponse(**item) for item in row.get("characteristics") or []
        ],
        images=[schemas.ImageResponse(**item) for item in row.get("images") or []],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        deleted_at=row.get("deleted_at"),
    )


async def _get_owned_product(product_id: UUID, *, user_id: str, include_deleted: bool = False) -> dict:
    row = await repository.get_product(product_id, include_deleted=include_deleted)
    if row is None:
        raise NotFoundError("Product not found.")
    if str(row["owner_user_id"]) != str(user_id):
        logger.warning(
            "product_access_denied product_id=%s owner_user_id=%s user_id=%s",
            product_id,
            row["owner_user_id"],
            user_id,
        )
        raise AuthorizationError("Product belongs to another user.")
    return row


async def create_product(
    payload: schemas.CreateProductRequest,
    *,
    user_id: str,
) -> schemas.ProductResponse:
    row = await repository.create_product(
        owner_user_id=str(user_id),
        name=payload.name,
        price=payload.price,
        quantity=payload.quantity,
        description=payload.description,
        category=payload.category,
        characteristics=[item.model_dump() for item in payload.characteristics],
        images=[item.model_dump() for item in payload.images],
    )
    logger.info("product_created product_id=%s user_id=%s", row["id"], user_id)
    return _to_product_response(row)


async def get_product(product_id: UUID) -> schemas.ProductResponse:
    row = await repository.get_product(product_id)
    if row is None:
        raise NotFoundError("Product not found.")
    return _to_product_response(row)


async def list_products(
    *,
    owner_user_id: str | None = None,
    category: str | None = None,
    search_query: str = "",
    limit: int = 100,
    offset: int = 0,
) -> schemas.ProductListResponse:
    category = (category or "").strip() or None
    rows = await repository.list_products(
        owner_user_id=owner_user_id,
        category=category,
        search=search_query,
        limit=limit,
        offset=offset,
    )
    total = await repository.count_products(
        owner_user_id=owner_user_id,
        category=category,
        search=search_query,
    )
    return schemas.ProductListResponse(
        products=[_to_product_response(row) for row in rows],
        count=len(rows),
        total=total,
        limit=limit,
        offset=offset,
    )


async def update_product(
    product_id: UUID,
    payload: schemas.UpdateProductRequest,
    *,
    user_id: str,
) -> schemas.ProductResponse:
    patch = payload.model_dump(exclude_unset=True)
    characteristics = patch.pop("characteristics", None)
    images = patch.pop("images", None)
    # Explicit nulls on required columns are treated as "not provided".
    fields = {key: value for key, value in patch.items() if value is not None}

    if not fields and characteristics is None and images is None:
        raise ValidationError("Provide at least one field to update.")

    await _get_owned_product(product_id, user_id=user_id)

    row = await repository.update_product(
        product_id,
        fields=fields,
        characteristics=characteristics,
        images=images,
    )
    if row is None:
        raise NotFoundError("Product not found.")

    logger.info(
        "product_updated product_id=%s user_id=%s fields=%s",
        product_id,
        user_id,
        ",".join(sorted(fields)),
    )
    return _to_product_response(row)


async def delete_product(product_id: UUID, *, user_id: str) -> schemas.DeleteProductResponse:
    await _get_owned_product(product_id, user_id=user_id)

    row = await repository.soft_delete_product(product_id)
    if row is None:
        raise NotFoundError("Product not found.")

    logger.info("product_deleted product_id=%s user_id=%s", product_id, user_id)
    return schemas.DeleteProductResponse(product_id=row["id"], deleted_at=row["deleted_at"])


async def restore_product(product_id: UUID, *, user_id: str) -> schemas.ProductResponse:
    existing = await _get_owned_product(product_id, user_id=user_id, include_deleted=True)
    if existing.get("deleted_at") is None:
        raise ValidationError("Product is not deleted.")

    row = await repository.restore_product(product_id)
    if row is None:
        raise NotFoundError("Product not found.")

    logger.info("product_restored product_id=%s user_id=%s", product_id, user_id)
    return _to_product_response(row)
