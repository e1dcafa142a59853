"""
Product API endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies
from core.errors import CatalogError, to_http_exception

from . import schemas, service

router = APIRouter(prefix="/products")


@router.get("", response_model=schemas.ProductListResponse)
async def list_products(
    owner_id: str | None = Query(default=None, max_length=100),
    category: str | None = Query(default=None, max_length=100),
    q: str = Query(default="", max_length=100),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> schemas.ProductListResponse:
    """
    List active products (soft-deleted products are excluded).
    """
    return await service.list_products(
        owner_user_id=owner_id,
        category=category,
        search_query=q,
        limit=limit,
        offset=offset,
    )


@router.get("/mine", response_model=schemas.ProductListResponse)
async def list_my_products(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.ProductListResponse:
    return await service.list_products(
        owner_user_id=str(current_user["id"]),
        limit=limit,
        offset=offset,
    )


@router.get("/{product_id}", response_model=schemas.ProductResponse)
async def get_product(product_id: UUID) -> schemas.ProductResponse:
    try:
        return await service.get_product(product_id)
    except CatalogError as exc:
        raise to_http_exception(exc) from exc


@router.post("", response_model=schemas.ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    request: schemas.CreateProductRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.ProductResponse:
    return await service.create_product(request, user_id=str(current_user["id"]))


@router.patch("/{product_id}", response_model=schemas.ProductResponse)
@router.put("/{product_id}", response_model=schemas.ProductResponse)
async def update_product(
    product_id: UUID,
    request: schemas.UpdateProductRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.ProductResponse:
    try:
        return await service.update_product(product_id, request, user_id=str(current_user["id"]))
    except CatalogError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{product_id}", response_model=schemas.DeleteProductResponse)
async def delete_product(
    product_id: UUID,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.DeleteProductResponse:
    """
    Soft-delete a product owned by the current user.
    """
    try:
        return await service.delete_product(product_id, user_id=str(current_user["id"]))
    except CatalogError as exc:
        raise to_http_exception(exc) from exc


@router.post("/{product_id}/restore", response_model=schemas.ProductResponse)
async def restore_product(
    product_id: UUID,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.ProductResponse:
    try:
        return await service.restore_product(product_id, user_id=str(current_user["id"]))
    except CatalogError as exc:
        raise to_http_exception(exc) from exc
