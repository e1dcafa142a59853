"""
User API endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from auth import dependencies as auth_dependencies
from core.errors import CatalogError, to_http_exception

from . import schemas, service

router = APIRouter(prefix="/users")


@router.post("", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(request: schemas.CreateUserRequest) -> schemas.UserResponse:
    try:
        return await service.register(request)
    except CatalogError as exc:
        raise to_http_exception(exc) from exc


@router.get("", response_model=schemas.UserListResponse)
async def list_users(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.UserListResponse:
    return await service.list_users(limit=limit, offset=offset)


@router.get("/me", response_model=schemas.UserResponse)
async def me(
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.UserResponse:
    return service.me(current_user)


@router.get("/{user_id}", response_model=schemas.UserResponse)
async def get_user(
    user_id: UUID,
    _: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.UserResponse:
    try:
        return await service.get_user(user_id)
    except CatalogError as exc:
        raise to_http_exception(exc) from exc


@router.patch("/{user_id}", response_model=schemas.UserResponse)
@router.put("/{user_id}", response_model=schemas.UserResponse)
async def update_user(
    user_id: UUID,
    request: schemas.UpdateUserRequest,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.UserResponse:
    try:
        return await service.update_user(user_id, request, current_user_id=str(current_user["id"]))
    except CatalogError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{user_id}", response_model=schemas.DeleteUserResponse)
async def delete_user(
    user_id: UUID,
    current_user: dict = Depends(auth_dependencies.get_current_user),
) -> schemas.DeleteUserResponse:
    try:
        return await service.delete_user(user_id, current_user_id=str(current_user["id"]))
    except CatalogError as exc:
        raise to_http_exception(exc) from exc
