"""
Product API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CharacteristicIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=255)


class ImageIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    url: str = Field(..., min_length=1, max_length=2048)
    description: str = Field(..., min_length=1, max_length=255)


class CreateProductRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    quantity: int = Field(..., ge=0)
    description: str = Field(..., min_length=1, max_length=1000)
    category: str = Field(..., min_length=1, max_length=100)
    characteristics: list[CharacteristicIn] = Field(default_factory=list)
    images: list[ImageIn] = Field(default_factory=list)


class UpdateProductRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    # Omitted fields are left untouched; a child list replaces the stored one.
    name: str | None = Field(default=None, min_length=1, max_length=100)
    price: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    quantity: int | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    characteristics: list[CharacteristicIn] | None = None
    images: list[ImageIn] | None = None


class CharacteristicResponse(BaseModel):
    id: UUID
    name: str
    description: str


class ImageResponse(BaseModel):
    id: UUID
    url: str
    description: str


class ProductResponse(BaseModel):
    id: UUID
    owner_user_id: str
    name: str
    price: Decimal
    quantity: int
    description: str
    category: str
    characteristics: list[CharacteristicResponse]
    images: list[ImageResponse]
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    count: int
    total: int
    limit: int
    offset: int


class DeleteProductResponse(BaseModel):
    ok: bool = True
    product_id: UUID
    deleted_at: datetime
