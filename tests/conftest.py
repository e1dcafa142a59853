"""Shared fixtures: an in-memory stand-in for the SQL repositories."""

from __future__ import annotations

from collections.abc import Generator
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from auth import security
from main import app
from products import repository as product_repository
from users import repository as user_repository


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FakeCatalogStore:
    """Keeps rows in dicts and mirrors the repository functions' contracts."""

    def __init__(self) -> None:
        self.users: dict[UUID, dict[str, Any]] = {}
        self.products: dict[UUID, dict[str, Any]] = {}

    # users

    def add_user(self, *, name: str = "Ana", email: str | None = None, is_active: bool = True) -> dict:
        now = _now()
        user_id = uuid4()
        row = {
            "id": user_id,
            "name": name,
            "email": email or f"{user_id.hex[:8]}@example.com",
            "password_hash": "",
            "is_active": is_active,
            "created_at": now,
            "updated_at": now,
            "deleted_at": None,
        }
        self.users[user_id] = row
        return row

    def _public_user(self, row: dict) -> dict:
        return {k: v for k, v in row.items() if k != "password_hash"}

    async def create_user(self, *, name: str, email: str, password_hash: str, is_active: bool = True) -> dict:
        row = self.add_user(name=name, email=user_repository.normalize_email(email), is_active=is_active)
        row["password_hash"] = password_hash
        return self._public_user(row)

    async def get_user_by_email(self, email: str) -> dict | None:
        wanted = user_repository.normalize_email(email)
        for row in self.users.values():
            if row["email"] == wanted and row["deleted_at"] is None:
                return dict(row)
        return None

    async def get_user_by_id(self, user_id: UUID) -> dict | None:
        row = self.users.get(user_id)
        if row is None or row["deleted_at"] is not None:
            return None
        return self._public_user(row)

    async def list_users(self, *, limit: int = 100, offset: int = 0) -> list[dict]:
        rows = [self._public_user(r) for r in self.users.values() if r["deleted_at"] is None]
        return rows[offset : offset + limit]

    async def update_user(self, user_id: UUID, *, fields: dict[str, Any]) -> dict | None:
        row = self.users.get(user_id)
        if row is None or row["deleted_at"] is not None:
            return None
        row.update(fields)
        row["updated_at"] = _now()
        return self._public_user(row)

    async def soft_delete_user(self, user_id: UUID) -> dict | None:
        row = self.users.get(user_id)
        if row is None or row["deleted_at"] is not None:
            return None
        row["deleted_at"] = _now()
        return {"id": user_id, "deleted_at": row["deleted_at"]}

    # products

    def _aggregate(self, row: dict) -> dict:
        out = dict(row)
        out["characteristics"] = [dict(c) for c in row["characteristics"]]
        out["images"] = [dict(i) for i in row["images"]]
        return out

    def _children(self, items: list[dict] | None) -> list[dict]:
        return [{"id": uuid4(), **item} for item in items or []]

    async def create_product(
        self,
        *,
        owner_user_id: str,
        name: str,
        price: Decimal,
        quantity: int,
        description: str,
        category: str,
        characteristics: list[dict] | None = None,
        images: list[dict] | None = None,
    ) -> dict:
        now = _now()
        product_id = uuid4()
        self.products[product_id] = {
            "id": product_id,
            "owner_user_id": owner_user_id,
            "name": name,
            "price": price,
            "quantity": quantity,
            "description": description,
            "category": category,
            "characteristics": self._children(characteristics),
            "images": self._children(images),
            "created_at": now,
            "updated_at": now,
            "deleted_at": None,
        }
        return self._aggregate(self.products[product_id])

    async def get_product(self, product_id: UUID, *, include_deleted: bool = False) -> dict | None:
        row = self.products.get(product_id)
        if row is None or (row["deleted_at"] is not None and not include_deleted):
            return None
        return self._aggregate(row)

    def _matching(self, *, owner_user_id, category, search, include_deleted) -> list[dict]:
        q = (search or "").strip().lower()
        rows = []
        for row in self.products.values():
            if row["deleted_at"] is not None and not include_deleted:
                continue
            if owner_user_id is not None and row["owner_user_id"] != owner_user_id:
                continue
            if category is not None and row["category"].lower() != category.lower():
                continue
            if q and q not in row["name"].lower():
                continue
            rows.append(row)
        return sorted(rows, key=lambda r: r["created_at"], reverse=True)

    async def list_products(
        self,
        *,
        owner_user_id=None,
        category=None,
        search="",
        include_deleted=False,
        limit=100,
        offset=0,
    ) -> list[dict]:
        rows = self._matching(
            owner_user_id=owner_user_id,
            category=category,
            search=search,
            include_deleted=include_deleted,
        )
        return [self._aggregate(r) for r in rows[offset : offset + limit]]

    async def count_products(self, *, owner_user_id=None, category=None, search="", include_deleted=False) -> int:
        return len(
            self._matching(
                owner_user_id=owner_user_id,
                category=category,
                search=search,
                include_deleted=include_deleted,
            )
        )

    async def update_product(self, product_id: UUID, *, fields, characteristics=None, images=None) -> dict | None:
        row = self.products.get(product_id)
        if row is None or row["deleted_at"] is not None:
            return None
        row.update(fields)
        if characteristics is not None:
            row["characteristics"] = self._children(characteristics)
        if images is not None:
            row["images"] = self._children(images)
        row["updated_at"] = _now()
        return self._aggregate(row)

    async def soft_delete_product(self, product_id: UUID) -> dict | None:
        row = self.products.get(product_id)
        if row is None or row["deleted_at"] is not None:
            return None
        row["deleted_at"] = _now()
        return {"id": product_id, "deleted_at": row["deleted_at"]}

    async def restore_product(self, product_id: UUID) -> dict | None:
        row = self.products.get(product_id)
        if row is None or row["deleted_at"] is None:
            return None
        row["deleted_at"] = None
        row["updated_at"] = _now()
        return self._aggregate(row)


_USER_FUNCS = (
    "create_user",
    "get_user_by_email",
    "get_user_by_id",
    "list_users",
    "update_user",
    "soft_delete_user",
)
_PRODUCT_FUNCS = (
    "create_product",
    "get_product",
    "list_products",
    "count_products",
    "update_product",
    "soft_delete_product",
    "restore_product",
)


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> FakeCatalogStore:
    fake = FakeCatalogStore()
    for name in _USER_FUNCS:
        monkeypatch.setattr(user_repository, name, getattr(fake, name))
    for name in _PRODUCT_FUNCS:
        monkeypatch.setattr(product_repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def client(store: FakeCatalogStore) -> Generator[TestClient, None, None]:
    # Not used as a context manager, so the lifespan (DB pool) never runs.
    yield TestClient(app)


@pytest.fixture
def owner(store: FakeCatalogStore) -> dict:
    return store.add_user(name="Owner", email="owner@example.com")


@pytest.fixture
def stranger(store: FakeCatalogStore) -> dict:
    return store.add_user(name="Stranger", email="stranger@example.com")


def auth_headers(user: dict) -> dict[str, str]:
    token = security.build_access_token(user_id=str(user["id"]), email=user["email"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers(owner: dict) -> dict[str, str]:
    return auth_headers(owner)


@pytest.fixture
def stranger_headers(stranger: dict) -> dict[str, str]:
    return auth_headers(stranger)


@pytest.fixture
def product_payload() -> dict[str, Any]:
    return {
        "name": "Cadeira gamer",
        "price": "799.90",
        "quantity": 5,
        "description": "Cadeira ergonomica com apoio lombar.",
        "category": "Moveis",
        "characteristics": [{"name": "Cor", "description": "Preta"}],
        "images": [{"url": "https://img.example.com/cadeira.png", "description": "Frente"}],
    }
