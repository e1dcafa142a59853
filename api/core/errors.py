"""
Error kinds raised by feature services.

Repositories signal absence with `None`; services turn that (and ownership
mismatches) into one of these. Routers map them to HTTP status codes with
`to_http_exception`.
"""

from __future__ import annotations

from fastapi import HTTPException


class CatalogError(RuntimeError):
    status_code = 500


class NotFoundError(CatalogError):
    status_code = 404


class AuthorizationError(CatalogError):
    status_code = 403


class ValidationError(CatalogError):
    status_code = 422


class ConflictError(CatalogError):
    status_code = 409


def to_http_exception(exc: CatalogError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=str(exc))
