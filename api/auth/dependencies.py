"""
Requester-identity dependencies for protected routes.

Routes that mutate catalog data take `current_user` from
`get_current_user`; ownership checks compare that user's id with the
resource's owner id.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status

from . import service

_BEARER_FORMAT = "Authorization must be: Bearer <token>."


def parse_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    scheme, _, token = raw.partition(" ")
    if scheme.strip().lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_BEARER_FORMAT,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token.strip()


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return parse_bearer_token(authorization)


async def get_current_user(access_token: str = Depends(get_bearer_token)) -> dict:
    return await service.get_user_from_access_token(access_token)
