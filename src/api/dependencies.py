# src/api/dependencies.py

from typing import Optional

from fastapi import Header


async def get_user_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """
    Caller's GitHub OAuth token from `Authorization: Bearer <token>`.
    Session handling lives outside this service; no header means the app token applies.
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
