"""FastAPI dependency injection."""

from __future__ import annotations

import secrets
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from segmap.config import settings
from segmap.core.security_map import SecurityMapService

security = HTTPBearer(auto_error=False)


async def verify_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> None:
    """Require the configured API token, if one is set."""
    if not settings.api_token:
        return

    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    if not secrets.compare_digest(credentials.credentials, settings.api_token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")


def get_security_map_service() -> SecurityMapService:
    return SecurityMapService()


# Common dependency aliases
Authorized = Depends(verify_token)
MapService = Annotated[SecurityMapService, Depends(get_security_map_service)]
