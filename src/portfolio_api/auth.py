from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)


# PUBLIC_INTERFACE
async def require_admin(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_security),
) -> None:
    """
    Enforce the shared admin secret on write routes.

    The bearer token is compared verbatim with ADMIN_PASSWORD. There is no
    per-user identity, expiry or rotation.

    Raises:
        HTTPException(401) if the token is missing or wrong, or if no admin
        password is configured.
    """
    expected: Optional[str] = request.app.state.settings.admin_password

    if creds is None or not creds.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not expected:
        # Misconfiguration: writes are impossible until ADMIN_PASSWORD is set
        logger.error("Write attempted but ADMIN_PASSWORD is not configured")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Server authentication not configured",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if creds.credentials != expected:
        logger.warning("Rejected write to %s: bad admin token", request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
