from __future__ import annotations

import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .settings import get_settings

_security = HTTPBasic(auto_error=False)


# PUBLIC_INTERFACE
def get_user_dependency():
    """
    Return a FastAPI dependency callable that resolves the acting user id.

    Behavior:
    - If settings.enable_basic_auth is False (default): the user comes from the
      X-User-Id header, falling back to DEFAULT_USER_ID. This is the development
      mode with a fixed test user.
    - If True: validates provided credentials against BASIC_AUTH_USERNAME/BASIC_AUTH_PASSWORD
      and uses the username as the user id. Missing or invalid credentials raise
      401 with WWW-Authenticate: Basic.

    Usage:
        from .auth import get_user_dependency
        current_user = get_user_dependency()
        def handler(user_id: str = Depends(current_user)) ...
    """
    settings = get_settings()

    if not settings.enable_basic_auth:
        default_user = settings.default_user_id

        async def _from_header(x_user_id: Optional[str] = Header(default=None)) -> str:
            """Resolve the user from X-User-Id (auth disabled)."""
            if x_user_id and x_user_id.strip():
                return x_user_id.strip()
            return default_user

        return _from_header

    expected_user: Optional[str] = settings.basic_auth_username
    expected_pass: Optional[str] = settings.basic_auth_password

    async def _enforce(creds: Optional[HTTPBasicCredentials] = Depends(_security)) -> str:
        """
        Enforce HTTP Basic authentication and return the username.

        Raises:
            HTTPException(401) if credentials are missing or invalid.
        """
        if creds is None or creds.username is None or creds.password is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Basic"},
            )

        if expected_user is None or expected_pass is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Server authentication not configured",
                headers={"WWW-Authenticate": "Basic"},
            )

        user_ok = secrets.compare_digest(creds.username, expected_user)
        pass_ok = secrets.compare_digest(creds.password, expected_pass)
        if not (user_ok and pass_ok):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
                headers={"WWW-Authenticate": "Basic"},
            )
        return creds.username

    return _enforce
