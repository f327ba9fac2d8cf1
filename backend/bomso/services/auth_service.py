from fastapi import HTTPException, status

from bomso.core.config import get_settings
from bomso.core.security import create_token, password_matches


def login(password: str) -> dict:
    settings = get_settings()
    if not password or not password_matches(password, settings.admin_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid password")
    return {
        "token": create_token(),
        "token_type": "bearer",
        "expires_in": settings.jwt_access_ttl_seconds,
    }

