from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bomso.core.security import decode_token
from bomso.storage import SnapshotStore, get_store


bearer_scheme = HTTPBearer(auto_error=False)


def get_dataset_store() -> SnapshotStore:
    return get_store()


def require_admin(credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme)) -> dict:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid Authorization header",
        )
    return decode_token(credentials.credentials)
