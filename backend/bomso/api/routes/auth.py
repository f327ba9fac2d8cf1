from fastapi import APIRouter, Depends, Request

from bomso.api.deps import require_admin
from bomso.api.response import envelope
from bomso.schemas.auth import LoginRequest
from bomso.services import auth_service

router = APIRouter(tags=["auth"])


@router.post("/login")
def login(request: Request, body: LoginRequest) -> dict:
    return envelope(request, auth_service.login(body.password))


@router.get("/verify")
def verify(request: Request, admin: dict = Depends(require_admin)) -> dict:
    return envelope(request, {"ok": True, "subject": admin["sub"], "expires_at": admin["exp"]})
