from fastapi import APIRouter

from bomso.api.routes import auth, dataset, health, organizations, requests

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(organizations.router)
api_router.include_router(requests.router)
api_router.include_router(dataset.router)
