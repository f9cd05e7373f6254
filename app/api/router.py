from fastapi import APIRouter

from app.api.routes import public_apply

api_router = APIRouter()
api_router.include_router(public_apply.router)
