from fastapi import APIRouter

from itemdex.api.routes import health
from itemdex.api.routes import items


api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(items.router, prefix="/tenants/{tenant_id}/items", tags=["items"])
