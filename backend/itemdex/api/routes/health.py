from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from itemdex.api.deps import get_catalog_service
from itemdex.services.catalog_service import CatalogService

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
def keep_alive():
    return "Bot is alive!"


@router.get("/health")
def health(service: CatalogService = Depends(get_catalog_service)):
    return {"ok": True, "tenants": len(service.store.tenants())}
