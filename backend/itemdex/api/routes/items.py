from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from itemdex.api.deps import get_caller_is_admin, get_catalog_service
from itemdex.schemas import (
    CatalogSummaryOut,
    ControlActivationIn,
    DeleteResultOut,
    ItemOut,
    RenderedPageOut,
    ReplaceResultOut,
)
from itemdex.services.catalog_service import CatalogService
from itemdex.services.item_search import Category


router = APIRouter()


@router.post("", response_model=ReplaceResultOut)
async def upload_items(
    tenant_id: str,
    file: UploadFile = File(...),
    service: CatalogService = Depends(get_catalog_service),
):
    # Reject on the declared size before pulling the body into memory.
    service.check_upload(file.filename or "", file.size or 0)
    content = await file.read()
    result = await run_in_threadpool(service.on_file_uploaded, tenant_id, file.filename or "", len(content), content)
    return ReplaceResultOut.from_result(result)


@router.delete("", response_model=DeleteResultOut)
def delete_items(
    tenant_id: str,
    caller_is_admin: bool = Depends(get_caller_is_admin),
    service: CatalogService = Depends(get_catalog_service),
):
    return DeleteResultOut.from_result(service.on_delete_requested(tenant_id, caller_is_admin))


@router.get("/info", response_model=CatalogSummaryOut)
def items_info(tenant_id: str, service: CatalogService = Depends(get_catalog_service)):
    return CatalogSummaryOut.from_summary(service.on_info_requested(tenant_id))


@router.get("/search", response_model=RenderedPageOut)
def search_items(
    tenant_id: str,
    q: str = Query(...),
    type: Category = Query(Category.ALL),
    page: int = Query(1),
    service: CatalogService = Depends(get_catalog_service),
):
    return RenderedPageOut.from_page(service.on_search_requested(tenant_id, q, type, page))


@router.post(
    "/controls",
    response_model=RenderedPageOut,
    responses={status.HTTP_204_NO_CONTENT: {"description": "Control did not change the page"}},
)
def activate_control(
    tenant_id: str,
    payload: ControlActivationIn,
    service: CatalogService = Depends(get_catalog_service),
):
    rendered = service.on_control_activated(tenant_id, payload.control_id, payload.indicator_label)
    if rendered is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return RenderedPageOut.from_page(rendered)


@router.get("/{item_id}", response_model=ItemOut)
def get_item(tenant_id: str, item_id: int, service: CatalogService = Depends(get_catalog_service)):
    return ItemOut.from_detail(service.on_item_requested(tenant_id, item_id))
