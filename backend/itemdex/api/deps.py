import hmac

from fastapi import Header, Request

from itemdex.core.config import settings
from itemdex.services.catalog_service import CatalogService


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service


def get_caller_is_admin(x_admin_token: str | None = Header(default=None)) -> bool:
    # No configured token means nobody is an admin over HTTP.
    if not settings.admin_token or not x_admin_token:
        return False
    return hmac.compare_digest(x_admin_token.encode(), settings.admin_token.encode())
