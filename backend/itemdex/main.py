import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from itemdex.api.router import api_router
from itemdex.core.config import settings
from itemdex.core.errors import CatalogError
from itemdex.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


def create_app(service: CatalogService | None = None) -> FastAPI:
    """Build the HTTP app around a catalog service.

    The bot and the HTTP routes share one service when both run in the same
    process, so catalogs uploaded through either are visible to both.
    """
    app = FastAPI(title="Itemdex API", version="0.1.0")
    app.state.catalog_service = service if service is not None else CatalogService.from_settings(settings)

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc)},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)
    return app


app = create_app()
