import asyncio
import logging

import uvicorn

from itemdex.bot.discord_bot import build_bot
from itemdex.core.config import settings
from itemdex.core.logging import setup_logging
from itemdex.main import create_app
from itemdex.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


async def serve() -> None:
    service = CatalogService.from_settings(settings)
    server = uvicorn.Server(
        uvicorn.Config(create_app(service), host=settings.host, port=settings.port, log_config=None)
    )

    if not settings.discord_token:
        logger.warning("DISCORD_TOKEN is not set; running the HTTP API only")
        await server.serve()
        return

    bot = build_bot(service, application_id=settings.discord_app_id)
    async with bot:
        await asyncio.gather(server.serve(), bot.start(settings.discord_token))


def main() -> None:
    setup_logging(settings.log_level)
    logger.info("Starting bot...")
    asyncio.run(serve())


if __name__ == "__main__":
    main()
