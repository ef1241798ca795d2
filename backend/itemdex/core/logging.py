import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure stdout logging for the HTTP server and the bot."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(funcName)s - %(lineno)d - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # discord.py is chatty at INFO about gateway reconnects.
    logging.getLogger("discord.gateway").setLevel(logging.WARNING)
