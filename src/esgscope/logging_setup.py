import logging

from esgscope.config import config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the app factory and the CLI."""
    logging.basicConfig(
        level=getattr(logging, (level or config.log_level).upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # psycopg is chatty at DEBUG
    logging.getLogger("psycopg").setLevel(logging.WARNING)
