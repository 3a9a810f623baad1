import logging

from avocat_assist.config.config import settings


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for a shell embedding the client library."""
    if level is None:
        level = settings.LOG_LEVEL
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s"
    )
