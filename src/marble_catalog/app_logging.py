"""Logging configuration helpers."""

import logging

# Supabase and OpenAI both log every HTTP round trip at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "hpack")


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the ``marble_catalog`` logger tree.

    Safe to call repeatedly: the level is updated but handlers are never
    duplicated.
    """
    logger = logging.getLogger("marble_catalog")
    logger.setLevel(level.upper())
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
