"""Logging setup."""

import logging

NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "web3", "asyncio")


def configure_logging(level: int | str = logging.INFO) -> None:
    """Configure root logging once for the process.

    Args:
        level: Level name (e.g. "INFO") or numeric level
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    logging.getLogger().setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
