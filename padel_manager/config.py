"""
Runtime settings read from the environment (.env is loaded by database.py).
"""
import logging
import os

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Optimistic-concurrency retries for pool standings writes
STANDINGS_MAX_RETRIES = int(os.getenv("STANDINGS_MAX_RETRIES", "3"))


def configure_logging() -> None:
    """Configure root logging once at startup."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
