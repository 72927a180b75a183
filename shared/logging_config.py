"""
Logging setup for the Digest backend.

Modules log through ``logging.getLogger(__name__)``; this configures the
root handler once at application startup.
"""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with the application format."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # httpx logs every request at INFO, including JWKS fetches
    logging.getLogger("httpx").setLevel(logging.WARNING)


def mask_token(token: str, visible: int = 10) -> str:
    """Return a log-safe preview of a credential."""
    if not token:
        return "none"
    return f"{token[:visible]}..."
