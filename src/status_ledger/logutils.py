"""
Logging helpers for status-ledger.

All modules log under the ``status-ledger`` namespace so a host can tune the
whole engine with a single logger.
"""

import logging

logger = logging.getLogger("status-ledger")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the stdio server.

    Unknown level names fall back to INFO rather than failing startup.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        logger.warning(f"Unknown log level '{level}', falling back to INFO")
        numeric_level = logging.INFO

    logging.basicConfig(level=numeric_level)
    logger.setLevel(numeric_level)
