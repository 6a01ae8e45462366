"""
Configuration for the status-ledger server.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .logutils import logger


class LedgerConfig(BaseModel):
    """Runtime settings, read from the environment (and ``.env`` if present)."""

    log_level: str = Field(
        default="INFO",
        description="Logging level name for the server (DEBUG, INFO, WARNING, ...)"
    )
    default_session: str = Field(
        default="default",
        min_length=1,
        description="Session id used by tools that are called without one"
    )
    near_expiry_rounds: int = Field(
        default=2,
        ge=0,
        description="Countdowns at or below this many rounds get an 'ending soon' reminder"
    )


def load_config() -> LedgerConfig:
    """Build a LedgerConfig from ``STATUS_LEDGER_*`` environment variables."""
    if not load_dotenv():
        logger.debug(".env file not found, using process environment only")

    values: dict[str, str] = {}
    for field_name in LedgerConfig.model_fields:
        env_value = os.getenv(f"STATUS_LEDGER_{field_name.upper()}")
        if env_value is not None and env_value != "":
            values[field_name] = env_value

    return LedgerConfig.model_validate(values)
