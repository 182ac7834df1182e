"""Bridge configuration via environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings loaded from ``FORMBRIDGE_*`` environment variables."""

    # Logging
    DEBUG: bool = False
    LOG_LEVEL: str = "info"

    # Validation flows
    PARALLEL_RULE_SETS: bool = True      # gather rule-sets instead of awaiting one by one
    SERIALIZE_VALIDATION: bool = True    # one flow at a time per edit context
    UNRESOLVED_FAILURE_POLICY: Literal["drop", "model"] = "drop"

    model_config = {
        "env_prefix": "FORMBRIDGE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()
