"""
Configuration for the tuple codec.

Uses pydantic-settings for environment variable loading.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

# API version that widened versionstamp offsets from 2 to 4 bytes
VERSIONSTAMP_OFFSET_API_VERSION = 520


class TupleSettings(BaseSettings):
    """Tuple codec configuration loaded from environment."""

    # Client API version the packed keys are submitted with
    api_version: int = Field(
        default=710,
        ge=13,
        description="Client API version; selects the versionstamp offset width",
    )

    model_config = {"env_prefix": "FDB_TUPLE_", "frozen": True}

    @property
    def versionstamp_offset_size(self) -> int:
        """Byte width of the offset appended to versionstamped keys."""
        return 4 if self.api_version >= VERSIONSTAMP_OFFSET_API_VERSION else 2


@lru_cache(maxsize=1)
def get_settings() -> TupleSettings:
    """Process-wide settings, read from the environment once."""
    return TupleSettings()
