"""Converter configuration.

Settings are read from ``SCHEMA_TO_IR_*`` environment variables; callers
can also build a :class:`ConverterSettings` directly and pass it to
:func:`schema_to_ir.convert.convert`.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from schema_to_ir.ir.service import Provider


class ConverterSettings(BaseSettings):
    """Tunable knobs of the conversion pipeline."""

    model_config = SettingsConfigDict(env_prefix="SCHEMA_TO_IR_", case_sensitive=False)

    max_resolution_depth: int = Field(
        default=32,
        ge=1,
        description="Maximum nesting depth followed while resolving one field's type.",
    )
    emit_data_sources: bool = Field(
        default=True,
        description="Derive a read-only data source for every resource with a read operation.",
    )
    default_openapi_provider: Provider = Field(
        default=Provider.KUBERNETES,
        description="Provider assumed for OpenAPI documents when no hint is given.",
    )
    log_level: str = Field(default="WARNING")


@lru_cache(maxsize=1)
def get_settings() -> ConverterSettings:
    """Return the process-wide settings, read once from the environment."""
    return ConverterSettings()
