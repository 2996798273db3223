import json
from functools import lru_cache
from typing import Annotated, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .simulator.failures import InjectionConfig, parse_failure_kind


class Settings(BaseSettings):
    """Simulator settings loaded from SIM_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="SIM_", env_file=".env", case_sensitive=False)

    # Model name echoed in completions and substituted into error messages
    model: str = ""

    # ------------------------------------------------------------------
    # Failure injection
    # ------------------------------------------------------------------
    # Percentage of completion requests answered with a simulated error (0 disables)
    failure_injection_rate: int = Field(0, ge=0, le=100)
    # Subset of failure kinds to pick from; empty means all of them.
    # Accepts a JSON list or a comma-separated string, e.g. "rate_limit,server_error"
    failure_types: Annotated[list[str], NoDecode] = []

    # Seed for the shared random source; None seeds from the clock at startup
    seed: Optional[int] = None

    @field_validator("failure_types", mode="before")
    @classmethod
    def _split_failure_types(cls, value: Union[str, list[str], None]) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("["):
                return json.loads(value)
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("failure_types")
    @classmethod
    def _check_failure_types(cls, value: list[str]) -> list[str]:
        for name in value:
            parse_failure_kind(name)
        return value

    def injection_config(self) -> InjectionConfig:
        """Snapshot of the settings the failure selector needs for one request."""
        return InjectionConfig(
            injection_rate=self.failure_injection_rate,
            allowed_kinds=tuple(self.failure_types),
            model_name=self.model,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
