"""
Pydantic-based configuration for the scanner.

Every knob can be overridden through TCPSWEEP_* environment variables or a
.env file, so the CLI and the API share the same defaults.
"""

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VERSION = "1.0.0"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False, env_file=".env", env_prefix="TCPSWEEP_")

    # Scan defaults
    ports: str = Field("1-1024", description="default port specification")
    concurrency: int = Field(100, description="worker threads per scan")
    connect_timeout_s: float = Field(0.5, description="per-connection connect timeout")

    # Banner grabbing
    banner_timeout_s: float = Field(2.0, description="read deadline after connecting")
    banner_size: int = Field(256, description="max bytes read for a banner")

    # Engine internals
    work_queue_size: int = Field(100, description="capacity of the port work queue")

    # API guard rail
    api_max_probes: int = Field(65536, description="max addresses x ports per API scan")

    log_level: str = Field("WARNING")

    @field_validator("concurrency", "banner_size", "work_queue_size", "api_max_probes")
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("connect_timeout_s", "banner_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {v}")
        return level


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
