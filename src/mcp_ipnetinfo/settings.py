"""Configuration settings for the MCP IPNetInfo server."""

import logging
import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ASN_SERVICES = ("ipapi", "ipinfo", "hackertarget")
GEO_SERVICES = ("ipapi", "ipinfo")


class Settings(BaseSettings):
    """Application settings loaded from IPNETINFO_* environment variables."""

    # Upstream providers
    ip_api_base_url: str = Field(default="http://ip-api.com/json")
    ipinfo_base_url: str = Field(default="https://ipinfo.io")
    hackertarget_base_url: str = Field(default="https://api.hackertarget.com")
    ripestat_base_url: str = Field(default="https://stat.ripe.net/data")

    asn_service: str = Field(default="ipapi")
    geo_service: str = Field(default="ipapi")

    # Request Configuration
    request_timeout: int = Field(default=10, ge=1, le=300)

    # Batch processing
    max_bulk_addresses: int = Field(default=100, ge=1, le=1000)
    bulk_concurrency: int = Field(default=5, ge=1, le=50)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="IPNETINFO_",
        env_file=None,
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    def __init__(self, _env_file: str | None = None, **data: object) -> None:
        if _env_file is None:
            running_tests = 'pytest' in sys.modules or os.environ.get('PYTEST_CURRENT_TEST') is not None
            if not running_tests:
                current_dir = Path.cwd()
                for path in [current_dir] + list(current_dir.parents):
                    env_file = path / '.env'
                    if env_file.exists():
                        _env_file = str(env_file)
                        break

        if _env_file and os.path.exists(_env_file):
            print(f"[MCP IPNetInfo] Loading environment from: {_env_file}", file=sys.stderr)

        super().__init__(_env_file=_env_file, **data)

    @field_validator("asn_service")
    @classmethod
    def _check_asn_service(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ASN_SERVICES:
            raise ValueError(f"asn_service must be one of {', '.join(ASN_SERVICES)}")
        return value

    @field_validator("geo_service")
    @classmethod
    def _check_geo_service(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in GEO_SERVICES:
            raise ValueError(f"geo_service must be one of {', '.join(GEO_SERVICES)}")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.strip().upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"Unknown log level: {value}")
        return value
