import re
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*(ms|s|m|h)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, None: 1.0}


def parse_duration(value: str) -> float:
    """Parse "1.5", "100ms", "5s" or "2m" into seconds."""
    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"invalid duration: {value!r}")
    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit]


class Settings(BaseSettings):
    """
    Process configuration, read once at startup.

    Every field can be set from a FILE_SERVER_<FIELD> environment variable
    or a .env file; explicit keyword arguments win over both.
    """

    model_config = SettingsConfigDict(
        env_prefix="FILE_SERVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    address: str = "0.0.0.0"
    port: int = 8080
    static_directory: str = "./static"

    # no default: the upload route is useless without a backend
    cc_address: str
    cc_username: str = ""
    cc_password: str = ""
    cc_job_polling_interval: float = 1.0
    cc_request_timeout: Optional[float] = None
    skip_cert_verify: bool = False

    max_poll_duration: Optional[float] = None
    max_poll_attempts: Optional[int] = None

    log_level: str = "INFO"

    @field_validator("cc_job_polling_interval", "cc_request_timeout", "max_poll_duration", mode="before")
    @classmethod
    def _parse_duration(cls, v):
        if isinstance(v, str):
            return parse_duration(v)
        return v

    @field_validator("cc_job_polling_interval")
    @classmethod
    def _positive_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("polling interval must be positive")
        return v

    @field_validator("max_poll_duration", "max_poll_attempts", "cc_request_timeout")
    @classmethod
    def _positive_bound(cls, v):
        if v is not None and v <= 0:
            raise ValueError("must be positive when set")
        return v

    @field_validator("cc_address")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache()
def get_settings() -> Settings:
    return Settings()
