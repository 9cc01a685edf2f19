"""Runtime settings read from environment variables."""

import logging
import os

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_ALLOWED_ORIGINS = (
    "http://localhost:5173",
    "http://localhost:3000",
    "http://localhost:8000",
)


class Settings(BaseModel):
    """Settings for the HTTP service and the sandbox entrypoint."""

    model_config = ConfigDict(frozen=True)

    default_file_name: str = Field(default="pasted-code.js", description="Used when a request has no file name")
    max_code_bytes: int = Field(default=1_000_000, gt=0, description="Largest accepted source text, in UTF-8 bytes")
    allowed_origins: tuple[str, ...] = Field(default=DEFAULT_ALLOWED_ORIGINS)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        # getLevelName maps known names to their int level
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level {value!r}")
        return value


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_settings() -> Settings:
    """Build Settings from GUARDIAN_* environment variables."""
    origins = os.environ.get("GUARDIAN_ALLOWED_ORIGINS")
    allowed_origins = (
        tuple(o.strip() for o in origins.split(",") if o.strip())
        if origins
        else DEFAULT_ALLOWED_ORIGINS
    )

    return Settings(
        default_file_name=os.environ.get("GUARDIAN_DEFAULT_FILE_NAME", "pasted-code.js"),
        max_code_bytes=_int_env("GUARDIAN_MAX_CODE_BYTES", 1_000_000),
        allowed_origins=allowed_origins,
        log_level=os.environ.get("GUARDIAN_LOG_LEVEL", "INFO").upper(),
    )
