# === NAVMAP v1 ===
# {
#   "module": "PyXHR.settings",
#   "purpose": "Typed configuration: environment-driven client settings and per-open request settings.",
#   "sections": [
#     {"id": "httpsettings", "name": "HttpSettings", "anchor": "class-httpsettings", "kind": "class"},
#     {"id": "redirectsettings", "name": "RedirectSettings", "anchor": "class-redirectsettings", "kind": "class"},
#     {"id": "syncsettings", "name": "SyncSettings", "anchor": "class-syncsettings", "kind": "class"},
#     {"id": "loggingsettings", "name": "LoggingSettings", "anchor": "class-loggingsettings", "kind": "class"},
#     {"id": "xhrsettings", "name": "XHRSettings", "anchor": "class-xhrsettings", "kind": "class"},
#     {"id": "requestsettings", "name": "RequestSettings", "anchor": "class-requestsettings", "kind": "class"},
#     {"id": "get-settings", "name": "get_settings", "anchor": "function-get-settings", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Configuration models for PyXHR.

Two kinds of settings live here:

- :class:`XHRSettings` is process-wide configuration loaded from
  ``PYXHR_*`` environment variables (nested fields use ``__``, for example
  ``PYXHR_HTTP__USER_AGENT`` or ``PYXHR_LOGGING__LEVEL=debug``). It is
  cached by :func:`get_settings` and consumed by the HTTP client factory,
  the request object's default headers, the redirect limit, and logging.
- :class:`RequestSettings` captures the arguments of a single ``open()``
  call. Everything except ``url`` is frozen; the URL is rewritten in place
  while following redirects.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "HttpSettings",
    "RedirectSettings",
    "SyncSettings",
    "LoggingSettings",
    "XHRSettings",
    "RequestSettings",
    "get_settings",
    "reset_settings",
]

DEFAULT_USER_AGENT = "PyXHR"


class HttpSettings(BaseModel):
    """HTTP client settings for the httpx transport."""

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="Default User-Agent request header",
    )
    timeout_connect: float = Field(
        default=10.0,
        gt=0.0,
        le=300.0,
        description="Connect timeout in seconds",
    )
    timeout_read: float = Field(
        default=60.0,
        gt=0.0,
        le=3600.0,
        description="Read timeout in seconds",
    )
    timeout_write: float = Field(
        default=60.0,
        gt=0.0,
        le=3600.0,
        description="Write timeout in seconds",
    )
    timeout_pool: float = Field(
        default=10.0,
        gt=0.0,
        le=300.0,
        description="Acquire-connection timeout in seconds",
    )
    verify_tls: bool = Field(default=True, description="Verify TLS certificates")
    trust_env: bool = Field(
        default=True,
        description="Honor HTTP(S)_PROXY and NO_PROXY environment variables",
    )


class RedirectSettings(BaseModel):
    """Redirect following limits."""

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    max_hops: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Redirect hops followed before the request is failed",
    )


class SyncSettings(BaseModel):
    """Synchronous bridge settings."""

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    default_timeout_ms: int = Field(
        default=0,
        ge=0,
        description="Deadline for synchronous requests without their own timeout (0 = none)",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    emit_json_logs: bool = Field(
        default=False,
        description="Emit JSON-formatted logs",
        validation_alias=AliasChoices("emit_json_logs", "json"),
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        """Normalize and validate logging level."""
        upper = str(v).upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if upper not in valid_levels:
            raise ValueError(f"level must be one of {sorted(valid_levels)}, got '{v}'")
        return upper

    def level_int(self) -> int:
        """Convert level string to logging module integer."""
        return getattr(logging, self.level)


class XHRSettings(BaseSettings):
    """Process-wide settings assembled from defaults and ``PYXHR_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="PYXHR_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    http: HttpSettings = Field(default_factory=HttpSettings)
    redirects: RedirectSettings = Field(default_factory=RedirectSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


class RequestSettings(BaseModel):
    """Arguments captured by ``open()``; only ``url`` may change afterwards."""

    model_config = ConfigDict(validate_assignment=True)

    method: str = Field(frozen=True)
    url: str
    asynchronous: bool = Field(default=True, frozen=True)
    user: Optional[str] = Field(default=None, frozen=True)
    password: Optional[str] = Field(default=None, frozen=True)


_settings: Optional[XHRSettings] = None
_settings_lock = threading.Lock()


def get_settings() -> XHRSettings:
    """Return the cached :class:`XHRSettings`, loading it on first use."""
    global _settings

    if _settings is not None:
        return _settings
    with _settings_lock:
        if _settings is None:
            _settings = XHRSettings()
        return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings

    with _settings_lock:
        _settings = None
