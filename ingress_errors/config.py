"""Service-wide configuration.

Settings are read once at startup (environment first, command line on top)
and then shared read-only by every request handler.
"""
from __future__ import annotations

import ipaddress
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

__all__ = [
    "DEFAULT_LISTEN_ADDRESS",
    "ConfigError",
    "Settings",
    "split_listen_address",
]

DEFAULT_LISTEN_ADDRESS = "0.0.0.0:3000"


class ConfigError(ValueError):
    """Raised when the startup configuration cannot be used."""


def split_listen_address(value: str) -> tuple[str, int]:
    """Split "IP:port" or "[IPv6]:port" into (host, port).

    Raises:
        ValueError: if the host is not an IP literal or the port is out of range.
    """
    host, sep, port = value.rpartition(":")
    if not sep or not host:
        raise ValueError(f"invalid socket address syntax: {value!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
        if ipaddress.ip_address(host).version != 6:
            raise ValueError(f"invalid socket address syntax: {value!r}")
    elif ipaddress.ip_address(host).version != 4:
        # Bare IPv6 hosts must be bracketed
        raise ValueError(f"invalid socket address syntax: {value!r}")
    if not port.isdigit() or not (0 <= int(port) <= 65535):
        raise ValueError(f"invalid port in socket address: {value!r}")
    return host, int(port)


class Settings(BaseModel):
    """Immutable process configuration."""

    model_config = ConfigDict(frozen=True)

    templates_dir: Path
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    log_level: str = "INFO"

    @field_validator("templates_dir")
    @classmethod
    def _templates_dir_is_directory(cls, value: Path) -> Path:
        if not value.exists():
            raise ValueError(f"the templates path {str(value)!r} does not exist")
        if not value.is_dir():
            raise ValueError(f"the templates path {str(value)!r} is not a directory")
        return value

    @field_validator("listen_address")
    @classmethod
    def _listen_address_is_socket_address(cls, value: str) -> str:
        split_listen_address(value)
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def host(self) -> str:
        return split_listen_address(self.listen_address)[0]

    @property
    def port(self) -> int:
        return split_listen_address(self.listen_address)[1]

    @classmethod
    def load(cls, **values: Any) -> Settings:
        """Validate `values`, raising ConfigError instead of ValidationError."""
        try:
            return cls(**values)
        except ValidationError as e:
            msgs = "; ".join(err["msg"].removeprefix("Value error, ") for err in e.errors())
            raise ConfigError(msgs) from e

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Build settings from TEMPLATES_DIR / LISTEN_ADDRESS / LOG_LEVEL.

        Keyword overrides whose value is None are ignored so command-line
        flags that were not given fall through to the environment.
        """
        values: dict[str, Any] = {
            "templates_dir": os.getenv("TEMPLATES_DIR"),
            "listen_address": os.getenv("LISTEN_ADDRESS", DEFAULT_LISTEN_ADDRESS),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        if values["templates_dir"] is None:
            raise ConfigError("the path to the template files must be provided")
        return cls.load(**values)
