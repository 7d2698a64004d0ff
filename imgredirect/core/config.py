"""Service-wide configuration.

Settings come from environment variables (or a local `.env` file) and any
command-line flag that is given overrides its environment counterpart.
Loading is one-shot: a missing or invalid value fails startup.
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from fastapi import Request
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..selection.finder import PatternError, compile_pattern

DEFAULT_HTTP_ADDRESS = "0.0.0.0:3000"


def split_address(address: str) -> Tuple[str, int]:
    """Split `host:port` (or `[v6]:port`) into its parts."""
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"expected host:port, got {address!r}")
    value = int(port)
    if value > 65535:
        raise ValueError(f"port out of range: {value}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, value


class Settings(BaseSettings):
    """Immutable runtime configuration shared by every request."""

    images_path: Path
    fast_glob: str
    final_glob: str
    http_address: str = DEFAULT_HTTP_ADDRESS
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    @field_validator("images_path")
    @classmethod
    def images_dir_exists(cls, value: Path) -> Path:
        if not value.is_dir():
            raise ValueError(f"images path is not a directory: {value}")
        return value

    @field_validator("fast_glob", "final_glob")
    @classmethod
    def valid_pattern(cls, value: str) -> str:
        try:
            compile_pattern(value)
        except PatternError as exc:
            raise ValueError(str(exc)) from exc
        return value

    @field_validator("http_address")
    @classmethod
    def valid_address(cls, value: str) -> str:
        split_address(value)
        return value

    @field_validator("log_level")
    @classmethod
    def known_level(cls, value: str) -> str:
        value = value.upper()
        if not isinstance(logging.getLevelName(value), int):
            raise ValueError(f"unknown log level: {value}")
        return value

    @property
    def host(self) -> str:
        return split_address(self.http_address)[0]

    @property
    def port(self) -> int:
        return split_address(self.http_address)[1]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Redirect to a random or the newest image under a directory tree."
    )
    parser.add_argument("--images-path", type=Path, help="Root directory of the images (env: IMAGES_PATH)")
    parser.add_argument("--fast-glob", help="Glob pattern used by /newest (env: FAST_GLOB)")
    parser.add_argument("--final-glob", help="Glob pattern used by /random (env: FINAL_GLOB)")
    parser.add_argument(
        "--http-address",
        help=f"Address to bind, host:port (env: HTTP_ADDRESS, default: {DEFAULT_HTTP_ADDRESS})",
    )
    parser.add_argument("--log-level", help="Logging level (env: LOG_LEVEL, default: INFO)")
    return parser.parse_args(argv)


def load_settings(args: Optional[argparse.Namespace] = None, **kwargs: Any) -> Settings:
    """
    Build the settings from the environment, overridden by explicit flags.

    Raises:
        pydantic.ValidationError: a required value is missing or invalid
    """
    overrides: Dict[str, Any] = {}
    if args is not None:
        overrides = {k: v for k, v in vars(args).items() if v is not None}
    return Settings(**overrides, **kwargs)


def get_settings(request: Request) -> Settings:
    """FastAPI dependency returning the settings injected by `create_app`."""
    return request.app.state.settings
