"""Pydantic configuration models with code-baked defaults.

Sparse settings contract: defaults baked here, ``config.json`` only contains
overrides. A fresh project needs only ``{"theme": "..."}``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DOWNLOAD_URL = "https://wordpress.org/latest.zip"


class ServerConfig(BaseModel):
    """``server`` section — live-reload development server."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    log_prefix: str = Field(default="Server", alias="logPrefix")
    host: str = "127.0.0.1"
    port: int = 8080
    open: bool = False
    notify: bool = False
    proxy: str | None = None
