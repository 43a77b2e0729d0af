"""BuildContext — everything a task needs, assembled once per process.

Holds the frozen settings, the path table, the dev server bridge and the
image cache. Tasks receive it explicitly; nothing reads configuration from a
module global.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from themectl.infrastructure.devserver import DevServer, LiveReloadDevServer, NullDevServer
from themectl.services.images import ImageCache

if TYPE_CHECKING:
    from themectl.config.settings import ThemeSettings
    from themectl.domain.paths import PathTable


def select_dev_server(settings: ThemeSettings) -> DevServer:
    """The only place that chooses between the production and live bridges."""
    if settings.production:
        return NullDevServer()
    return LiveReloadDevServer(
        log_prefix=settings.server.log_prefix,
        announce=settings.server.notify,
    )


@dataclass
class BuildContext:
    settings: ThemeSettings
    server: DevServer
    image_cache: ImageCache = field(default_factory=ImageCache)

    @classmethod
    def from_settings(
        cls, settings: ThemeSettings, *, server: DevServer | None = None
    ) -> BuildContext:
        return cls(settings=settings, server=server or select_dev_server(settings))

    @property
    def project_root(self) -> Path:
        return self.settings.project_root

    @property
    def paths(self) -> PathTable | None:
        return self.settings.paths
