"""InstallService — materialise the WordPress runtime root.

Four steps, each a task requiring the previous one:
download -> unzip -> rename -> delete. Whether to install at all is decided
by :func:`needs_install`: the ``public/`` directory missing outside of
production. No marker records a finished install; a half-finished run is
repeated from the download on the next build that finds ``public/`` absent.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import requests
import structlog

from themectl.domain.paths import ARCHIVE_NAME, PUBLIC_DIR, STAGING_DIR, UNPACKED_DIR
from themectl.infrastructure.download import download_file, unpack_archive
from themectl.infrastructure.filesystem import copy_tree, remove_trees
from themectl.services.base import BaseService, TaskError
from themectl.services.result import ServiceResult

if TYPE_CHECKING:
    from themectl.config.settings import ThemeSettings
    from themectl.services.context import BuildContext

log = structlog.get_logger(__name__)


class InstallError(TaskError):
    code = "INSTALL_FAILED"


def needs_install(settings: ThemeSettings) -> bool:
    """True when ``public/`` is absent and the build is not for production."""
    return not settings.production and not settings.public_root.exists()


class InstallService(BaseService):
    def __init__(self, ctx: BuildContext, *, session: requests.Session | None = None) -> None:
        super().__init__(ctx)
        self._session = session

    @property
    def archive(self) -> Path:
        return self.root / STAGING_DIR / ARCHIVE_NAME

    def download(self) -> ServiceResult:
        url = self.settings.download_url
        try:
            size = download_file(url, self.archive, session=self._session)
        except requests.RequestException as exc:
            msg = f"Download of {url} failed: {exc}"
            raise InstallError(msg) from exc
        log.info("install.downloaded", url=url, bytes=size)
        return ServiceResult(
            ok=True,
            op="download",
            data={"url": url, "archive": self._relative([self.archive])[0], "bytes": size},
        )

    def unzip(self) -> ServiceResult:
        unpack_archive(self.archive, self.root)
        unpacked = self.root / UNPACKED_DIR
        if not unpacked.is_dir():
            msg = f"Archive did not contain a top-level '{UNPACKED_DIR}/' folder"
            raise InstallError(msg)
        return ServiceResult(ok=True, op="unzip", data={"unpacked": UNPACKED_DIR})

    def rename(self) -> ServiceResult:
        unpacked = self.root / UNPACKED_DIR
        if not unpacked.is_dir():
            msg = f"Nothing to relocate: '{UNPACKED_DIR}/' does not exist"
            raise InstallError(msg)
        count = copy_tree(unpacked, self.root / PUBLIC_DIR)
        return ServiceResult(ok=True, op="rename", data={"destination": PUBLIC_DIR, "count": count})

    def delete(self) -> ServiceResult:
        removed = remove_trees([self.root / UNPACKED_DIR, self.root / STAGING_DIR])
        return ServiceResult(ok=True, op="delete", data={"removed": self._relative(removed)})

    def hard_clean(self) -> ServiceResult:
        """Delete everything the installer and the compilers created."""
        removed = remove_trees(
            [self.root / PUBLIC_DIR, self.root / UNPACKED_DIR, self.root / STAGING_DIR]
        )
        return ServiceResult(ok=True, op="hard-clean", data={"removed": self._relative(removed)})
