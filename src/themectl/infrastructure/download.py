"""Remote archive download and extraction."""

from __future__ import annotations

import shutil
from pathlib import Path

import requests
import structlog

log = structlog.get_logger(__name__)

CHUNK_SIZE = 64 * 1024
DEFAULT_TIMEOUT = (10, 120)


def download_file(
    url: str,
    target: Path,
    *,
    session: requests.Session | None = None,
    timeout: tuple[float, float] = DEFAULT_TIMEOUT,
) -> int:
    """Stream *url* into *target*; returns the byte count.

    The body is written to ``<target>.part`` and renamed on completion, so an
    interrupted download never leaves a truncated archive under *target*.

    Raises:
        requests.RequestException: Network failure or a non-2xx status.
    """
    http = session or requests.Session()
    target.parent.mkdir(parents=True, exist_ok=True)
    partial = target.with_name(target.name + ".part")
    size = 0
    with http.get(url, stream=True, timeout=timeout) as response:
        response.raise_for_status()
        with partial.open("wb") as fh:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    fh.write(chunk)
                    size += len(chunk)
    partial.replace(target)
    log.debug("download.complete", url=url, bytes=size, target=str(target))
    return size


def unpack_archive(archive: Path, destination: Path) -> None:
    """Extract *archive* into *destination*.

    Raises:
        FileNotFoundError: *archive* does not exist.
        shutil.ReadError: *archive* is not a readable archive.
    """
    if not archive.is_file():
        msg = f"Archive not found: {archive}"
        raise FileNotFoundError(msg)
    destination.mkdir(parents=True, exist_ok=True)
    shutil.unpack_archive(archive, destination)
