"""ImageService — lossless re-encoding of theme images.

An :class:`ImageCache` lives as long as the build context, so watch-mode
reruns only touch images whose bytes changed since they were last written.
Images that failed to compress or to be written are tried again next pass.
"""

from __future__ import annotations

import hashlib
import io
import threading
from collections.abc import Iterable, Sequence

from PIL import Image, UnidentifiedImageError

from themectl.domain.assets import OutputFile, SourceFile, Transformed
from themectl.infrastructure.filesystem import read_glob
from themectl.services.base import BaseService
from themectl.services.result import ServiceResult

# Pillow format -> save options that keep pixels identical.
_SAVE_OPTIONS: dict[str, dict[str, object]] = {
    "PNG": {"optimize": True},
    "JPEG": {"optimize": True, "quality": "keep", "progressive": True},
    "GIF": {"optimize": True},
}


class ImageCache:
    """Content digests of images already processed, keyed by relative path."""

    def __init__(self) -> None:
        self._digests: dict[str, str] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._digests)

    def changed(self, source: SourceFile) -> bool:
        """Whether *source* is new or modified since it was last recorded."""
        with self._lock:
            return self._digests.get(source.path.as_posix()) != _digest(source)

    def record(self, sources: Iterable[SourceFile]) -> None:
        """Remember *sources* as processed. Call only once their output is written."""
        digests = {source.path.as_posix(): _digest(source) for source in sources}
        with self._lock:
            self._digests.update(digests)


def _digest(source: SourceFile) -> str:
    return hashlib.sha1(source.contents).hexdigest()


def compress_image(contents: bytes) -> bytes:
    """Re-encode *contents* with optimisation; the smaller result wins.

    Formats without a lossless optimisation path come back unchanged.

    Raises:
        PIL.UnidentifiedImageError: Pillow cannot read *contents*.
    """
    with Image.open(io.BytesIO(contents)) as image:
        options = _SAVE_OPTIONS.get(image.format or "")
        if options is None or getattr(image, "is_animated", False):
            return contents
        buffer = io.BytesIO()
        image.save(buffer, format=image.format, **options)
    optimised = buffer.getvalue()
    return optimised if len(optimised) < len(contents) else contents


def compress_images(files: Sequence[SourceFile], cache: ImageCache) -> Transformed:
    """Compress the files *cache* has not seen in their current form.

    Files Pillow cannot identify (SVG, ICO variants, ...) are copied as-is;
    corrupt raster files are reported and skipped.
    """
    result = Transformed()
    for source in files:
        if not cache.changed(source):
            continue
        try:
            contents = compress_image(source.contents)
        except UnidentifiedImageError:
            contents = source.contents
        except (OSError, SyntaxError, ValueError) as exc:
            result.warnings.append(f"{source.path}: {exc}")
            continue
        result.outputs.append(OutputFile(source.path, contents))
    return result


class ImageService(BaseService):
    def compile_images(self) -> ServiceResult:
        paths = self.paths
        files = read_glob(self.root, paths.images)
        cache = self._ctx.image_cache
        transformed = compress_images(files, cache)
        written = self._publish(paths.destination_images, transformed.outputs)
        sources = {source.path: source for source in files}
        cache.record(sources[output.path] for output in transformed.outputs)
        return ServiceResult(
            ok=True,
            op="compileImages",
            data={
                "files": self._relative(written),
                "count": len(written),
                "unchanged": len(files) - len(transformed.outputs) - len(transformed.warnings),
            },
            warnings=transformed.warnings,
        )
