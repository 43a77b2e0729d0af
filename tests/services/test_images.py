"""Tests for image compression and the change cache."""

import io
from pathlib import Path, PurePosixPath

import pytest
from PIL import Image

from tests.conftest import destination, png_bytes, write
from themectl.domain.assets import SourceFile
from themectl.services import base
from themectl.services.context import BuildContext
from themectl.services.images import ImageCache, ImageService, compress_image, compress_images


def _image(name: str, contents: bytes) -> SourceFile:
    return SourceFile(PurePosixPath(name), contents)


class TestImageCache:
    def test_unrecorded_is_a_change(self) -> None:
        cache = ImageCache()
        assert cache.changed(_image("a.png", b"1")) is True
        assert cache.changed(_image("a.png", b"1")) is True
        assert len(cache) == 0

    def test_recorded_is_unchanged(self) -> None:
        cache = ImageCache()
        cache.record([_image("a.png", b"1")])
        assert cache.changed(_image("a.png", b"1")) is False
        assert len(cache) == 1

    def test_new_contents_is_a_change(self) -> None:
        cache = ImageCache()
        cache.record([_image("a.png", b"1")])
        assert cache.changed(_image("a.png", b"2")) is True

    def test_keyed_by_path(self) -> None:
        cache = ImageCache()
        cache.record([_image("a.png", b"1")])
        assert cache.changed(_image("b.png", b"1")) is True


class TestCompressImage:
    def test_never_grows_and_keeps_pixels(self) -> None:
        original = png_bytes((64, 64), "blue")
        compressed = compress_image(original)
        assert len(compressed) <= len(original)
        with Image.open(io.BytesIO(compressed)) as before, Image.open(io.BytesIO(original)) as after:
            assert before.tobytes() == after.tobytes()

    def test_unsupported_format_unchanged(self) -> None:
        buffer = io.BytesIO()
        Image.new("RGB", (4, 4)).save(buffer, format="BMP")
        assert compress_image(buffer.getvalue()) == buffer.getvalue()


class TestCompressImages:
    def test_unidentified_copied_verbatim(self) -> None:
        svg = b"<svg xmlns='http://www.w3.org/2000/svg'/>"
        result = compress_images([_image("icon.svg", svg)], ImageCache())
        assert [(o.path.name, o.contents) for o in result.outputs] == [("icon.svg", svg)]

    def test_corrupt_image_is_a_warning(self) -> None:
        result = compress_images([_image("broken.png", png_bytes()[:60])], ImageCache())
        assert result.outputs == []
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("broken.png:")

    def test_recorded_skipped(self) -> None:
        cache = ImageCache()
        files = [_image("a.png", png_bytes())]
        assert len(compress_images(files, cache).outputs) == 1
        cache.record(files)
        assert compress_images(files, cache).outputs == []

    def test_compression_does_not_record(self) -> None:
        cache = ImageCache()
        files = [_image("a.png", png_bytes()), _image("broken.png", png_bytes()[:60])]
        compress_images(files, cache)
        assert len(cache) == 0


class TestImageService:
    def test_compile_and_rerun(self, build_context: BuildContext, project: Path) -> None:
        service = ImageService(build_context)
        first = service.compile_images()
        assert first.ok
        assert first.data["count"] == 1
        assert (destination(project) / "images" / "logo.png").is_file()

        second = service.compile_images()
        assert second.data["count"] == 0
        assert second.data["unchanged"] == 1

    def test_changed_image_recompressed(self, build_context: BuildContext, project: Path) -> None:
        service = ImageService(build_context)
        service.compile_images()
        write(project, "themes/my-theme/images/logo.png", png_bytes(color="green"))
        assert service.compile_images().data["count"] == 1

    def test_failed_write_retried_next_pass(
        self, build_context: BuildContext, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def disk_full(*args: object, **kwargs: object) -> list[Path]:
            raise OSError("No space left on device")

        service = ImageService(build_context)
        with monkeypatch.context() as patch:
            patch.setattr(base, "write_outputs", disk_full)
            with pytest.raises(OSError, match="No space left"):
                service.compile_images()
        assert len(build_context.image_cache) == 0

        retried = service.compile_images()
        assert retried.data["count"] == 1
        assert (destination(project) / "images" / "logo.png").is_file()

    def test_corrupt_image_warned_again_on_rerun(
        self, build_context: BuildContext, project: Path
    ) -> None:
        write(project, "themes/my-theme/images/broken.png", png_bytes()[:60])
        service = ImageService(build_context)
        assert len(service.compile_images().warnings) == 1
        again = service.compile_images()
        assert len(again.warnings) == 1
        assert again.data["unchanged"] == 1
