"""Development server bridge.

Two implementations of one small interface, picked once at startup:

- :class:`NullDevServer` — production; ``notify`` hands its input back.
- :class:`LiveReloadDevServer` — serves ``public/`` (or proxies to another
  server) through livereload and tells connected browsers which compiled
  files changed.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

import requests
import structlog
from livereload import Server
from livereload.watcher import Watcher

if TYPE_CHECKING:
    from themectl.config.models import ServerConfig

# Headers a proxy must not forward (RFC 7230 section 6.1), plus the ones
# requests invalidates by decoding the body.
_HOP_BY_HOP = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "content-encoding",
        "content-length",
    }
)


class DevServer(Protocol):
    """Bridge between compilers and connected browsers."""

    def notify(self, paths: Sequence[Path]) -> Sequence[Path]:
        """Announce freshly written *paths*; returns them unchanged."""
        ...

    def serve(self, config: ServerConfig, root: Path) -> None:
        """Serve *root* (or ``config.proxy``) until interrupted."""
        ...


class NullDevServer:
    """Production stand-in: no browsers, no server."""

    def __init__(self) -> None:
        self._log = structlog.get_logger(__name__)

    def notify(self, paths: Sequence[Path]) -> Sequence[Path]:
        return paths

    def serve(self, config: ServerConfig, root: Path) -> None:
        self._log.warning("devserver.disabled", reason="production build")


class NotifyingWatcher(Watcher):
    """livereload watcher that also reports paths pushed by the compilers.

    Pushed paths are collapsed into one reload per poll: a single path lets
    the browser hot-swap a stylesheet, several paths trigger a full reload.
    """

    def __init__(self) -> None:
        super().__init__()
        self._pending: list[str] = []
        self._lock = threading.Lock()

    def push(self, paths: Iterable[Path]) -> None:
        with self._lock:
            self._pending.extend(str(p) for p in paths)

    def drain(self) -> str | None:
        """Pop everything queued; the reload path or None if nothing was queued."""
        with self._lock:
            pending, self._pending = self._pending, []
        if not pending:
            return None
        unique = sorted(set(pending))
        return unique[0] if len(unique) == 1 else "*"

    def examine(self) -> tuple[str | None, float | None]:
        filepath = self.drain()
        if filepath is not None:
            self.filepath = filepath
            return filepath, None
        return super().examine()


class ProxyApp:
    """WSGI app forwarding every request to *target* with requests."""

    def __init__(self, target: str, *, session: requests.Session | None = None) -> None:
        self._target = target.rstrip("/")
        self._session = session or requests.Session()

    def _url(self, environ: dict[str, Any]) -> str:
        url = self._target + (environ.get("PATH_INFO") or "/")
        query = environ.get("QUERY_STRING")
        return f"{url}?{query}" if query else url

    @staticmethod
    def _request_headers(environ: dict[str, Any]) -> dict[str, str]:
        headers = {
            key[5:].replace("_", "-").title(): value
            for key, value in environ.items()
            if key.startswith("HTTP_") and key not in ("HTTP_HOST", "HTTP_ACCEPT_ENCODING")
        }
        if environ.get("CONTENT_TYPE"):
            headers["Content-Type"] = environ["CONTENT_TYPE"]
        return headers

    def __call__(self, environ: dict[str, Any], start_response: Any) -> list[bytes]:
        length = int(environ.get("CONTENT_LENGTH") or 0)
        body = environ["wsgi.input"].read(length) if length else None
        response = self._session.request(
            environ.get("REQUEST_METHOD", "GET"),
            self._url(environ),
            headers=self._request_headers(environ),
            data=body,
            allow_redirects=False,
            timeout=30,
        )
        headers = [
            (name, value)
            for name, value in response.headers.items()
            if name.lower() not in _HOP_BY_HOP
        ]
        start_response(f"{response.status_code} {response.reason}", headers)
        return [response.content]


class LiveReloadDevServer:
    """livereload-backed server that reloads browsers on compiled output."""

    def __init__(self, *, log_prefix: str = "Server", announce: bool = False) -> None:
        self._watcher = NotifyingWatcher()
        self._announce = announce
        self._log = structlog.get_logger(__name__).bind(prefix=log_prefix)

    @property
    def watcher(self) -> NotifyingWatcher:
        return self._watcher

    def notify(self, paths: Sequence[Path]) -> Sequence[Path]:
        if paths:
            self._watcher.push(paths)
            emit = self._log.info if self._announce else self._log.debug
            emit("devserver.notify", files=len(paths))
        return paths

    def build(self, config: ServerConfig) -> Server:
        """Create the livereload server without starting it."""
        app = ProxyApp(config.proxy) if config.proxy else None
        return Server(app=app, watcher=self._watcher)

    def serve(self, config: ServerConfig, root: Path) -> None:
        server = self.build(config)
        server.watch(str(root))
        self._log.info(
            "devserver.start",
            host=config.host,
            port=config.port,
            proxy=config.proxy,
            root=str(root),
        )
        server.serve(
            port=config.port,
            host=config.host,
            root=None if config.proxy else str(root),
            open_url_delay=0 if config.open else None,
        )
