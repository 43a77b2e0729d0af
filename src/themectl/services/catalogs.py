"""CatalogService — translation template extraction and catalog compilation.

Extraction scans the *compiled* PHP templates, so it must run after
``compileTemplates``. WordPress passes the text domain as a call argument;
only calls whose domain argument equals the theme's domain are collected.
The scan is a Babel extraction method, so Babel handles keyword specs,
plural forms, contexts and catalog merging.
"""

from __future__ import annotations

import io
import re
from collections.abc import Collection, Iterator, Mapping, Sequence
from pathlib import PurePosixPath
from typing import IO, Any

from babel.messages.catalog import Catalog
from babel.messages.extract import extract
from babel.messages.mofile import write_mo
from babel.messages.pofile import PoFileError, read_po, write_po

from themectl.domain.assets import OutputFile, SourceFile, Transformed
from themectl.domain.naming import substitute_text_domain
from themectl.domain.theme import load_theme_meta
from themectl.infrastructure.filesystem import read_glob, write_outputs
from themectl.services.base import BaseService
from themectl.services.result import ServiceResult

# Babel keyword specs: message argument positions, ``(n, "c")`` marks the context.
WORDPRESS_KEYWORDS: dict[str, tuple[Any, ...]] = {
    "__": (1,),
    "_e": (1,),
    "esc_html__": (1,),
    "esc_html_e": (1,),
    "esc_attr__": (1,),
    "esc_attr_e": (1,),
    "_x": (1, (2, "c")),
    "_ex": (1, (2, "c")),
    "esc_attr_x": (1, (2, "c")),
    "esc_html_x": (1, (2, "c")),
    "_n": (1, 2),
    "_nx": (1, 2, (4, "c")),
    "_n_noop": (1, 2),
    "_nx_noop": (1, 2, (3, "c")),
}

# 1-based position of the text-domain argument per keyword.
DOMAIN_ARGUMENT: dict[str, int] = {
    "__": 2,
    "_e": 2,
    "esc_html__": 2,
    "esc_html_e": 2,
    "esc_attr__": 2,
    "esc_attr_e": 2,
    "_x": 3,
    "_ex": 3,
    "esc_attr_x": 3,
    "esc_html_x": 3,
    "_n": 4,
    "_nx": 5,
    "_n_noop": 3,
    "_nx_noop": 4,
}

COMMENT_TAGS = ("translators:",)

_DOUBLE_QUOTE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "v": "\v",
    "f": "\f",
    "e": "\x1b",
    "$": "$",
    '"': '"',
    "\\": "\\",
}
_COMMENT_RE = re.compile(r"/\*(.*?)\*/|//([^\n]*)", re.S)


def _read_string(text: str, pos: int) -> tuple[str, int] | None:
    """Decode the PHP string literal opening at *pos*; None if unterminated."""
    quote = text[pos]
    out: list[str] = []
    i = pos + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            nxt = text[i + 1]
            if quote == "'":
                out.append(nxt if nxt in "\\'" else ch + nxt)
            else:
                out.append(_DOUBLE_QUOTE_ESCAPES.get(nxt, ch + nxt))
            i += 2
            continue
        if ch == quote:
            return "".join(out), i + 1
        out.append(ch)
        i += 1
    return None


def _parse_arguments(text: str, pos: int) -> list[str | None] | None:
    """Arguments of the call whose ``(`` ends just before *pos*.

    An argument made only of string literals (optionally joined with ``.``)
    becomes its string value; anything else becomes None. Returns None when
    the call is never closed.
    """
    args: list[str | None] = []
    parts: list[str] = []
    literal = True
    seen = False
    depth = 0
    i = pos
    while i < len(text):
        ch = text[i]
        if ch in "'\"":
            decoded = _read_string(text, i)
            if decoded is None:
                return None
            value, i = decoded
            if depth == 0:
                parts.append(value)
            seen = True
            continue
        if ch in "([{":
            depth += 1
            literal = False
            seen = True
        elif ch in ")]}":
            if depth == 0:
                if seen or args:
                    args.append("".join(parts) if literal and parts else None)
                return args
            depth -= 1
        elif ch == "," and depth == 0:
            args.append("".join(parts) if literal and parts else None)
            parts, literal, seen = [], True, False
        elif not ch.isspace() and not (ch == "." and depth == 0):
            literal = False
            seen = True
        i += 1
    return None


def _translator_comments(text: str, start: int, comment_tags: Collection[str]) -> list[str]:
    """The last tagged comment on the call's line or the line above it."""
    if not comment_tags:
        return []
    line_start = text.rfind("\n", 0, start) + 1
    window_start = text.rfind("\n", 0, line_start - 1) + 1 if line_start > 0 else 0
    found: list[str] = []
    for match in _COMMENT_RE.finditer(text, window_start, start):
        body = (match.group(1) or match.group(2) or "").strip()
        if any(body.startswith(tag) for tag in comment_tags):
            found = [body]
    return found


def extract_wordpress(
    fileobj: IO[bytes],
    keywords: Collection[str],
    comment_tags: Collection[str],
    options: Mapping[str, Any],
) -> Iterator[tuple[int, str, tuple[str | None, ...], list[str]]]:
    """Babel extraction method for WordPress i18n calls in PHP.

    Options:
        domain: Keep only calls whose text-domain argument equals this.
        encoding: Source encoding (default UTF-8).
    """
    text = fileobj.read().decode(options.get("encoding", "utf-8"))
    names = sorted(keywords, key=len, reverse=True)
    if not names:
        return
    call_re = re.compile(r"(?<![\w$>:\\])(" + "|".join(map(re.escape, names)) + r")\s*\(")
    domain = options.get("domain")

    for match in call_re.finditer(text):
        args = _parse_arguments(text, match.end())
        if args is None:
            continue
        funcname = match.group(1)
        position = DOMAIN_ARGUMENT.get(funcname, 0)
        if domain is not None and position:
            if len(args) < position or args[position - 1] != domain:
                continue
        padding = (None,) * max(0, position - len(args))
        lineno = text.count("\n", 0, match.start()) + 1
        yield (
            lineno,
            funcname,
            (*args, *padding),
            _translator_comments(text, match.start(), comment_tags),
        )


def build_pot(
    files: Sequence[SourceFile],
    domain: str,
    *,
    bug_report: str | None = None,
    team: str | None = None,
) -> Transformed:
    """Extract translatable strings from *files* into ``<domain>.pot``.

    ``$text_domain`` is replaced with the quoted domain before scanning so
    calls written against the placeholder are matched.
    """
    result = Transformed()
    catalog = Catalog(
        domain=domain,
        project=domain,
        msgid_bugs_address=bug_report,
        language_team=team,
        fuzzy=False,
    )
    for source in sorted(files, key=lambda f: f.path.as_posix()):
        try:
            contents = substitute_text_domain(source.text(), domain).encode("utf-8")
        except UnicodeDecodeError as exc:
            result.warnings.append(f"{source.path}: {exc}")
            continue
        for lineno, message, comments, context in extract(
            extract_wordpress,
            io.BytesIO(contents),
            keywords=WORDPRESS_KEYWORDS,
            comment_tags=COMMENT_TAGS,
            options={"domain": domain},
            strip_comment_tags=True,
        ):
            catalog.add(
                message,
                None,
                [(source.path.as_posix(), lineno)],
                auto_comments=comments,
                context=context,
            )

    buffer = io.BytesIO()
    write_po(buffer, catalog)
    result.outputs.append(OutputFile(PurePosixPath(f"{domain}.pot"), buffer.getvalue()))
    return result


def compile_catalogs(files: Sequence[SourceFile]) -> Transformed:
    """Compile each portable catalog (``.po``) into a binary one (``.mo``)."""
    result = Transformed()
    for source in files:
        try:
            catalog = read_po(io.BytesIO(source.contents), abort_invalid=True)
        except (PoFileError, ValueError) as exc:
            result.warnings.append(f"{source.path}: {exc}")
            continue
        buffer = io.BytesIO()
        write_mo(buffer, catalog)
        result.outputs.append(OutputFile(source.path.with_suffix(".mo"), buffer.getvalue()))
    return result


class CatalogService(BaseService):
    def compile_pot(self) -> ServiceResult:
        """Write ``<domain>.pot`` to the installed theme and back into the theme source."""
        paths = self.paths
        domain = self.settings.domain or ""
        files = read_glob(self.root, paths.compiled_templates)

        meta = load_theme_meta(self._abs(paths.config))
        transformed = build_pot(
            files,
            domain,
            bug_report=meta.author_uri if meta else None,
            team=meta.author if meta else None,
        )
        written = write_outputs(self._abs(paths.destination_languages), transformed.outputs)
        written += write_outputs(self._abs(paths.languages_dir), transformed.outputs)
        return ServiceResult(
            ok=True,
            op="compilePOT",
            data={"files": self._relative(written), "count": len(written), "scanned": len(files)},
            warnings=transformed.warnings,
        )

    def compile_po(self) -> ServiceResult:
        paths = self.paths
        files = read_glob(self.root, paths.languages)
        transformed = compile_catalogs(files)
        written = self._publish(paths.destination_languages, transformed.outputs)
        return ServiceResult(
            ok=True,
            op="compilePO",
            data={"files": self._relative(written), "count": len(written)},
            warnings=transformed.warnings,
        )
