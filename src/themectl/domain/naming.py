"""Text-domain naming and placeholder substitution.

The ``$text_domain`` placeholder is replaced in exactly two places: the
compiled templates scanned for the translation catalog, and the theme's
``functions.php``. Nothing else calls :func:`substitute_text_domain`.
"""

from __future__ import annotations

import re

TEXT_DOMAIN_TOKEN = "$text_domain"

# Acronym runs, capitalised words, lowercase runs, digit runs.
_WORD_RE = re.compile(r"[A-Z]{2,}(?=[A-Z][a-z]|[^A-Za-z]|$)|[A-Z]?[a-z]+|[A-Z]+|\d+")


def kebab_case(value: str) -> str:
    """Convert *value* to kebab-case.

    Examples:
        >>> kebab_case("My Theme")
        'my-theme'
        >>> kebab_case("myTheme")
        'my-theme'
        >>> kebab_case("__My_theme__")
        'my-theme'
        >>> kebab_case("XMLFeed2")
        'xml-feed-2'
    """
    return "-".join(word.lower() for word in _WORD_RE.findall(value))


def quote_domain(domain: str) -> str:
    """Double-quoted PHP string literal for *domain*."""
    return f'"{domain}"'


def substitute_text_domain(text: str, domain: str) -> str:
    """Replace every ``$text_domain`` placeholder with the quoted domain."""
    return text.replace(TEXT_DOMAIN_TOKEN, quote_domain(domain))


def text_domain_header(domain: str) -> str:
    """PHP prologue declaring ``$text_domain`` as a global for the whole theme."""
    return f"<?php global {TEXT_DOMAIN_TOKEN}; {TEXT_DOMAIN_TOKEN} = {quote_domain(domain)}; ?>"
