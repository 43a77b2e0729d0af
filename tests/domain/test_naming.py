"""Tests for kebab-casing and text-domain substitution."""

import pytest

from themectl.domain.naming import (
    TEXT_DOMAIN_TOKEN,
    kebab_case,
    quote_domain,
    substitute_text_domain,
    text_domain_header,
)


class TestKebabCase:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("My Theme", "my-theme"),
            ("myTheme", "my-theme"),
            ("my_theme", "my-theme"),
            ("__My_theme__", "my-theme"),
            ("my-theme", "my-theme"),
            ("XMLFeed2", "xml-feed-2"),
            ("storefront", "storefront"),
            ("Twenty Twenty-Four", "twenty-twenty-four"),
        ],
    )
    def test_conversions(self, value: str, expected: str) -> None:
        assert kebab_case(value) == expected

    def test_idempotent(self) -> None:
        once = kebab_case("Some Odd_Theme Name")
        assert kebab_case(once) == once


class TestSubstitution:
    def test_token_becomes_quoted_domain(self) -> None:
        text = "__('Hi', $text_domain); _e('Bye', $text_domain);"
        assert substitute_text_domain(text, "my-theme") == (
            '__(\'Hi\', "my-theme"); _e(\'Bye\', "my-theme");'
        )

    def test_text_without_token_unchanged(self) -> None:
        assert substitute_text_domain("<p>plain</p>", "x") == "<p>plain</p>"

    def test_quote_domain(self) -> None:
        assert quote_domain("my-theme") == '"my-theme"'

    def test_header_declares_global(self) -> None:
        header = text_domain_header("my-theme")
        assert header == '<?php global $text_domain; $text_domain = "my-theme"; ?>'
        assert TEXT_DOMAIN_TOKEN in header
