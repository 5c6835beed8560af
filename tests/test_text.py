"""Tests for slug and excerpt helpers."""

from __future__ import annotations

import pytest

from pdir.services.text import generate_slug, is_valid_slug, make_excerpt, matches_search


class TestGenerateSlug:
    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("My First Blog Post", "my-first-blog-post"),
            ("10 Tips for Better AI Prompts", "10-tips-for-better-ai-prompts"),
            ("How to Use ChatGPT in Church!", "how-to-use-chatgpt-in-church"),
            ("  Leading & Trailing Spaces  ", "leading-trailing-spaces"),
        ],
    )
    def test_generate_slug(self, title: str, expected: str) -> None:
        assert generate_slug(title) == expected
        assert is_valid_slug(expected)

    def test_nothing_usable(self) -> None:
        assert generate_slug("!!!") == ""


class TestIsValidSlug:
    @pytest.mark.parametrize(
        "slug",
        [
            "My Blog Post",
            "blog_post",
            "blog post",
            "BLOG-POST",
            "-leading-dash",
            "trailing-dash-",
            "double--dash",
        ],
    )
    def test_invalid(self, slug: str) -> None:
        assert not is_valid_slug(slug)


class TestMakeExcerpt:
    def test_short_content_unchanged(self) -> None:
        assert make_excerpt("short") == "short"

    def test_exactly_at_limit(self) -> None:
        assert make_excerpt("a" * 150) == "a" * 150

    def test_over_limit(self) -> None:
        assert make_excerpt("a" * 151) == "a" * 150 + "..."


class TestMatchesSearch:
    def test_blank_matches_everything(self) -> None:
        assert matches_search(None, [], [])
        assert matches_search("", ["x"], [])
        assert matches_search("  \t", ["x"], [])

    def test_fields_and_tags(self) -> None:
        assert matches_search("MiNiStRy", ["Welcome"], ["ministry"])
        assert matches_search("welcome", ["Welcome"], [])
        assert not matches_search("youth", ["Welcome"], ["ministry"])
