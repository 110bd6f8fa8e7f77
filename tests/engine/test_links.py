from __future__ import annotations

import re

import pytest

from tool_harvester.engine.links import (
    AITOOLNET_RULES,
    FUTURETOOLS_RULES,
    GENERIC_RULES,
    is_likely_detail_path,
    normalize_website_url,
    pick_website_url,
    resolve_href,
    same_site,
    slugify,
    strip_title_suffix,
)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/", False),
        ("/a", False),
        ("/chatgpt", True),
        ("/about", False),
        ("/blog", False),
        ("/categories", False),
        ("/ai-tools/chatgpt", True),
        ("/text-to-speech/murf", False),
    ],
)
def test_aitoolnet_detail_paths(path: str, expected: bool) -> None:
    assert is_likely_detail_path(path, AITOOLNET_RULES) is expected


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/tools/midjourney", True),
        ("/midjourney", True),
        ("/tags/video", False),
        ("/category/writing", False),
        ("/a/b/c", False),
    ],
)
def test_futuretools_detail_paths(path: str, expected: bool) -> None:
    assert is_likely_detail_path(path, FUTURETOOLS_RULES) is expected


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/", False),
        ("/p", True),
        ("/products/widget", True),
        ("/deep/nested/widget", True),
        ("/help/widget", False),
        ("/docs/start", False),
    ],
)
def test_generic_detail_paths(path: str, expected: bool) -> None:
    assert is_likely_detail_path(path, GENERIC_RULES) is expected


def test_strict_pick_requires_action_word() -> None:
    anchors = [
        ("https://www.aitoolnet.com/other", "Visit website"),
        ("https://twitter.com/acme", "Twitter"),
        ("https://acme.ai/?ref=aitoolnet", "Visit Website"),
    ]
    assert pick_website_url(anchors, "aitoolnet.com") == "https://acme.ai/?ref=aitoolnet"


def test_strict_pick_uses_word_boundaries() -> None:
    anchors = [("https://acme.ai", "Opener"), ("https://acme.io", "Trying hard")]
    assert pick_website_url(anchors, "aitoolnet.com") is None


def test_loose_pick_prefers_cta_then_short_https_text() -> None:
    anchors = [
        ("http://plain.example", "Plain"),
        ("https://short.example", "Acme"),
        ("https://cta.example", "Get started"),
    ]
    assert pick_website_url(anchors, "example.com", loose=True) == "https://cta.example"
    assert pick_website_url(anchors[:2], "example.com", loose=True) == "https://short.example"
    assert pick_website_url(anchors[:1], "example.com", loose=True) is None


def test_same_site_accepts_subdomains_only() -> None:
    assert same_site("https://www.futuretools.io/tools/x", "futuretools.io")
    assert same_site("https://blog.futuretools.io/", "futuretools.io")
    assert not same_site("https://notfuturetools.io/", "futuretools.io")
    assert not same_site("", "futuretools.io")


def test_resolve_href_filters_non_http_targets() -> None:
    base = "https://example.com/list/"
    assert resolve_href("/tools/a", base) == "https://example.com/tools/a"
    assert resolve_href("b", base) == "https://example.com/list/b"
    assert resolve_href("mailto:hi@example.com", base) == ""
    assert resolve_href("javascript:void(0)", base) == ""
    assert resolve_href("#top", base) == ""
    assert resolve_href(None, base) == ""


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("https://www.Acme.ai/", "acme.ai"),
        ("http://acme.ai///", "acme.ai"),
        ("acme.ai/path/", "acme.ai/path"),
        ("https://acme.ai/#home", "acme.ai"),
        ("https://www.acme.ai/tools/#pricing", "acme.ai/tools"),
        ("", ""),
    ],
)
def test_normalize_website_url(raw: str, expected: str) -> None:
    assert normalize_website_url(raw) == expected


def test_slugify_and_title_suffix() -> None:
    assert slugify("Acme AI") == "acme-ai"
    assert slugify("  C++ Tools!  ") == "c-tools"
    pattern = re.compile(r"\s*-\s*Aitoolnet\s*$", re.IGNORECASE)
    assert strip_title_suffix("Acme AI - Aitoolnet", pattern) == "Acme AI"
    assert strip_title_suffix("Acme AI", pattern) == "Acme AI"
