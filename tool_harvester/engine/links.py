"""URL heuristics: detail-page classification, outbound link choice, normalisation.

Everything here is a pure function so precision/recall tuning can be tested
without touching the network.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable
from urllib.parse import urldefrag, urljoin, urlparse

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")
_SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*://")

ACTION_WORDS = re.compile(r"\b(website|visit|official|open|try|go to|view)\b")
CTA_KEYWORDS = (
    "website",
    "visit",
    "official",
    "open",
    "try",
    "go to",
    "view",
    "get started",
    "sign up",
    "launch",
    "demo",
    "homepage",
)
CTA_MAX_TEXT = 50


@dataclass(frozen=True)
class DetailPathRules:
    """Source-specific tuning for :func:`is_likely_detail_path`."""

    reserved_segments: frozenset[str] = field(default_factory=frozenset)
    reserved_substrings: tuple[str, ...] = ()
    nested_prefixes: tuple[str, ...] = ()
    max_segments: int | None = 1
    min_length: int = 3


DEFAULT_RULES = DetailPathRules(
    reserved_segments=frozenset(
        {"about", "blog", "privacy", "terms", "contact", "category", "search", "pricing", "docs"}
    ),
    nested_prefixes=("items", "tools"),
)

AITOOLNET_RULES = DetailPathRules(
    reserved_segments=frozenset(
        {
            "about",
            "blog",
            "popular",
            "monthly",
            "privacy",
            "terms",
            "contact",
            "submit",
            "ranking",
            "categories",
            "gpts",
            "home",
            "index",
            "top",
            "latest",
        }
    ),
    nested_prefixes=("ai-tools",),
)

FUTURETOOLS_RULES = DetailPathRules(
    reserved_substrings=("tag", "category"),
    max_segments=2,
)

GENERIC_RULES = DetailPathRules(
    reserved_substrings=(
        "about",
        "contact",
        "privacy",
        "terms",
        "blog",
        "login",
        "signup",
        "help",
        "support",
        "faq",
        "pricing",
        "features",
        "home",
        "index",
        "category",
        "tag",
        "search",
        "api",
        "docs",
        "documentation",
    ),
    max_segments=None,
    min_length=2,
)


def is_likely_detail_path(path: str, rules: DetailPathRules = DEFAULT_RULES) -> bool:
    """Guess whether ``path`` on a source's own domain is a single-item page."""

    lowered = (path or "").lower()
    if lowered == "/" or len(lowered) < rules.min_length:
        return False
    segments = [segment for segment in lowered.split("/") if segment]
    if not segments:
        return False
    if segments[0] in rules.reserved_segments:
        return False
    if any(fragment in lowered for fragment in rules.reserved_substrings):
        return False
    if len(segments) == 1:
        return True
    if segments[0] in rules.nested_prefixes:
        return True
    return rules.max_segments is None or len(segments) <= rules.max_segments


def resolve_href(href: str | None, base_url: str) -> str:
    """Return an absolute http(s) URL for ``href`` or an empty string."""

    if not href:
        return ""
    href = href.strip()
    if not href or href.startswith(("javascript:", "mailto:", "tel:", "#")):
        return ""
    try:
        full = urljoin(base_url, href)
    except ValueError:
        return ""
    if urlparse(full).scheme not in ("http", "https"):
        return ""
    return full


def bare_host(url_or_host: str) -> str:
    """Lower-cased host without a leading ``www.``."""

    host = urlparse(url_or_host).hostname if "://" in url_or_host else url_or_host
    host = (host or "").lower()
    return host[4:] if host.startswith("www.") else host


def same_site(url: str, site_host: str) -> bool:
    """True when ``url`` is served by ``site_host`` or one of its subdomains."""

    host = bare_host(url)
    site = bare_host(site_host)
    if not host or not site:
        return False
    return host == site or host.endswith("." + site)


def looks_like_website_button(text: str) -> bool:
    return bool(ACTION_WORDS.search((text or "").strip().lower()))


def pick_website_url(
    anchors: Iterable[tuple[str, str]],
    site_host: str,
    *,
    loose: bool = False,
) -> str | None:
    """Choose the item's own homepage among ``(url, text)`` anchors.

    Strict mode only accepts outbound anchors labelled like a "visit website"
    button. Loose mode accepts any outbound anchor, ranking CTA keywords first
    and then short https link texts.
    """

    cta_like: list[str] = []
    for url, text in anchors:
        if not url or same_site(url, site_host):
            continue
        label = (text or "").strip().lower()
        if not loose:
            if looks_like_website_button(label):
                return url
            continue
        if any(keyword in label for keyword in CTA_KEYWORDS):
            return url
        if url.startswith("https://") and 0 < len(label) < CTA_MAX_TEXT:
            cta_like.append(url)
    return cta_like[0] if cta_like else None


def strip_title_suffix(title: str, pattern: re.Pattern[str]) -> str:
    return pattern.sub("", title or "").strip()


def slugify(value: str) -> str:
    return _SLUG_STRIP.sub("-", (value or "").lower()).strip("-")


def normalize_website_url(url: str) -> str:
    """Comparable form of a homepage URL: no scheme, no ``www.``, no fragment, no trailing slash."""

    normalized = urldefrag((url or "").strip()).url.lower()
    normalized = _SCHEME.sub("", normalized)
    if normalized.startswith("www."):
        normalized = normalized[4:]
    return normalized.rstrip("/")


__all__ = [
    "AITOOLNET_RULES",
    "DEFAULT_RULES",
    "DetailPathRules",
    "FUTURETOOLS_RULES",
    "GENERIC_RULES",
    "bare_host",
    "is_likely_detail_path",
    "looks_like_website_button",
    "normalize_website_url",
    "pick_website_url",
    "resolve_href",
    "same_site",
    "slugify",
    "strip_title_suffix",
]
