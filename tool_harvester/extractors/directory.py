"""Shared extraction for curated tool-directory sites."""

from __future__ import annotations

import re
from typing import ClassVar
from urllib.parse import urlparse

from ..engine import HtmlPage
from ..engine.links import (
    is_likely_detail_path,
    pick_website_url,
    same_site,
    slugify,
    strip_title_suffix,
)
from ..records import PartialRecord
from .base import LARGE_RUN_THRESHOLD, BaseExtractor, DiscardedCandidate


class DirectoryExtractor(BaseExtractor):
    """Directory site whose detail pages link out through a "visit" button.

    A record needs an outbound anchor labelled with an action word, and the
    page's canonical location must still look like a detail page.
    """

    title_suffix: ClassVar[re.Pattern[str]]
    category_pages: ClassVar[tuple[str, ...]] = ()

    def listing_urls(self, url: str, limit: int) -> list[str]:
        if limit < LARGE_RUN_THRESHOLD:
            return [url]
        return list(dict.fromkeys([url, *self.category_pages]))

    def extract(self, page: HtmlPage, detail_url: str, site_host: str) -> PartialRecord:
        canonical = page.canonical_url()
        if not same_site(canonical, site_host) or not is_likely_detail_path(
            urlparse(canonical).path, self.rules
        ):
            raise DiscardedCandidate(f"canonical location {canonical} is not a detail page")

        raw_title = page.meta("og:title") or page.title() or page.first_heading()
        name = strip_title_suffix(raw_title or "", self.title_suffix)
        if not name:
            raise DiscardedCandidate("no title")

        anchors = ((anchor.url, anchor.text) for anchor in page.anchors())
        website_url = pick_website_url(anchors, site_host)
        if not website_url:
            raise DiscardedCandidate("no outbound website link")

        description = page.description()
        return PartialRecord(
            name=name,
            slug=slugify(name),
            website_url=website_url,
            short_description=description or name,
            description=description or name,
            category=self.extract_category(page),
            pricing=self.extract_pricing(page),
            logo_url=page.meta("og:image"),
            source_detail_url=detail_url,
        )

    def extract_category(self, page: HtmlPage) -> str | None:
        return None

    def extract_pricing(self, page: HtmlPage) -> str | None:
        return None


__all__ = ["DirectoryExtractor"]
