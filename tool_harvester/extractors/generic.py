"""Fallback extractor for sites without dedicated tuning."""

from __future__ import annotations

import re

from ..config import SourceType
from ..engine import HtmlPage
from ..engine.links import GENERIC_RULES, pick_website_url, slugify, strip_title_suffix
from ..records import PartialRecord
from .base import BaseExtractor, DiscardedCandidate

SITE_NAME_SUFFIX = re.compile(r"\s+[-|]\s+[^-|]+$")


class GenericExtractor(BaseExtractor):
    """Recall over precision: keep a record even without a recognisable CTA link.

    When no outbound link qualifies, the page's canonical (or fetched) URL becomes
    the website URL.
    """

    name = SourceType.GENERIC
    rules = GENERIC_RULES
    min_link_text = 3
    max_link_text = 100

    def extract(self, page: HtmlPage, detail_url: str, site_host: str) -> PartialRecord:
        raw_title = page.meta("og:title") or page.title() or page.first_heading()
        if not raw_title:
            raise DiscardedCandidate("no title")
        name = strip_title_suffix(raw_title, SITE_NAME_SUFFIX) or raw_title.strip()

        anchors = ((anchor.url, anchor.text) for anchor in page.anchors())
        website_url = pick_website_url(anchors, site_host, loose=True) or page.canonical_url()

        description = page.description()
        return PartialRecord(
            name=name,
            slug=slugify(name),
            website_url=website_url,
            short_description=description or name,
            description=description or name,
            logo_url=page.meta("og:image"),
            source_detail_url=detail_url,
        )


__all__ = ["GenericExtractor"]
