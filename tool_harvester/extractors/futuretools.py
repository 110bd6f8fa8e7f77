"""futuretools.io directory."""

from __future__ import annotations

import re

from ..config import SourceType
from ..engine import HtmlPage
from ..engine.links import FUTURETOOLS_RULES
from .directory import DirectoryExtractor


class FutureToolsExtractor(DirectoryExtractor):
    name = SourceType.FUTURETOOLS
    default_url = "https://www.futuretools.io/"
    site_domain = "futuretools.io"
    rules = FUTURETOOLS_RULES
    min_link_text = 3
    title_suffix = re.compile(r"\s*[-|]\s*FutureTools?\s*$", re.IGNORECASE)

    def extract_category(self, page: HtmlPage) -> str | None:
        return page.text('[class*="category"], [class*="tag"]')

    def extract_pricing(self, page: HtmlPage) -> str | None:
        hint = (page.text('[class*="pricing"], [class*="price"]') or "").lower()
        if "freemium" in hint:
            return "Freemium"
        if "free" in hint:
            return "Free"
        if "paid" in hint or "$" in hint:
            return "Paid"
        return None


__all__ = ["FutureToolsExtractor"]
