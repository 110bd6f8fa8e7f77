"""DOM helpers shared by the extractors."""

from __future__ import annotations

from dataclasses import dataclass

from selectolax.parser import HTMLParser

from .links import resolve_href


@dataclass(frozen=True)
class Anchor:
    """Absolute link target with its visible text."""

    url: str
    text: str


class HtmlPage:
    """Parsed page with the lookups every extractor needs."""

    def __init__(self, html: str, url: str) -> None:
        self.url = url
        self.tree = HTMLParser(html or "")

    def meta(self, key: str) -> str | None:
        """Content of ``<meta property=key>`` or ``<meta name=key>``."""

        for selector in (f'meta[property="{key}"]', f'meta[name="{key}"]'):
            node = self.tree.css_first(selector)
            if node is None:
                continue
            content = node.attributes.get("content")
            if content and content.strip():
                return content.strip()
        return None

    def text(self, selector: str) -> str | None:
        node = self.tree.css_first(selector)
        if node is None:
            return None
        value = node.text(separator=" ", strip=True)
        return value or None

    def title(self) -> str | None:
        return self.text("title")

    def first_heading(self) -> str | None:
        return self.text("h1")

    def description(self) -> str | None:
        return self.meta("description") or self.meta("og:description")

    def canonical_url(self) -> str:
        """Canonical location of the page, defaulting to the fetched URL."""

        node = self.tree.css_first('link[rel="canonical"]')
        href = node.attributes.get("href") if node is not None else None
        href = href or self.meta("og:url")
        return resolve_href(href, self.url) or self.url

    def anchors(self) -> list[Anchor]:
        anchors: list[Anchor] = []
        for node in self.tree.css("a[href]"):
            url = resolve_href(node.attributes.get("href"), self.url)
            if not url:
                continue
            anchors.append(Anchor(url=url, text=node.text(separator=" ", strip=True)))
        return anchors


__all__ = ["Anchor", "HtmlPage"]
