from __future__ import annotations

from tool_harvester.extractors import GenericExtractor

LISTING = f"""
<a href="/products/widget">Widget Pro</a>
<a href="/products/gadget">Gadget</a>
<a href="/products/untitled">Untitled item</a>
<a href="/about-us">About us</a>
<a href="https://other.com/products/x">Elsewhere</a>
<a href="/products/long">{"x" * 120}</a>
"""

WIDGET = """
<html><head><title>Widget Pro | Example Store</title>
<meta name="description" content="Builds widgets."></head>
<body>
  <a href="https://example.com/cart">Cart</a>
  <a href="http://twitter.com/widget">Follow us on our very long social media page link text here</a>
  <a href="https://widget.example.org">Get started</a>
</body></html>
"""

GADGET = '<html><head><link rel="canonical" href="https://example.com/products/gadget"></head><body><h1>Gadget</h1></body></html>'

UNTITLED = "<html><body><p>nothing to see</p></body></html>"


def test_generic_scrape_prefers_recall(fake_fetcher, sample_source) -> None:
    fetcher = fake_fetcher(
        {
            "https://example.com/": LISTING,
            "https://example.com/products/widget": WIDGET,
            "https://example.com/products/gadget": GADGET,
            "https://example.com/products/untitled": UNTITLED,
        }
    )
    extractor = GenericExtractor(fetcher)

    result = extractor.scrape(sample_source())

    assert result.success is True
    assert result.metadata.candidates_found == 3
    records = {record.name: record for record in result.items}
    assert set(records) == {"Widget Pro", "Gadget"}
    assert records["Widget Pro"].website_url == "https://widget.example.org"
    assert records["Widget Pro"].description == "Builds widgets."
    assert records["Gadget"].website_url == "https://example.com/products/gadget"
    assert records["Gadget"].slug == "gadget"
    assert result.errors == ["Discarded https://example.com/products/untitled: no title"]


def test_generic_requires_a_url(fake_fetcher, sample_source) -> None:
    result = GenericExtractor(fake_fetcher({})).scrape(sample_source(target_url=""))
    assert result.success is False
    assert result.errors == ["URL is required"]
