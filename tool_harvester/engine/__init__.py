"""Engine components: fetch → classify → parse, fanned out by the pool."""

from .fetcher import FetchError, FetchResponse, Fetcher
from .links import DetailPathRules, is_likely_detail_path, normalize_website_url, slugify
from .parser import Anchor, HtmlPage
from .pool import run_bounded

__all__ = [
    "Anchor",
    "DetailPathRules",
    "FetchError",
    "FetchResponse",
    "Fetcher",
    "HtmlPage",
    "is_likely_detail_path",
    "normalize_website_url",
    "run_bounded",
    "slugify",
]
