"""aitoolnet.com directory."""

from __future__ import annotations

import re

from ..config import SourceType
from ..engine.links import AITOOLNET_RULES
from .directory import DirectoryExtractor

_BASE = "https://www.aitoolnet.com"


class AitoolnetExtractor(DirectoryExtractor):
    name = SourceType.AITOOLNET
    default_url = f"{_BASE}/"
    site_domain = "aitoolnet.com"
    rules = AITOOLNET_RULES
    min_link_text = 2
    title_suffix = re.compile(r"\s*-\s*Aitoolnet\s*$", re.IGNORECASE)
    category_pages = tuple(
        f"{_BASE}/{path}"
        for path in (
            "popular",
            "latest",
            "ranking",
            "text-to-speech",
            "copywriting",
            "image-generator",
            "video-generator",
            "code-assistant",
            "writing-assistant",
            "chatbot",
            "productivity",
        )
    )


__all__ = ["AitoolnetExtractor"]
