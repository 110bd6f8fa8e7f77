"""Per-source extraction strategies."""

from .aitoolnet import AitoolnetExtractor
from .base import BaseExtractor, DiscardedCandidate
from .directory import DirectoryExtractor
from .futuretools import FutureToolsExtractor
from .generic import GenericExtractor

__all__ = [
    "AitoolnetExtractor",
    "BaseExtractor",
    "DirectoryExtractor",
    "DiscardedCandidate",
    "FutureToolsExtractor",
    "GenericExtractor",
]
