"""Infra layer utilities (storage, UA pool)."""

from .storage import SQLiteManager
from .ua_pool import UserAgentPool

__all__ = ["SQLiteManager", "UserAgentPool"]
