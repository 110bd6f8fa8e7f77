from __future__ import annotations

from tool_harvester.infra import UserAgentPool
from tool_harvester.infra.ua_pool import DEFAULT_USER_AGENT


def test_empty_pool_uses_default_agent() -> None:
    assert UserAgentPool().get() == DEFAULT_USER_AGENT
    assert UserAgentPool(["", "  "]).get() == DEFAULT_USER_AGENT


def test_pool_rotates_configured_agents() -> None:
    pool = UserAgentPool(["a/1", "b/2"])
    assert {pool.get() for _ in range(50)} <= {"a/1", "b/2"}
    assert UserAgentPool([" c/3 "]).get() == "c/3"
