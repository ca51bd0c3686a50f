"""Owner resolution for the budget aggregator.

The aggregator never deals with sessions or cookies itself. It is handed a
zero-argument callable that returns the current owner id, or ``None`` when
the request is not authenticated.
"""

from __future__ import annotations

import os
from typing import Any, Callable, Mapping, Optional

from .config import OWNER_ENV_VAR

OwnerResolver = Callable[[], Optional[str]]


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def static_owner(owner_id: Optional[str]) -> OwnerResolver:
    """Resolve every request to the same owner (scripts and tests)."""
    cleaned = _clean(owner_id)
    return lambda: cleaned


def env_owner(var_name: str = OWNER_ENV_VAR) -> OwnerResolver:
    """Resolve the owner from an environment variable at call time."""
    def _resolve() -> Optional[str]:
        return _clean(os.getenv(var_name))

    return _resolve


def session_owner(session: Mapping[str, Any], key: str = 'user_id') -> OwnerResolver:
    """Resolve the owner from a session-like mapping filled in by the web layer."""
    def _resolve() -> Optional[str]:
        return _clean(session.get(key))

    return _resolve
