"""Context propagation for correlating log lines with the active search."""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING
from uuid import uuid4


if TYPE_CHECKING:
    from collections.abc import Generator


search_context: ContextVar[dict | None] = ContextVar("search_context", default=None)


def generate_session_id() -> str:
    """Generate a 16-char hex session ID."""
    return uuid4().hex[:16]


def get_search_context() -> dict:
    """Get the current search context (empty when no search is running)."""
    return dict(search_context.get() or {})


def set_search_context(session_id: str, generation: int, **extra: object) -> None:
    """Set the search context for the current task."""
    search_context.set({"session_id": session_id, "generation": generation, **extra})


@contextmanager
def bound_search_context(session_id: str, generation: int, **extra: object) -> Generator[None, None, None]:
    """Bind the search context for the duration of a block."""
    token = search_context.set({"session_id": session_id, "generation": generation, **extra})
    try:
        yield
    finally:
        search_context.reset(token)
