"""
application.context - Request-scoped context.

Every service method receives its context explicitly instead of reading
framework request objects or thread-local state. Two concurrent requests
get two different RequestContext instances.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from uuid import uuid4


@dataclass(frozen=True)
class RequestContext:
    """Per-request context passed through all layers.

    Attributes:
        trace_id:    Unique per request, for tracing/logging.
        user_id:     Caller's user id when known (opaque, provided by adapter).
        session_id:  Client session identifier, if the caller sent one.
    """
    trace_id: str = field(default_factory=lambda: uuid4().hex)
    user_id: Optional[int] = None
    session_id: str = ""

    def for_user(self, user_id: int) -> RequestContext:
        """Return a copy bound to a specific user."""
        return RequestContext(
            trace_id=self.trace_id,
            user_id=user_id,
            session_id=self.session_id,
        )
