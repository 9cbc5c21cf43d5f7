"""
Shared FastAPI dependencies.

- get_factory(): returns the ServiceFactory stored on app.state at startup.
- get_request_context(): builds a RequestContext from request headers.
"""

from __future__ import annotations

from typing import Optional
from uuid import uuid4

from fastapi import Header, Request

from factory import ServiceFactory
from application.context import RequestContext


def get_factory(request: Request) -> ServiceFactory:
    factory = getattr(request.app.state, "factory", None)
    if factory is None:
        raise RuntimeError("ServiceFactory not initialized.")
    return factory


async def get_request_context(
    x_request_id: Optional[str] = Header(None),
    x_session_id: Optional[str] = Header(None),
) -> RequestContext:
    """One context per request; trace id comes from X-Request-ID when sent."""
    return RequestContext(
        trace_id=x_request_id or uuid4().hex,
        session_id=x_session_id or "",
    )
