"""Request/correlation ID context shared by the envelope, activity log and workers."""

from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4

import structlog

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")
correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")


def new_request_id() -> str:
    return f"req-{uuid4().hex[:20]}"


def new_correlation_id() -> str:
    return f"corr-{uuid4().hex[:20]}"


def get_request_id() -> str:
    return request_id_ctx.get("")


def get_correlation_id() -> str:
    return correlation_id_ctx.get("")


def bind_request_context(request_id: str, correlation_id: str) -> None:
    request_id_ctx.set(request_id or "")
    correlation_id_ctx.set(correlation_id or "")
    structlog.contextvars.bind_contextvars(request_id=request_id, correlation_id=correlation_id)


def clear_request_context() -> None:
    request_id_ctx.set("")
    correlation_id_ctx.set("")
    structlog.contextvars.clear_contextvars()
