"""Lightweight tracing wrapper around Opik traces."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from time import perf_counter
from typing import Any, Dict, Iterator, Optional

from app.observability.client import get_opik_client

logger = logging.getLogger(__name__)


@contextmanager
def trace(
    name: str,
    metadata: Optional[Dict[str, Any]] = None,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Iterator[Any]:
    """Record a named trace around a block; yields the Opik trace or None."""
    client = get_opik_client()
    span = None
    if client is not None:
        tags = [tag for tag in (user_id and f"user:{user_id}", request_id and f"request:{request_id}") if tag]
        try:
            span = client.trace(name=name, metadata=dict(metadata or {}), tags=tags)
        except Exception:  # pragma: no cover - tracing must never break a request
            logger.warning("Failed to open trace %s", name, exc_info=True)
            span = None

    start = perf_counter()
    try:
        yield span
    finally:
        elapsed_ms = (perf_counter() - start) * 1000
        logger.debug("trace %s finished in %.1fms (request_id=%s)", name, elapsed_ms, request_id)
        if span is not None:
            try:
                span.end()
            except Exception:  # pragma: no cover
                logger.warning("Failed to close trace %s", name, exc_info=True)
