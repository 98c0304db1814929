"""Opik client bootstrap."""
from __future__ import annotations

import logging
from typing import Any, Optional

from app.core.config import settings

logger = logging.getLogger(__name__)

_client: Optional[Any] = None


def init_opik() -> Optional[Any]:
    """Create the shared Opik client when tracing is enabled."""
    global _client
    if not settings.opik_enabled:
        return None
    if _client is not None:
        return _client

    import opik

    opik.configure(api_key=settings.opik_api_key, use_local=False, force=True)
    _client = opik.Opik(project_name=settings.opik_project)
    logger.info("Opik tracing enabled (project=%s)", settings.opik_project)
    return _client


def get_opik_client() -> Optional[Any]:
    return _client
