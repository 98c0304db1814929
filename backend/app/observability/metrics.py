"""Metric emission as structured log lines."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger("app.metrics")


def log_metric(name: str, value: float, metadata: Optional[Dict[str, Any]] = None) -> None:
    logger.info("metric name=%s value=%s metadata=%s", name, value, metadata or {})
