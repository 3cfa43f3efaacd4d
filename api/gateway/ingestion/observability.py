"""Metrics tracking and structured logging for upstream provider calls."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, DefaultDict

from gateway.utils.redaction import redact_secrets

logger = logging.getLogger("gateway.ingestion")


@dataclass
class OperationMetrics:
    """Aggregated counters for a provider operation."""
    started: int = 0
    succeeded: int = 0
    failed: int = 0
    last_latency_ms: float | None = None
    last_error: str | None = None


class UpstreamMonitor:
    """Track upstream call outcomes per provider and operation."""

    def __init__(self) -> None:
        self._metrics: DefaultDict[str, DefaultDict[str, OperationMetrics]] = defaultdict(
            lambda: defaultdict(OperationMetrics)
        )
        self._lock = asyncio.Lock()

    async def track(
        self,
        source: str,
        operation: str,
        func: Callable[[], Awaitable[Any]],
        *,
        context: dict[str, Any] | None = None,
    ) -> Any:
        """Run an upstream call, recording latency and outcome.

        Exceptions are logged and re-raised unchanged; callers decide whether a
        failure degrades or propagates.
        """
        context = context or {}
        async with self._lock:
            self._metrics[source][operation].started += 1

        start = time.monotonic()
        try:
            result = await func()
        except Exception as exc:  # noqa: BLE001
            latency_ms = (time.monotonic() - start) * 1000
            error = redact_secrets(str(exc)) or exc.__class__.__name__
            async with self._lock:
                metrics = self._metrics[source][operation]
                metrics.failed += 1
                metrics.last_latency_ms = latency_ms
                metrics.last_error = error
            payload = {
                "event": "upstream_failure",
                "source": source,
                "operation": operation,
                "error_type": exc.__class__.__name__,
                "error": error,
                "latency_ms": round(latency_ms, 2),
                "context": context,
            }
            logger.warning(json.dumps(payload))
            raise

        latency_ms = (time.monotonic() - start) * 1000
        async with self._lock:
            metrics = self._metrics[source][operation]
            metrics.succeeded += 1
            metrics.last_latency_ms = latency_ms
            metrics.last_error = None
        payload = {
            "event": "upstream_success",
            "source": source,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "context": context,
        }
        logger.info(json.dumps(payload))
        return result

    async def snapshot(self) -> dict[str, Any]:
        """Return a snapshot of all tracked provider metrics."""
        async with self._lock:
            return {
                source: {name: asdict(metrics) for name, metrics in operations.items()}
                for source, operations in self._metrics.items()
            }

    def reset(self) -> None:
        self._metrics.clear()


upstream_monitor = UpstreamMonitor()
