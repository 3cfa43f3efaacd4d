"""FastAPI application entrypoint, error envelopes and health reporting.

Invariants:
- Every response body is JSON; handled cases answer 200 even when empty.
- Uncaught faults surface as 500 with the (redacted) fault message, never a
  partial envelope.
"""

import json
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gateway.api.router import api_router
from gateway.core.config import settings
from gateway.ingestion.observability import upstream_monitor
from gateway.services.dispatcher import MissingParameter
from gateway.utils.redaction import redact_secrets

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger("gateway.main")

app = FastAPI(title=settings.app_name, version=settings.provider_version)


@app.middleware("http")
async def _fault_barrier(request: Request, call_next):
    """Convert uncaught faults into a 500 error body."""
    try:
        return await call_next(request)
    except Exception as exc:  # noqa: BLE001
        message = redact_secrets(str(exc)) or exc.__class__.__name__
        logger.error(
            json.dumps({"event": "request_fault", "path": request.url.path, "error": message}),
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"error": message})


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router)


@app.exception_handler(MissingParameter)
async def _missing_parameter(request: Request, exc: MissingParameter) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


def _summarize_upstreams(snapshot: dict[str, Any]) -> dict[str, Any]:
    """Condense monitor state into health-friendly telemetry.

    Implementation notes:
    - A provider whose latest call failed, or that has failed three times,
      reports degraded.
    """
    issues: list[dict[str, Any]] = []
    sources: dict[str, Any] = {}
    for source, operations in snapshot.items():
        state = "ok"
        failure_total = 0
        for operation, metrics in operations.items():
            last_error = metrics.get("last_error")
            if last_error:
                issues.append(
                    {"source": source, "operation": operation, "reason": "last_error", "error": last_error}
                )
                state = "degraded"
            failed_count = int(metrics.get("failed") or 0)
            failure_total += failed_count
            if failed_count >= 3:
                issues.append(
                    {"source": source, "operation": operation, "reason": "repeated_failures", "failed": failed_count}
                )
                state = "degraded"
        sources[source] = {"state": state, "operations": operations, "failure_total": failure_total}
    return {"sources": sources, "issues": issues}


@app.get("/health", tags=["internal"])
async def health() -> dict[str, Any]:
    """Return health status with per-provider upstream telemetry."""
    telemetry = _summarize_upstreams(await upstream_monitor.snapshot())
    status = "ok" if not telemetry["issues"] else "degraded"
    return {"status": status, "upstreams": telemetry}
