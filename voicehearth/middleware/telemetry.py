"""Telemetry middleware for request instrumentation."""

from __future__ import annotations

import time
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from voicehearth.telemetry import observe_request


class TelemetryMiddleware(BaseHTTPMiddleware):
    """Collect request metrics for Prometheus."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            observe_request(
                request.method,
                self._route_label(request),
                500,
                time.perf_counter() - started,
            )
            raise

        observe_request(
            request.method,
            self._route_label(request),
            response.status_code,
            time.perf_counter() - started,
        )
        return response

    @staticmethod
    def _route_label(request: Request) -> str:
        """Return the matched route template, falling back to the raw path."""

        route: Any = request.scope.get("route")
        template = getattr(route, "path", None) if route is not None else None
        return template or request.url.path
