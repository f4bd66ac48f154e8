"""Request pipeline: recovery, logging and metrics middleware.

The chain is fixed and declared once in ``build_middleware``, outermost first:

1. ``RecoveryMiddleware`` turns any escaped exception into a 500.
2. ``LoggingMiddleware`` writes one ``request_completed`` event per request.
3. ``MetricsMiddleware`` times the request and records its final status.

Authentication is not middleware; protected routes declare the
``get_current_user`` dependency, and their bodies are decoded by a dependency
that runs after it, so a bad token is rejected before the body is read.
"""

import json
import time
from typing import Any

import structlog
from starlette.middleware import Middleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .metrics.collector import MetricsCollector

logger = structlog.get_logger("pipeline")

UNMATCHED_ROUTE = "<unmatched>"
INTERNAL_ERROR_BODY = {"error": "internal server error"}


def route_template(scope: Scope) -> str:
    """The matched route's declared path, bounding metric label cardinality."""
    route = scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


class RecoveryMiddleware:
    """Convert unexpected failures into a generic 500 response.

    The exception is logged with its traceback and never re-raised, so one
    failing request cannot take down the server or leak internals to the
    caller.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def wrapped_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, wrapped_send)
        except Exception:
            logger.exception(
                "unhandled_exception",
                method=scope.get("method"),
                path=scope.get("path"),
                response_started=response_started,
            )
            if response_started:
                # Headers are already on the wire; nothing more can be sent.
                return
            await _send_json(send, 500, INTERNAL_ERROR_BODY)


class TimedMiddleware:
    """Base for middleware that reports each request once it finishes.

    The status comes from ``http.response.start``. Exceptions that escape the
    app are reported as 500 and re-raised for ``RecoveryMiddleware``.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        captured: dict[str, Any] = {"status": None}

        async def wrapped_send(message: Message) -> None:
            if message["type"] == "http.response.start":
                captured["status"] = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, wrapped_send)
        except Exception:
            captured["status"] = 500
            raise
        finally:
            self.completed(scope, captured["status"] or 500, time.perf_counter() - start_time)

    def completed(self, scope: Scope, status: int, duration: float) -> None:
        raise NotImplementedError


class LoggingMiddleware(TimedMiddleware):
    """Log method, route, status and duration of every HTTP request."""

    def completed(self, scope: Scope, status: int, duration: float) -> None:
        logger.info(
            "request_completed",
            method=scope["method"],
            path=route_template(scope),
            status=status,
            duration_ms=round(duration * 1000, 3),
        )


class MetricsMiddleware(TimedMiddleware):
    """Observe duration and status of every HTTP request."""

    def __init__(self, app: ASGIApp, metrics: MetricsCollector) -> None:
        super().__init__(app)
        self.metrics = metrics

    def completed(self, scope: Scope, status: int, duration: float) -> None:
        self.metrics.observe(
            method=scope["method"],
            path=route_template(scope),
            status=status,
            duration=duration,
        )


async def _send_json(send: Send, status: int, payload: dict) -> None:
    body = json.dumps(payload).encode("utf-8")
    headers = [
        (b"content-type", b"application/json"),
        (b"content-length", str(len(body)).encode()),
    ]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body})


def build_middleware(metrics: MetricsCollector) -> list[Middleware]:
    """Ordered middleware list, outermost first."""
    return [
        Middleware(RecoveryMiddleware),
        Middleware(LoggingMiddleware),
        Middleware(MetricsMiddleware, metrics=metrics),
    ]
