"""Correlation ID middleware.

Forwards X-Correlation-ID from the client or falls back to the request ID,
so calls fanning out from one user action share an ID. Raw ASGI.
"""

from typing import Callable

from app.middleware.request_id import get_header, sanitize_request_id
from app.shared.utils.generators import generate_request_id


def CorrelationIDMiddleware(
    app: Callable, header_name: str = "X-Correlation-ID"
) -> Callable:
    """Add or forward the correlation ID; must run inside RequestIDMiddleware."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        raw = get_header(scope, header_name)
        if raw:
            correlation_id = sanitize_request_id(raw)
        else:
            correlation_id = scope.get("state", {}).get("request_id") or generate_request_id()
        scope.setdefault("state", {})["correlation_id"] = correlation_id

        async def send_wrapper(message: dict) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((header_name.encode(), correlation_id.encode()))
                message["headers"] = headers
            await send(message)

        await app(scope, receive, send_wrapper)

    return asgi_app
