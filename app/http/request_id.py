"""Request ID middleware.

Propagates the caller's X-Request-Id, or assigns a fresh one, and echoes it on
every response so engine log lines can be correlated with a request.
"""

from __future__ import annotations

import logging
import uuid


logger = logging.getLogger(__name__)


class RequestIdMiddleware:
    def __init__(self, app, header_name: str = "X-Request-Id") -> None:  # type: ignore[no-untyped-def]
        self.app = app
        self.header_name = header_name

    async def __call__(self, scope, receive, send):  # type: ignore[no-untyped-def]
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        header_bytes = self.header_name.lower().encode("latin-1")
        incoming = None
        for key, value in scope.get("headers") or []:
            if key.lower() == header_bytes:
                incoming = value.decode("latin-1").strip() or None
                break
        request_id = incoming or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id
        logger.debug("request_start id=%s method=%s path=%s", request_id, scope.get("method"), scope.get("path"))

        async def send_wrapper(message):  # type: ignore[no-untyped-def]
            if message.get("type") == "http.response.start":
                headers = [(k, v) for k, v in (message.get("headers") or []) if k.lower() != header_bytes]
                headers.append((self.header_name.encode("latin-1"), request_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        await self.app(scope, receive, send_wrapper)


__all__ = ["RequestIdMiddleware"]
