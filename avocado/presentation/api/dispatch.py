"""
Query-string dispatch onto the resource routers.

Clients of the legacy single-endpoint API call
``/api?endpoint=<resource>&action=<action>``. The middleware rewrites such
requests to ``/api/<resource>/<action>`` before routing, so both forms reach
the same handlers. Remaining query parameters are passed through untouched.
"""

from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp


class QueryDispatchMiddleware(BaseHTTPMiddleware):
    """Resolve ``endpoint``/``action`` query parameters into a route path."""

    def __init__(self, app: ASGIApp, prefix: str = "/api") -> None:
        super().__init__(app)
        self.prefix = prefix.rstrip("/")
        self._entry_paths = {self.prefix, self.prefix + "/", self.prefix + ".php"}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.scope["path"] in self._entry_paths:
            endpoint = request.query_params.get("endpoint", "").strip()
            action = request.query_params.get("action", "").strip()
            if endpoint and action and "/" not in endpoint and "/" not in action:
                path = f"{self.prefix}/{endpoint}/{action}"
                request.scope["path"] = path
                request.scope["raw_path"] = path.encode("utf-8")
        return await call_next(request)
