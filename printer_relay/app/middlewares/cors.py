from __future__ import annotations

from typing import Callable, Iterable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

DEFAULT_METHODS = ("GET", "POST", "PUT", "OPTIONS")
DEFAULT_HEADERS = ("Content-Type",)


class CORSMiddleware(BaseHTTPMiddleware):
    """Open CORS for the desktop UI and answer every preflight with 200.

    The relay only listens for the UI running on the same machine, so any
    origin is accepted.
    """

    def __init__(
        self,
        app: Callable,
        allow_origin: str = "*",
        allow_methods: Iterable[str] = DEFAULT_METHODS,
        allow_headers: Iterable[str] = DEFAULT_HEADERS,
    ) -> None:
        super().__init__(app)
        self.headers = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": ", ".join(allow_methods),
            "Access-Control-Allow-Headers": ", ".join(allow_headers),
        }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:  # type: ignore[override]
        if request.method == "OPTIONS":
            return Response(
                status_code=200, media_type="application/json", headers=self.headers
            )
        response = await call_next(request)
        for key, value in self.headers.items():
            response.headers.setdefault(key, value)
        return response
