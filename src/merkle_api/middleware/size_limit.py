from __future__ import annotations
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from ..settings import settings


class SizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject request bodies larger than ``settings.max_request_bytes``."""

    async def dispatch(self, request, call_next):  # type: ignore[override]
        max_bytes = settings.max_request_bytes
        cl = request.headers.get("content-length")
        if cl is not None:
            try:
                if int(cl) > max_bytes:
                    return JSONResponse({"detail": "payload too large"}, status_code=413)
            except ValueError:
                pass
        body = await request.body()
        if len(body) > max_bytes:
            return JSONResponse({"detail": "payload too large"}, status_code=413)
        return await call_next(request)
