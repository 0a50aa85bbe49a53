import hmac
import logging
from typing import List, Optional

from starlette.datastructures import Headers, QueryParams
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger("silver_care.auth")


def _extract_key(scope: Scope) -> Optional[str]:
    authorization = Headers(scope=scope).get("authorization", "")
    if authorization.startswith("Bearer "):
        return authorization[len("Bearer "):]
    return QueryParams(scope.get("query_string", b"")).get("apiKey")


class ApiKeyMiddleware:
    """Pure ASGI middleware requiring a shared API key on every HTTP request.

    The key is read from ``Authorization: Bearer <key>`` or the ``apiKey``
    query parameter. Streaming responses pass through unbuffered.
    """

    def __init__(self, app: ASGIApp, api_key: str):
        self.app = app
        self.api_key = api_key

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        provided = _extract_key(scope)
        if not provided or not hmac.compare_digest(provided.encode(), self.api_key.encode()):
            logger.warning(f"Authentication failed for {scope.get('path', '')}")
            response = JSONResponse(
                {
                    "error": "Unauthorized",
                    "message": "Authentication is required or has expired. Provide a valid API key.",
                },
                status_code=401,
            )
            await response(scope, receive, send)
            return

        await self.app(scope, receive, send)


def with_http_middleware(app: ASGIApp, api_key: Optional[str], cors_origins: List[str]) -> ASGIApp:
    """Wrap the streamable-HTTP app with CORS and, when a key is configured, the API-key check.

    CORS sits outermost so preflight requests and 401 responses carry CORS headers.
    """
    if api_key:
        app = ApiKeyMiddleware(app, api_key=api_key)
    return CORSMiddleware(
        app,
        allow_origins=cors_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["mcp-session-id"],
    )
