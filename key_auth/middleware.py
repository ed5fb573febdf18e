"""
Key Auth Middleware for FastAPI / Starlette services

Runs the authenticator on every request, exposes the principal on
``request.state`` and writes the X-Key-Auth diagnostic header.

Usage:
    from key_auth import Authenticator, KeyAuthMiddleware, require_principal

    app.add_middleware(KeyAuthMiddleware, authenticator=Authenticator(store))

    @app.get("/v1/items")
    async def list_items(principal_id: str = Depends(require_principal)):
        ...
"""

from typing import Any, Iterable, Optional

from fastapi import HTTPException, Request
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
import structlog

from .authenticator import Authenticator
from .exceptions import CredentialStoreError
from .models import AuthRequest
from .signing.headers import DIAGNOSTIC_HEADER

logger = structlog.get_logger(__name__)


class KeyAuthMiddleware(BaseHTTPMiddleware):
    """
    Middleware that authenticates API key signed requests.

    Requests without key auth headers pass through untouched so other auth
    schemes can handle them. Rejected requests get a 401; a failing
    credential store gets a 503, never a 401.
    """

    DEFAULT_SKIP_PATHS = ("/health", "/ready", "/metrics", "/docs", "/redoc", "/openapi.json")

    def __init__(
        self,
        app,
        authenticator: Authenticator,
        skip_paths: Optional[Iterable[str]] = None,
        reject_status_code: int = 401,
        diagnostic_header: str = DIAGNOSTIC_HEADER,
        trust_forwarded_for: bool = False,
    ):
        super().__init__(app)
        self.authenticator = authenticator
        self.skip_paths = tuple(skip_paths) if skip_paths is not None else self.DEFAULT_SKIP_PATHS
        self.reject_status_code = reject_status_code
        self.diagnostic_header = diagnostic_header
        self.trust_forwarded_for = trust_forwarded_for

    def _is_skipped(self, path: str) -> bool:
        for skip_path in self.skip_paths:
            prefix = skip_path.rstrip("/")
            if path in (skip_path, prefix) or path.startswith(prefix + "/"):
                return True
        return False

    async def dispatch(self, request: Request, call_next):
        # Skip health checks and documentation
        if self._is_skipped(request.url.path):
            return await call_next(request)

        # Don't authenticate twice
        if getattr(request.state, "principal_id", None) is not None:
            return await call_next(request)

        auth_request = await AuthRequest.from_starlette(
            request,
            include_body=self.authenticator.profile.uses_body,
            trust_forwarded_for=self.trust_forwarded_for,
        )

        try:
            result = await run_in_threadpool(self.authenticator.authenticate, auth_request)
        except CredentialStoreError as e:
            logger.error(
                "key_auth_store_unavailable",
                store=e.store,
                path=request.url.path,
                error=e.message,
            )
            return JSONResponse(
                status_code=503,
                content={
                    "error": "service_unavailable",
                    "message": "Authentication is temporarily unavailable",
                    "code": "CREDENTIAL_STORE_UNAVAILABLE",
                },
            )

        if result.is_rejected:
            return JSONResponse(
                status_code=self.reject_status_code,
                content={
                    "error": "unauthorized",
                    "message": "Invalid API credentials",
                    "code": result.reason.name,
                },
                headers={self.diagnostic_header: result.diagnostic},
            )

        request.state.principal_id = result.principal_id

        response = await call_next(request)
        if result.is_authenticated:
            response.headers[self.diagnostic_header] = result.diagnostic
        return response


def get_principal(request: Request) -> Optional[Any]:
    """
    Dependency returning the authenticated principal, or None.

    Usage:
        @app.get("/v1/resource")
        async def get_resource(principal_id = Depends(get_principal)):
            ...
    """
    return getattr(request.state, "principal_id", None)


def require_principal(request: Request) -> Any:
    """
    Dependency that requires an authenticated principal.
    Raises 401 if the request was not key-authenticated.
    """
    principal_id = get_principal(request)
    if principal_id is None:
        raise HTTPException(
            status_code=401,
            detail="This endpoint requires API key authentication",
        )
    return principal_id
