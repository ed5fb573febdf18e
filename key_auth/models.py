"""
Key Auth Models
===============
Request and result types for signature authentication.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from starlette.requests import Request

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class AuthStatus(str, Enum):
    """Outcome of an authentication attempt."""
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    REJECTED = "rejected"


class RejectReason(str, Enum):
    """Reasons for rejecting a request that carried credentials."""
    UNKNOWN_KEY = "unknown_api_key"
    STALE_OR_INVALID_TIMESTAMP = "stale_or_invalid_timestamp"
    SIGNATURE_MISMATCH = "signature_mismatch"


DIAGNOSTICS = {
    RejectReason.UNKNOWN_KEY: "FAIL api key",
    RejectReason.STALE_OR_INVALID_TIMESTAMP: "FAIL timestamp",
    RejectReason.SIGNATURE_MISMATCH: "FAIL signature",
}


@dataclass(frozen=True)
class AuthRequest:
    """
    Immutable view of an inbound request.

    Header names are lower-cased on construction so lookups are
    case-insensitive. ``uri`` is the path plus query string as received.
    """
    method: str
    uri: str
    headers: Mapping[str, str] = field(default_factory=dict)
    remote_ip: Optional[str] = None
    form: Mapping[str, Any] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self):
        headers = {str(k).lower(): v for k, v in dict(self.headers).items()}
        object.__setattr__(self, "headers", MappingProxyType(headers))
        object.__setattr__(self, "form", MappingProxyType(dict(self.form)))

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    @classmethod
    async def from_starlette(
        cls,
        request: Request,
        include_body: bool = False,
        trust_forwarded_for: bool = False,
    ) -> "AuthRequest":
        """
        Build an AuthRequest from a Starlette request.

        Args:
            request: The incoming Starlette/FastAPI request
            include_body: Read the raw body and form fields (only needed by
                profiles that sign them)
            trust_forwarded_for: Take the client IP from X-Forwarded-For

        Returns:
            AuthRequest snapshot of the request
        """
        raw_path = request.scope.get("raw_path")
        path = raw_path.decode("latin-1") if raw_path else request.url.path
        query = request.scope.get("query_string", b"").decode("latin-1")
        uri = f"{path}?{query}" if query else path

        remote_ip = request.client.host if request.client else None
        if trust_forwarded_for:
            forwarded = request.headers.get("X-Forwarded-For")
            if forwarded:
                remote_ip = forwarded.split(",")[0].strip()

        body = b""
        form = {}
        if include_body:
            body = await request.body()
            content_type = request.headers.get("content-type", "")
            if content_type.startswith(FORM_CONTENT_TYPES):
                parsed = await request.form()
                # File uploads are not part of the signed material
                form = {k: v for k, v in parsed.multi_items() if isinstance(v, str)}

        return cls(
            method=request.method,
            uri=uri,
            headers=request.headers,
            remote_ip=remote_ip,
            form=form,
            body=body,
        )


@dataclass(frozen=True)
class AuthResult:
    """
    Result of an authentication check.

    ``principal_id`` is set only when authenticated, ``reason`` only when
    rejected. Unauthenticated means no credentials were presented and other
    auth mechanisms may still apply.
    """
    status: AuthStatus
    principal_id: Optional[Any] = None
    reason: Optional[RejectReason] = None

    @classmethod
    def authenticated(cls, principal_id: Any) -> "AuthResult":
        return cls(status=AuthStatus.AUTHENTICATED, principal_id=principal_id)

    @classmethod
    def unauthenticated(cls) -> "AuthResult":
        return cls(status=AuthStatus.UNAUTHENTICATED)

    @classmethod
    def rejected(cls, reason: RejectReason) -> "AuthResult":
        return cls(status=AuthStatus.REJECTED, reason=reason)

    @property
    def is_authenticated(self) -> bool:
        return self.status is AuthStatus.AUTHENTICATED

    @property
    def is_rejected(self) -> bool:
        return self.status is AuthStatus.REJECTED

    @property
    def diagnostic(self) -> Optional[str]:
        """Short outcome string for the X-Key-Auth header; informational only."""
        if self.status is AuthStatus.AUTHENTICATED:
            return f"OK {self.principal_id}"
        if self.status is AuthStatus.REJECTED:
            return DIAGNOSTICS[self.reason]
        return None
