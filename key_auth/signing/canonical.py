"""
Canonical Request
=================
Signature profiles and canonicalization of the signed request fields.

A profile is the ordered field set a protocol variant signs. Client and
server must use the same profile or every signature fails.
"""

import hashlib
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Tuple, Union

from ..exceptions import ConfigurationError
from ..models import AuthRequest
from .models import CanonicalRequest, SignedCredentials

FieldSelector = Callable[[AuthRequest, SignedCredentials], Any]


def select_api_key(request: AuthRequest, credentials: SignedCredentials) -> str:
    return credentials.api_key


def select_method(request: AuthRequest, credentials: SignedCredentials) -> str:
    return request.method.upper()


def select_uri(request: AuthRequest, credentials: SignedCredentials) -> str:
    return request.uri


def select_timestamp(request: AuthRequest, credentials: SignedCredentials) -> str:
    return credentials.timestamp


def select_remote_ip(request: AuthRequest, credentials: SignedCredentials) -> str:
    return request.remote_ip or ""


def select_form(request: AuthRequest, credentials: SignedCredentials) -> Dict[str, Any]:
    return dict(request.form)


def select_body_hash(request: AuthRequest, credentials: SignedCredentials) -> str:
    return hashlib.sha256(request.body).hexdigest()


FIELD_SELECTORS: Dict[str, FieldSelector] = {
    "api_key": select_api_key,
    "request_method": select_method,
    "request_uri": select_uri,
    "timestamp": select_timestamp,
    "ip": select_remote_ip,
    "request_post": select_form,
    "body_sha256": select_body_hash,
}

BODY_SELECTORS = (select_form, select_body_hash)


@dataclass(frozen=True)
class SignatureProfile:
    """Named, ordered list of (field name, selector) pairs."""
    name: str
    fields: Tuple[Tuple[str, FieldSelector], ...]

    @classmethod
    def from_names(cls, name: str, field_names: Iterable[str]) -> "SignatureProfile":
        """Build a profile from the names registered in FIELD_SELECTORS."""
        fields = []
        for field_name in field_names:
            if field_name not in FIELD_SELECTORS:
                raise ConfigurationError(f"Unknown signature field: {field_name!r}")
            fields.append((field_name, FIELD_SELECTORS[field_name]))
        if not fields:
            raise ConfigurationError(f"Signature profile {name!r} has no fields")
        return cls(name=name, fields=tuple(fields))

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.fields)

    @property
    def uses_body(self) -> bool:
        """Whether the request body or form fields must be read to sign."""
        return any(selector in BODY_SELECTORS for _, selector in self.fields)

    def canonicalize(self, request: AuthRequest, credentials: SignedCredentials) -> CanonicalRequest:
        return CanonicalRequest(
            fields=tuple((name, selector(request, credentials)) for name, selector in self.fields)
        )


MINIMAL_PROFILE = SignatureProfile.from_names(
    "minimal", ["api_key", "request_method", "request_uri", "timestamp"]
)
FORM_PROFILE = SignatureProfile.from_names(
    "form", ["api_key", "request_method", "request_post", "request_uri", "timestamp"]
)
FORM_IP_PROFILE = SignatureProfile.from_names(
    "form_ip", ["api_key", "ip", "request_method", "request_post", "request_uri", "timestamp"]
)
BODY_PROFILE = SignatureProfile.from_names(
    "body", ["api_key", "request_method", "request_uri", "timestamp", "body_sha256"]
)

DEFAULT_PROFILE = MINIMAL_PROFILE

_PROFILES: Dict[str, SignatureProfile] = {
    profile.name: profile
    for profile in (MINIMAL_PROFILE, FORM_PROFILE, FORM_IP_PROFILE, BODY_PROFILE)
}


def register_profile(profile: SignatureProfile) -> SignatureProfile:
    """Register a custom profile so it can be selected by name."""
    if profile.name in _PROFILES and _PROFILES[profile.name] != profile:
        raise ConfigurationError(f"Signature profile {profile.name!r} is already registered")
    _PROFILES[profile.name] = profile
    return profile


def get_profile(profile: Union[str, SignatureProfile]) -> SignatureProfile:
    """Resolve a profile name (or pass a profile through)."""
    if isinstance(profile, SignatureProfile):
        return profile
    try:
        return _PROFILES[profile]
    except KeyError:
        raise ConfigurationError(
            f"Unknown signature profile {profile!r}; expected one of {sorted(_PROFILES)}"
        ) from None


def build_canonical_request(
    request: AuthRequest,
    credentials: SignedCredentials,
    profile: Union[str, SignatureProfile] = DEFAULT_PROFILE,
) -> CanonicalRequest:
    """
    Build the canonical request for a profile.

    Args:
        request: The inbound (or outbound) request
        credentials: Claimed api key and raw timestamp
        profile: Profile or profile name

    Returns:
        CanonicalRequest with fields in profile order
    """
    return get_profile(profile).canonicalize(request, credentials)
