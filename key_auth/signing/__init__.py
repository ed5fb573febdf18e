"""
Request Signing
===============
Canonicalization, signature computation and freshness checks shared by the
server-side authenticator and the client-side signer.
"""

from .models import SignatureScheme, SignedCredentials, CanonicalRequest
from .canonical import (
    FIELD_SELECTORS,
    SignatureProfile,
    MINIMAL_PROFILE,
    FORM_PROFILE,
    FORM_IP_PROFILE,
    BODY_PROFILE,
    DEFAULT_PROFILE,
    register_profile,
    get_profile,
    build_canonical_request,
)
from .signature import (
    serialize_canonical,
    compute_signature,
    verify_signature,
    ensure_algorithm,
    ensure_scheme,
    SIGNATURE_ALGORITHM,
    SIGNATURE_SCHEME,
)
from .freshness import (
    parse_timestamp,
    is_fresh,
    check_timestamp,
    DEFAULT_TIMESTAMP_TOLERANCE,
)
from .headers import (
    extract_credentials,
    create_signed_headers,
    API_KEY_HEADER,
    TIMESTAMP_HEADER,
    SIGNATURE_HEADER,
    DIAGNOSTIC_HEADER,
)

__all__ = [
    # Models
    "SignatureScheme",
    "SignedCredentials",
    "CanonicalRequest",
    # Canonical
    "FIELD_SELECTORS",
    "SignatureProfile",
    "MINIMAL_PROFILE",
    "FORM_PROFILE",
    "FORM_IP_PROFILE",
    "BODY_PROFILE",
    "DEFAULT_PROFILE",
    "register_profile",
    "get_profile",
    "build_canonical_request",
    # Signature
    "serialize_canonical",
    "compute_signature",
    "verify_signature",
    "ensure_algorithm",
    "ensure_scheme",
    "SIGNATURE_ALGORITHM",
    "SIGNATURE_SCHEME",
    # Freshness
    "parse_timestamp",
    "is_fresh",
    "check_timestamp",
    "DEFAULT_TIMESTAMP_TOLERANCE",
    # Headers
    "extract_credentials",
    "create_signed_headers",
    "API_KEY_HEADER",
    "TIMESTAMP_HEADER",
    "SIGNATURE_HEADER",
    "DIAGNOSTIC_HEADER",
]
