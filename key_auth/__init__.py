"""
Key Auth
========
API key / shared secret request signing authentication for HTTP services.
"""

__version__ = "1.2.0"

# Models
from key_auth.models import (
    AuthRequest,
    AuthResult,
    AuthStatus,
    RejectReason,
)

# Exceptions
from key_auth.exceptions import (
    KeyAuthError,
    ConfigurationError,
    CredentialStoreError,
    CredentialStoreUnavailable,
    UnknownPrincipal,
)

# Signing
from key_auth.signing import (
    CanonicalRequest,
    SignatureProfile,
    SignatureScheme,
    SignedCredentials,
    build_canonical_request,
    check_timestamp,
    compute_signature,
    create_signed_headers,
    extract_credentials,
    get_profile,
    is_fresh,
    parse_timestamp,
    register_profile,
    serialize_canonical,
    verify_signature,
)

# Credentials
from key_auth.credentials import (
    Credential,
    CredentialStore,
    MutableCredentialStore,
    InMemoryCredentialStore,
    generate_api_key,
    generate_shared_secret,
    rotate_key,
    rotate_secret,
    mask_api_key,
)

# Configuration
from key_auth.config import KeyAuthConfig

# Authenticator
from key_auth.authenticator import Authenticator

# Logging
from key_auth.observability import setup_logging, log_auth_outcome

# HTTP
from key_auth.middleware import KeyAuthMiddleware, get_principal, require_principal
from key_auth.client import KeyAuth

__all__ = [
    # Models
    "AuthRequest",
    "AuthResult",
    "AuthStatus",
    "RejectReason",
    # Exceptions
    "KeyAuthError",
    "ConfigurationError",
    "CredentialStoreError",
    "CredentialStoreUnavailable",
    "UnknownPrincipal",
    # Signing
    "CanonicalRequest",
    "SignatureProfile",
    "SignatureScheme",
    "SignedCredentials",
    "build_canonical_request",
    "check_timestamp",
    "compute_signature",
    "create_signed_headers",
    "extract_credentials",
    "get_profile",
    "is_fresh",
    "parse_timestamp",
    "register_profile",
    "serialize_canonical",
    "verify_signature",
    # Credentials
    "Credential",
    "CredentialStore",
    "MutableCredentialStore",
    "InMemoryCredentialStore",
    "generate_api_key",
    "generate_shared_secret",
    "rotate_key",
    "rotate_secret",
    "mask_api_key",
    # Configuration
    "KeyAuthConfig",
    # Authenticator
    "Authenticator",
    # Logging
    "setup_logging",
    "log_auth_outcome",
    # HTTP
    "KeyAuthMiddleware",
    "get_principal",
    "require_principal",
    "KeyAuth",
]
