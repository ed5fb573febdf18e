"""
Key Auth Exceptions
===================
Exception classes raised outside the normal accept/reject path.

Rejections (unknown key, stale timestamp, bad signature) are never raised;
they are returned as an AuthResult.
"""

from typing import Any, Optional


class KeyAuthError(Exception):
    """Base exception for all key-auth errors."""
    pass


class ConfigurationError(KeyAuthError):
    """Raised when the authenticator is configured with unusable values."""
    pass


class CredentialStoreError(KeyAuthError):
    """Base exception for credential store failures."""

    def __init__(self, message: str, store: str = "unknown", details: Any = None):
        self.message = message
        self.store = store
        self.details = details
        super().__init__(f"[{store}] {message}")


class CredentialStoreUnavailable(CredentialStoreError):
    """
    Raised when the credential store cannot answer a lookup.

    Distinct from a key that simply does not exist: callers must not treat
    this as an invalid key.
    """
    pass


class UnknownPrincipal(CredentialStoreError):
    """Raised when an administrative action targets a principal the store does not know."""

    def __init__(self, principal_id: Any, store: str = "unknown"):
        self.principal_id = principal_id
        super().__init__(f"Unknown principal: {principal_id!r}", store=store)


__all__ = [
    "KeyAuthError",
    "ConfigurationError",
    "CredentialStoreError",
    "CredentialStoreUnavailable",
    "UnknownPrincipal",
]
