"""
Signature Functions
===================
Canonical serialization, signature computation and constant-time
verification.
"""

import hashlib
import hmac
import json
from typing import Any, Mapping, Union

from ..exceptions import ConfigurationError
from .models import CanonicalRequest, SignatureScheme

# Configuration
SIGNATURE_ALGORITHM = "sha256"
SIGNATURE_SCHEME = SignatureScheme.CONCAT


def _php_normalize(value: Any) -> Any:
    """PHP's json_encode renders an empty array as [] rather than {}."""
    if isinstance(value, Mapping):
        if not value:
            return []
        return {k: _php_normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_php_normalize(v) for v in value]
    return value


def serialize_canonical(canonical: CanonicalRequest, php_compatible: bool = False) -> str:
    """
    Serialize a canonical request as compact JSON in field order.

    Args:
        canonical: The canonical request
        php_compatible: Reproduce PHP json_encode output (escaped slashes,
            empty mappings as []) for legacy clients

    Returns:
        Deterministic JSON text
    """
    payload = canonical.as_dict()
    if php_compatible:
        payload = _php_normalize(payload)

    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=True)
    if php_compatible:
        # "/" only ever appears inside string literals in JSON output
        text = text.replace("/", "\\/")
    return text


def ensure_algorithm(name: str) -> str:
    """
    Check that a digest algorithm is usable for signing.

    Args:
        name: hashlib algorithm name (e.g. "sha256")

    Returns:
        The normalized algorithm name

    Raises:
        ConfigurationError: If hashlib cannot build a fixed-length digest
    """
    try:
        digest = hashlib.new(name)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Unsupported signature algorithm: {name!r}") from e
    if digest.digest_size == 0:
        # shake_* digests need an explicit length
        raise ConfigurationError(f"Variable-length digest not supported: {name!r}")
    return digest.name


def ensure_scheme(scheme: Union[SignatureScheme, str]) -> SignatureScheme:
    """
    Normalize a signature scheme name.

    Args:
        scheme: SignatureScheme member or its name in any case

    Returns:
        The SignatureScheme member

    Raises:
        ConfigurationError: If the scheme is unknown
    """
    if isinstance(scheme, SignatureScheme):
        return scheme
    try:
        return SignatureScheme(str(scheme).strip().lower())
    except ValueError:
        raise ConfigurationError(
            f"Unknown signature scheme {scheme!r}; "
            f"expected one of {[s.value for s in SignatureScheme]}"
        ) from None


def compute_signature(
    canonical: CanonicalRequest,
    secret: str,
    algorithm: str = SIGNATURE_ALGORITHM,
    scheme: Union[SignatureScheme, str] = SIGNATURE_SCHEME,
    php_compatible: bool = False,
) -> str:
    """
    Compute the signature of a canonical request.

    CONCAT hashes the serialized payload with the secret appended, which is
    the legacy wire format. HMAC uses the secret as the HMAC key.

    Args:
        canonical: The canonical request
        secret: Shared secret of the credential
        algorithm: hashlib algorithm name
        scheme: How the secret is combined with the payload
        php_compatible: Serialize like PHP json_encode

    Returns:
        Lowercase hex digest
    """
    message = serialize_canonical(canonical, php_compatible=php_compatible)
    if ensure_scheme(scheme) is SignatureScheme.HMAC:
        return hmac.new(secret.encode(), message.encode(), algorithm).hexdigest()
    return hashlib.new(algorithm, (message + secret).encode()).hexdigest()


def verify_signature(expected_signature: str, provided_signature: str) -> bool:
    """
    Compare signatures in constant time.

    Args:
        expected_signature: Signature computed by the server
        provided_signature: Hex signature sent by the client

    Returns:
        True if the signatures match
    """
    provided = provided_signature.strip().lower()
    return hmac.compare_digest(expected_signature.encode(), provided.encode())
