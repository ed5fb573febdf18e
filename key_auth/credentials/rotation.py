"""
Credential Rotation
===================
Secure API key and shared secret generation, rotation and masking.
"""

import secrets
import string
from typing import Any, TYPE_CHECKING

import structlog

from .models import Credential

if TYPE_CHECKING:
    from .store import MutableCredentialStore

logger = structlog.get_logger(__name__)

KEY_ALPHABET = string.ascii_letters + string.digits
DEFAULT_KEY_LENGTH = 32
MAX_GENERATION_ATTEMPTS = 5


def _random_string(length: int) -> str:
    if length < 16:
        raise ValueError("Generated credentials must be at least 16 characters")
    return "".join(secrets.choice(KEY_ALPHABET) for _ in range(length))


def generate_api_key(length: int = DEFAULT_KEY_LENGTH) -> str:
    """Generate a new API key (public identifier)."""
    return _random_string(length)


def generate_shared_secret(length: int = DEFAULT_KEY_LENGTH) -> str:
    """Generate a new shared secret."""
    return _random_string(length)


def rotate_key(store: "MutableCredentialStore", principal_id: Any) -> str:
    """
    Replace a principal's API key, keeping its shared secret.

    A principal with no credential gets a fresh key and secret.

    Args:
        store: Store holding the principal's credential
        principal_id: Principal to rotate

    Returns:
        The new API key (show to the user once)
    """
    existing = store.get(principal_id)
    secret = existing.shared_secret if existing else generate_shared_secret()

    for _ in range(MAX_GENERATION_ATTEMPTS):
        new_key = generate_api_key()
        if store.find_by_key(new_key) is None:
            break
    else:
        raise RuntimeError("Could not generate a unique API key")

    store.put(Credential(principal_id=principal_id, api_key=new_key, shared_secret=secret))
    logger.info(
        "api_key_rotated",
        principal_id=principal_id,
        api_key=mask_api_key(new_key),
        created=existing is None,
    )
    return new_key


def rotate_secret(store: "MutableCredentialStore", principal_id: Any) -> str:
    """
    Replace a principal's shared secret, keeping its API key.

    A principal with no credential gets a fresh key and secret.

    Returns:
        The new shared secret
    """
    existing = store.get(principal_id)
    if existing is None:
        rotate_key(store, principal_id)
        existing = store.get(principal_id)

    new_secret = generate_shared_secret()
    store.put(Credential(principal_id=principal_id, api_key=existing.api_key, shared_secret=new_secret))
    logger.info("shared_secret_rotated", principal_id=principal_id)
    return new_secret


def mask_api_key(key: str) -> str:
    """
    Mask an API key for safe display.

    Args:
        key: Full API key

    Returns:
        Masked key (e.g., "abcd****")
    """
    if not key or len(key) <= 8:
        return "****"
    return key[:4] + "****"
