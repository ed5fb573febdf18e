"""
Credentials
===========
Credential lookup, storage and rotation.
"""

from .models import Credential
from .store import CredentialStore, MutableCredentialStore, InMemoryCredentialStore
from .rotation import (
    generate_api_key,
    generate_shared_secret,
    rotate_key,
    rotate_secret,
    mask_api_key,
    DEFAULT_KEY_LENGTH,
)

__all__ = [
    "Credential",
    "CredentialStore",
    "MutableCredentialStore",
    "InMemoryCredentialStore",
    "generate_api_key",
    "generate_shared_secret",
    "rotate_key",
    "rotate_secret",
    "mask_api_key",
    "DEFAULT_KEY_LENGTH",
]
