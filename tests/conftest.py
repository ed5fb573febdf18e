import hashlib
import json

import pytest

from key_auth import Authenticator, Credential, InMemoryCredentialStore, KeyAuthConfig

NOW = 1_700_000_000

API_KEY = "K1"
SECRET = "S1"
PRINCIPAL = "P1"


def legacy_signature(payload: dict, secret: str, algorithm: str = "sha256") -> str:
    """Reference signature: digest(compact_json(payload) + secret)."""
    message = json.dumps(payload, separators=(",", ":")) + secret
    return hashlib.new(algorithm, message.encode()).hexdigest()


def signed_headers(api_key=API_KEY, secret=SECRET, method="GET", uri="/v1/items", timestamp=NOW):
    payload = {
        "api_key": api_key,
        "request_method": method,
        "request_uri": uri,
        "timestamp": str(timestamp),
    }
    return {
        "X-Api-Key": api_key,
        "X-Api-Timestamp": str(timestamp),
        "X-Api-Signature": legacy_signature(payload, secret),
    }


class RecordingStore(InMemoryCredentialStore):
    """In-memory store that records which lookups were made."""

    def __init__(self, credentials=()):
        super().__init__(credentials)
        self.key_lookups = []
        self.secret_lookups = []

    def find_by_key(self, api_key):
        self.key_lookups.append(api_key)
        return super().find_by_key(api_key)

    def get_secret(self, principal_id):
        self.secret_lookups.append(principal_id)
        return super().get_secret(principal_id)


@pytest.fixture
def store():
    return RecordingStore([Credential(principal_id=PRINCIPAL, api_key=API_KEY, shared_secret=SECRET)])


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def authenticator(store, clock):
    return Authenticator(store, KeyAuthConfig(), clock=clock)
