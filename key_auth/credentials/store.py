"""
Credential Store
================
The lookup interface the authenticator depends on, and an in-memory
implementation.
"""

import threading
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Tuple, runtime_checkable

import structlog

from ..exceptions import UnknownPrincipal
from .models import Credential
from .rotation import mask_api_key

logger = structlog.get_logger(__name__)


@runtime_checkable
class CredentialStore(Protocol):
    """
    Read-only lookup of credentials by API key.

    ``find_by_key`` returns None for no match, an ambiguous match or a
    malformed key. Storage or transport failures raise
    CredentialStoreUnavailable instead.
    """

    def find_by_key(self, api_key: str) -> Optional[Credential]:
        ...

    def get_secret(self, principal_id: Any) -> Optional[str]:
        ...


@runtime_checkable
class MutableCredentialStore(CredentialStore, Protocol):
    """Credential store that supports administrative writes (rotation)."""

    def get(self, principal_id: Any) -> Optional[Credential]:
        ...

    def put(self, credential: Credential) -> None:
        ...


class InMemoryCredentialStore:
    """
    Process-local credential store.

    Reads work against an immutable snapshot and take no lock; writes are
    serialized and swap in a new snapshot, so rotation can interleave with
    concurrent lookups.
    """

    name = "memory"

    def __init__(self, credentials: Iterable[Credential] = ()):
        self._lock = threading.Lock()
        by_principal = {c.principal_id: c for c in credentials}
        self._snapshot = self._index(by_principal)

    @staticmethod
    def _index(
        by_principal: Dict[Any, Credential],
    ) -> Tuple[Mapping[Any, Credential], Mapping[str, Tuple[Credential, ...]]]:
        by_key: Dict[str, Tuple[Credential, ...]] = {}
        for credential in by_principal.values():
            by_key[credential.api_key] = by_key.get(credential.api_key, ()) + (credential,)
        return MappingProxyType(by_principal), MappingProxyType(by_key)

    def find_by_key(self, api_key: str) -> Optional[Credential]:
        """
        Look up a credential by API key.

        Args:
            api_key: The API key presented by the client

        Returns:
            The credential, or None if absent, ambiguous or malformed
        """
        if not isinstance(api_key, str) or not api_key:
            return None

        _, by_key = self._snapshot
        matches = by_key.get(api_key, ())
        if len(matches) > 1:
            logger.warning(
                "credential_lookup_ambiguous",
                api_key=mask_api_key(api_key),
                matches=len(matches),
            )
            return None
        return matches[0] if matches else None

    def get_secret(self, principal_id: Any) -> Optional[str]:
        credential = self.get(principal_id)
        return credential.shared_secret if credential else None

    def get(self, principal_id: Any) -> Optional[Credential]:
        by_principal, _ = self._snapshot
        return by_principal.get(principal_id)

    def put(self, credential: Credential) -> None:
        """
        Insert or replace the credential of a principal.

        Raises:
            ValueError: If the API key already belongs to another principal
        """
        with self._lock:
            by_principal, by_key = self._snapshot
            holders = by_key.get(credential.api_key, ())
            if any(c.principal_id != credential.principal_id for c in holders):
                raise ValueError("API key already assigned to another principal")

            updated = dict(by_principal)
            updated[credential.principal_id] = credential
            self._snapshot = self._index(updated)

    def remove(self, principal_id: Any) -> Credential:
        """Remove and return a principal's credential."""
        with self._lock:
            by_principal, _ = self._snapshot
            if principal_id not in by_principal:
                raise UnknownPrincipal(principal_id, store=self.name)

            updated = dict(by_principal)
            credential = updated.pop(principal_id)
            self._snapshot = self._index(updated)
        return credential

    def __len__(self) -> int:
        return len(self._snapshot[0])

    def __contains__(self, principal_id: Any) -> bool:
        return principal_id in self._snapshot[0]
