"""
Authenticator
=============
Verifies API key signed requests and resolves them to a principal.

Usage:
    store = InMemoryCredentialStore([Credential("user-1", api_key, secret)])
    authenticator = Authenticator(store, KeyAuthConfig.from_env())

    result = authenticator.authenticate(auth_request)
    if result.is_authenticated:
        ...
"""

import secrets
import time
from typing import Callable, Optional

import structlog

from .config import KeyAuthConfig
from .credentials.models import Credential
from .credentials.rotation import mask_api_key
from .credentials.store import CredentialStore
from .exceptions import CredentialStoreError, CredentialStoreUnavailable
from .models import AuthRequest, AuthResult, RejectReason
from .observability import log_auth_outcome
from .signing.headers import extract_credentials
from .signing.freshness import check_timestamp
from .signing.models import SignedCredentials
from .signing.signature import compute_signature, serialize_canonical, verify_signature

logger = structlog.get_logger(__name__)


class Authenticator:
    """
    Stateless signature authenticator.

    Checks run in a fixed order: headers, key lookup, timestamp freshness,
    signature. The first failing check decides the rejection reason. The
    instance holds only configuration and can be shared between threads.
    """

    def __init__(
        self,
        store: CredentialStore,
        config: Optional[KeyAuthConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.config = (config or KeyAuthConfig()).validate()
        self.profile = self.config.profile
        self.clock = clock

    def authenticate(self, request: AuthRequest) -> AuthResult:
        """
        Authenticate a request.

        Args:
            request: Immutable view of the inbound request

        Returns:
            AuthResult: authenticated, unauthenticated (no key auth headers)
            or rejected with a reason

        Raises:
            CredentialStoreError: If the credential store cannot answer;
                unexpected store exceptions arrive as CredentialStoreUnavailable
        """
        credentials = extract_credentials(request.headers)
        if credentials is None:
            result = AuthResult.unauthenticated()
            log_auth_outcome(result, request)
            return result

        result = self._verify(request, credentials)
        log_auth_outcome(result, request, credentials.api_key)
        return result

    def _verify(self, request: AuthRequest, credentials: SignedCredentials) -> AuthResult:
        credential = self._find_credential(credentials.api_key)
        if credential is None:
            if self.config.equalize_timing:
                # Same work as a known key, against a throwaway secret
                self._expected_signature(request, credentials, secrets.token_hex(16))
            return AuthResult.rejected(RejectReason.UNKNOWN_KEY)

        now = int(self.clock())
        if not check_timestamp(credentials.timestamp, self.config.timestamp_tolerance, now=now):
            return AuthResult.rejected(RejectReason.STALE_OR_INVALID_TIMESTAMP)

        expected = self._expected_signature(request, credentials, credential.shared_secret)
        if not verify_signature(expected, credentials.signature):
            return AuthResult.rejected(RejectReason.SIGNATURE_MISMATCH)

        return AuthResult.authenticated(credential.principal_id)

    def _find_credential(self, api_key: str) -> Optional[Credential]:
        try:
            credential = self.store.find_by_key(api_key)
        except CredentialStoreError:
            logger.error("credential_store_error", api_key=mask_api_key(api_key), exc_info=True)
            raise
        except Exception as e:
            logger.error("credential_store_error", api_key=mask_api_key(api_key), exc_info=True)
            raise CredentialStoreUnavailable(str(e), store=type(self.store).__name__) from e

        if credential is None:
            return None
        if not credential.shared_secret:
            # An empty secret would make the signature computable by anyone
            logger.warning(
                "credential_missing_secret",
                principal_id=credential.principal_id,
                api_key=mask_api_key(api_key),
            )
            return None
        return credential

    def _expected_signature(
        self,
        request: AuthRequest,
        credentials: SignedCredentials,
        secret: str,
    ) -> str:
        canonical = self.profile.canonicalize(request, credentials)
        if self.config.debug:
            logger.debug(
                "key_auth_canonical_request",
                profile=self.profile.name,
                payload=serialize_canonical(canonical, php_compatible=self.config.php_compatible),
            )
        return compute_signature(
            canonical,
            secret,
            algorithm=self.config.signature_algorithm,
            scheme=self.config.signature_scheme,
            php_compatible=self.config.php_compatible,
        )
