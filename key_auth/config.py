"""
Key Auth Configuration
======================
Override points for the authenticator, with environment defaults.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from .exceptions import ConfigurationError
from .signing.canonical import SignatureProfile, get_profile
from .signing.freshness import DEFAULT_TIMESTAMP_TOLERANCE
from .signing.models import SignatureScheme
from .signing.signature import SIGNATURE_ALGORITHM, SIGNATURE_SCHEME, ensure_algorithm, ensure_scheme

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class KeyAuthConfig:
    """Configuration for signature authentication."""
    timestamp_tolerance: int = DEFAULT_TIMESTAMP_TOLERANCE
    signature_algorithm: str = SIGNATURE_ALGORITHM
    signature_scheme: Union[SignatureScheme, str] = SIGNATURE_SCHEME
    signature_profile: Union[SignatureProfile, str] = "minimal"
    php_compatible: bool = False
    equalize_timing: bool = True
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "KeyAuthConfig":
        """Build a configuration from KEY_AUTH_* environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            timestamp_tolerance=_env_int(env, "KEY_AUTH_TIMESTAMP_TOLERANCE", DEFAULT_TIMESTAMP_TOLERANCE),
            signature_algorithm=env.get("KEY_AUTH_SIGNATURE_ALGORITHM", SIGNATURE_ALGORITHM),
            signature_scheme=env.get("KEY_AUTH_SIGNATURE_SCHEME", SIGNATURE_SCHEME.value),
            signature_profile=env.get("KEY_AUTH_SIGNATURE_PROFILE", "minimal"),
            php_compatible=_env_bool(env, "KEY_AUTH_PHP_COMPATIBLE", False),
            equalize_timing=_env_bool(env, "KEY_AUTH_EQUALIZE_TIMING", True),
            debug=_env_bool(env, "KEY_AUTH_DEBUG", False),
        ).validate()

    def validate(self) -> "KeyAuthConfig":
        """
        Check and normalize the configuration.

        Raises:
            ConfigurationError: On an unusable algorithm, scheme, profile
                or tolerance
        """
        if isinstance(self.timestamp_tolerance, bool) or not isinstance(self.timestamp_tolerance, int):
            raise ConfigurationError("timestamp_tolerance must be an integer number of seconds")
        if self.timestamp_tolerance < 0:
            raise ConfigurationError("timestamp_tolerance must not be negative")

        self.signature_algorithm = ensure_algorithm(self.signature_algorithm)
        self.signature_scheme = ensure_scheme(self.signature_scheme)

        get_profile(self.signature_profile)
        return self

    @property
    def profile(self) -> SignatureProfile:
        return get_profile(self.signature_profile)
