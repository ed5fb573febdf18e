"""
Signing Models
==============
Data models and enums for request signing.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Tuple, Union


class SignatureScheme(str, Enum):
    """How the shared secret is combined with the canonical payload."""
    CONCAT = "concat"  # digest(payload + secret), legacy wire format
    HMAC = "hmac"


@dataclass(frozen=True)
class SignedCredentials:
    """The claim a client presents in its request headers."""
    api_key: str
    timestamp: str  # kept exactly as received
    signature: str


@dataclass(frozen=True)
class CanonicalRequest:
    """Ordered (name, value) pairs covered by the signature."""
    fields: Tuple[Tuple[str, Any], ...]

    @classmethod
    def of(cls, items: Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]) -> "CanonicalRequest":
        """Build from an ordered mapping or an iterable of pairs."""
        pairs = items.items() if isinstance(items, Mapping) else items
        return cls(fields=tuple((str(name), value) for name, value in pairs))

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self.fields)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.fields)

    def replace(self, **changes: Any) -> "CanonicalRequest":
        """Return a copy with some field values swapped, order unchanged."""
        unknown = set(changes) - set(self.names)
        if unknown:
            raise KeyError(f"Unknown canonical fields: {sorted(unknown)}")
        return CanonicalRequest(
            fields=tuple((name, changes.get(name, value)) for name, value in self.fields)
        )
