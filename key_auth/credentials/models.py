"""
Credential Models
=================
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Credential:
    """An API key / shared secret pair bound to a principal."""
    principal_id: Any
    api_key: str
    shared_secret: str = field(repr=False)
