"""
Header Functions
================
Functions for creating and parsing signed request headers.
"""

import time
from typing import Any, Dict, Mapping, Optional, Union

from ..models import AuthRequest
from .canonical import DEFAULT_PROFILE, SignatureProfile, build_canonical_request
from .models import SignatureScheme, SignedCredentials
from .signature import SIGNATURE_ALGORITHM, SIGNATURE_SCHEME, compute_signature

API_KEY_HEADER = "X-Api-Key"
TIMESTAMP_HEADER = "X-Api-Timestamp"
SIGNATURE_HEADER = "X-Api-Signature"
DIAGNOSTIC_HEADER = "X-Key-Auth"

REQUIRED_HEADERS = (API_KEY_HEADER, TIMESTAMP_HEADER, SIGNATURE_HEADER)


def extract_credentials(headers: Mapping[str, str]) -> Optional[SignedCredentials]:
    """
    Pull the signed claim out of request headers.

    Header names are matched case-insensitively. A missing or blank header
    means the request is not using key auth at all, so partial sets are
    treated exactly like no headers.

    Args:
        headers: Request headers

    Returns:
        SignedCredentials if all required headers are present, None otherwise
    """
    lowered = {str(k).lower(): v for k, v in headers.items()}
    values = []
    for name in REQUIRED_HEADERS:
        value = lowered.get(name.lower())
        if value is None or not str(value).strip():
            return None
        values.append(str(value).strip())

    api_key, timestamp, signature = values
    return SignedCredentials(api_key=api_key, timestamp=timestamp, signature=signature)


def create_signed_headers(
    api_key: str,
    secret: str,
    method: str,
    uri: str,
    timestamp: Optional[int] = None,
    profile: Union[str, SignatureProfile] = DEFAULT_PROFILE,
    algorithm: str = SIGNATURE_ALGORITHM,
    scheme: Union[SignatureScheme, str] = SIGNATURE_SCHEME,
    php_compatible: bool = False,
    form: Optional[Mapping[str, Any]] = None,
    remote_ip: Optional[str] = None,
    body: bytes = b"",
) -> Dict[str, str]:
    """
    Create headers for a signed request.

    Args:
        api_key: Client API key
        secret: Shared secret for the key
        method: HTTP method
        uri: Request path plus query string, exactly as it will be sent
        timestamp: Unix timestamp (defaults to now)
        profile: Signature profile agreed with the server
        algorithm: hashlib algorithm name
        scheme: Signature scheme agreed with the server
        php_compatible: Serialize like PHP json_encode
        form: Form fields (form profiles)
        remote_ip: Client IP as the server will see it (form_ip profile)
        body: Raw request body (body profile)

    Returns:
        Dictionary of headers to include in request
    """
    timestamp_value = str(int(time.time()) if timestamp is None else int(timestamp))
    request = AuthRequest(
        method=method,
        uri=uri,
        remote_ip=remote_ip,
        form=form or {},
        body=body,
    )
    credentials = SignedCredentials(api_key=api_key, timestamp=timestamp_value, signature="")
    canonical = build_canonical_request(request, credentials, profile)
    signature = compute_signature(
        canonical, secret, algorithm=algorithm, scheme=scheme, php_compatible=php_compatible
    )

    return {
        API_KEY_HEADER: api_key,
        TIMESTAMP_HEADER: timestamp_value,
        SIGNATURE_HEADER: signature,
    }
