"""
Key Auth Client
===============
Signs outgoing httpx requests so a KeyAuthMiddleware-protected service
accepts them.

Usage:
    import httpx
    from key_auth.client import KeyAuth

    with httpx.Client(base_url=url, auth=KeyAuth(api_key, secret)) as client:
        client.get("/v1/items")
"""

import io
import time
from typing import Callable, Dict, Generator, Optional, Union
from urllib.parse import parse_qsl

import httpx
from python_multipart import parse_form

from .signing.canonical import DEFAULT_PROFILE, SignatureProfile, get_profile
from .signing.headers import create_signed_headers
from .signing.models import SignatureScheme
from .signing.signature import SIGNATURE_ALGORITHM, SIGNATURE_SCHEME, ensure_scheme

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
MULTIPART_CONTENT_TYPE = "multipart/form-data"


def _multipart_fields(content_type: str, content: bytes) -> Dict[str, str]:
    """
    Collect the plain fields of a multipart body.

    File parts are skipped; the server leaves uploads out of the signed form
    as well.
    """
    fields: Dict[str, str] = {}

    def on_field(field) -> None:
        value = field.value or b""
        fields[field.field_name.decode("utf-8")] = value.decode("utf-8")

    def on_file(file) -> None:
        file.close()

    headers = {"Content-Type": content_type, "Content-Length": str(len(content))}
    parse_form(headers, io.BytesIO(content), on_field, on_file)
    return fields


class KeyAuth(httpx.Auth):
    """
    httpx authentication flow for API key request signing.

    Each request is signed with a fresh timestamp. Profile, algorithm and
    scheme must match the server configuration.
    """

    requires_request_body = True

    def __init__(
        self,
        api_key: str,
        secret: str,
        profile: Union[str, SignatureProfile] = DEFAULT_PROFILE,
        algorithm: str = SIGNATURE_ALGORITHM,
        scheme: Union[SignatureScheme, str] = SIGNATURE_SCHEME,
        php_compatible: bool = False,
        remote_ip: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.api_key = api_key
        self.secret = secret
        self.profile = get_profile(profile)
        self.algorithm = algorithm
        self.scheme = ensure_scheme(scheme)
        self.php_compatible = php_compatible
        self.remote_ip = remote_ip
        self.clock = clock

    def _form_fields(self, request: httpx.Request) -> Dict[str, str]:
        content_type = request.headers.get("content-type", "")
        if content_type.startswith(FORM_CONTENT_TYPE):
            return dict(parse_qsl(request.content.decode("utf-8"), keep_blank_values=True))
        if content_type.startswith(MULTIPART_CONTENT_TYPE):
            return _multipart_fields(content_type, request.content)
        return {}

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        headers = create_signed_headers(
            api_key=self.api_key,
            secret=self.secret,
            method=request.method,
            uri=request.url.raw_path.decode("ascii"),
            timestamp=int(self.clock()),
            profile=self.profile,
            algorithm=self.algorithm,
            scheme=self.scheme,
            php_compatible=self.php_compatible,
            form=self._form_fields(request),
            remote_ip=self.remote_ip,
            body=request.content,
        )
        request.headers.update(headers)
        yield request
