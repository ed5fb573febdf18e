"""
Unit Tests for Request Signing
==============================
Canonicalization, signatures, freshness and header handling.
"""

import hashlib
import hmac

import pytest

from key_auth import AuthRequest, ConfigurationError
from key_auth.signing import (
    BODY_PROFILE,
    FORM_IP_PROFILE,
    FORM_PROFILE,
    MINIMAL_PROFILE,
    CanonicalRequest,
    SignatureProfile,
    SignatureScheme,
    SignedCredentials,
    build_canonical_request,
    check_timestamp,
    compute_signature,
    create_signed_headers,
    ensure_algorithm,
    ensure_scheme,
    extract_credentials,
    get_profile,
    is_fresh,
    parse_timestamp,
    register_profile,
    serialize_canonical,
    verify_signature,
)

from conftest import NOW, legacy_signature


def sample_canonical():
    return CanonicalRequest.of({
        "api_key": "K1",
        "request_method": "GET",
        "request_uri": "/v1/items",
        "timestamp": "1700000000",
    })


class TestCanonicalRequest:
    """Tests for profile-driven canonicalization."""

    def test_minimal_profile_field_order(self):
        """Minimal profile signs key, method, uri and timestamp in that order."""
        request = AuthRequest(method="get", uri="/v1/items?page=2")
        credentials = SignedCredentials(api_key="K1", timestamp="1700000000", signature="")

        canonical = build_canonical_request(request, credentials)

        assert canonical.fields == (
            ("api_key", "K1"),
            ("request_method", "GET"),
            ("request_uri", "/v1/items?page=2"),
            ("timestamp", "1700000000"),
        )

    def test_timestamp_kept_as_received(self):
        """The timestamp is signed exactly as sent, not reparsed."""
        request = AuthRequest(method="GET", uri="/")
        credentials = SignedCredentials(api_key="K1", timestamp="+01700000000", signature="")

        canonical = build_canonical_request(request, credentials)

        assert canonical.as_dict()["timestamp"] == "+01700000000"

    def test_form_ip_profile_includes_ip_and_form(self):
        """The form_ip profile binds the client IP and form fields."""
        request = AuthRequest(method="POST", uri="/wp-json", remote_ip="127.0.0.1", form={"title": "x"})
        credentials = SignedCredentials(api_key="K1", timestamp="1", signature="")

        canonical = build_canonical_request(request, credentials, "form_ip")

        assert canonical.names == ("api_key", "ip", "request_method", "request_post", "request_uri", "timestamp")
        assert canonical.as_dict()["ip"] == "127.0.0.1"
        assert canonical.as_dict()["request_post"] == {"title": "x"}

    def test_body_profile_hashes_body(self):
        """The body profile signs the SHA-256 of the raw body."""
        request = AuthRequest(method="POST", uri="/v1/items", body=b'{"a":1}')
        credentials = SignedCredentials(api_key="K1", timestamp="1", signature="")

        canonical = build_canonical_request(request, credentials, BODY_PROFILE)

        assert canonical.as_dict()["body_sha256"] == hashlib.sha256(b'{"a":1}').hexdigest()

    def test_uses_body(self):
        """Only profiles with body or form fields need the body read."""
        assert MINIMAL_PROFILE.uses_body is False
        assert FORM_PROFILE.uses_body is True
        assert FORM_IP_PROFILE.uses_body is True
        assert BODY_PROFILE.uses_body is True

    def test_unknown_profile(self):
        """Unknown profile names are a configuration error."""
        with pytest.raises(ConfigurationError):
            get_profile("v9")

    def test_unknown_field(self):
        """Profiles can only use registered fields."""
        with pytest.raises(ConfigurationError):
            SignatureProfile.from_names("bad", ["api_key", "cookie"])

    def test_register_custom_profile(self):
        """Custom profiles can be registered and resolved by name."""
        profile = register_profile(
            SignatureProfile.from_names("test_key_time", ["timestamp", "api_key"])
        )

        assert get_profile("test_key_time") is profile
        assert profile.field_names == ("timestamp", "api_key")

    def test_replace_keeps_order(self):
        """Replacing a value keeps the field order."""
        canonical = sample_canonical().replace(request_uri="/v1/other")

        assert canonical.names == sample_canonical().names
        assert canonical.as_dict()["request_uri"] == "/v1/other"


class TestSerialization:
    """Tests for canonical JSON serialization."""

    def test_compact_json_in_field_order(self):
        """Serialization is compact JSON with keys in profile order."""
        text = serialize_canonical(sample_canonical())

        assert text == '{"api_key":"K1","request_method":"GET","request_uri":"/v1/items","timestamp":"1700000000"}'

    def test_php_compatible_escapes_slashes(self):
        """PHP mode escapes forward slashes like json_encode."""
        text = serialize_canonical(sample_canonical(), php_compatible=True)

        assert '"request_uri":"\\/v1\\/items"' in text

    def test_php_compatible_empty_form(self):
        """PHP mode renders an empty form as []."""
        canonical = CanonicalRequest.of([("request_post", {}), ("timestamp", "1")])

        assert serialize_canonical(canonical, php_compatible=True) == '{"request_post":[],"timestamp":"1"}'
        assert serialize_canonical(canonical) == '{"request_post":{},"timestamp":"1"}'

    def test_non_ascii_escaped(self):
        """Non-ASCII characters are escaped so the bytes are stable."""
        canonical = CanonicalRequest.of({"request_uri": "/café"})

        assert serialize_canonical(canonical) == '{"request_uri":"/caf\\u00e9"}'


class TestSignature:
    """Tests for signature computation and comparison."""

    def test_matches_reference_construction(self):
        """Default signature is sha256(canonical_json + secret)."""
        payload = sample_canonical().as_dict()

        assert compute_signature(sample_canonical(), "S1") == legacy_signature(payload, "S1")

    def test_deterministic(self):
        """Identical inputs always give identical output."""
        assert compute_signature(sample_canonical(), "S1") == compute_signature(sample_canonical(), "S1")

    @pytest.mark.parametrize("field,value", [
        ("api_key", "K2"),
        ("request_method", "POST"),
        ("request_uri", "/v1/items/1"),
        ("timestamp", "1700000001"),
    ])
    def test_any_field_change_changes_signature(self, field, value):
        """Changing a single signed field changes the signature."""
        original = compute_signature(sample_canonical(), "S1")
        changed = compute_signature(sample_canonical().replace(**{field: value}), "S1")

        assert original != changed

    def test_secret_change_changes_signature(self):
        """A different secret gives a different signature."""
        assert compute_signature(sample_canonical(), "S1") != compute_signature(sample_canonical(), "S2")

    def test_hmac_scheme(self):
        """HMAC scheme keys the digest with the secret."""
        message = serialize_canonical(sample_canonical())
        expected = hmac.new(b"S1", message.encode(), hashlib.sha256).hexdigest()

        assert compute_signature(sample_canonical(), "S1", scheme=SignatureScheme.HMAC) == expected
        assert compute_signature(sample_canonical(), "S1", scheme="hmac") == expected

    def test_configurable_algorithm(self):
        """The digest algorithm is configurable."""
        sig = compute_signature(sample_canonical(), "S1", algorithm="sha512")

        assert len(sig) == 128
        assert sig == legacy_signature(sample_canonical().as_dict(), "S1", algorithm="sha512")

    def test_ensure_algorithm(self):
        """Unknown and variable-length digests are rejected."""
        assert ensure_algorithm("SHA256") == "sha256"
        with pytest.raises(ConfigurationError):
            ensure_algorithm("not-a-hash")
        with pytest.raises(ConfigurationError):
            ensure_algorithm("shake_128")

    def test_scheme_name_case_insensitive(self):
        """Scheme names are accepted in any case; unknown ones are rejected."""
        expected = compute_signature(sample_canonical(), "S1", scheme=SignatureScheme.HMAC)

        assert ensure_scheme(" HMAC ") is SignatureScheme.HMAC
        assert compute_signature(sample_canonical(), "S1", scheme="HMAC") == expected
        with pytest.raises(ConfigurationError):
            ensure_scheme("rsa")

    def test_verify_signature(self):
        """Verification accepts the exact signature only."""
        sig = compute_signature(sample_canonical(), "S1")

        assert verify_signature(sig, sig) is True
        assert verify_signature(sig, sig.upper()) is True
        assert verify_signature(sig, "deadbeef") is False
        assert verify_signature(sig, sig[:-1]) is False
        assert verify_signature(sig, "") is False

    def test_verify_signature_non_ascii(self):
        """Non-ASCII input is a mismatch, not an error."""
        sig = compute_signature(sample_canonical(), "S1")

        assert verify_signature(sig, "é" * 64) is False


class TestFreshness:
    """Tests for timestamp freshness."""

    def test_parse_timestamp(self):
        """Only optionally signed digit strings parse."""
        assert parse_timestamp("1700000000") == 1700000000
        assert parse_timestamp(" 1700000000 ") == 1700000000
        assert parse_timestamp("-5") == -5
        assert parse_timestamp(1700000000) == 1700000000
        assert parse_timestamp("abc") is None
        assert parse_timestamp("1700000000.5") is None
        assert parse_timestamp("1_700_000_000") is None
        assert parse_timestamp("١٢") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None

    def test_is_fresh_symmetric_window(self):
        """The window is inclusive and symmetric."""
        assert is_fresh(NOW, NOW, 300) is True
        assert is_fresh(NOW - 300, NOW, 300) is True
        assert is_fresh(NOW + 300, NOW, 300) is True
        assert is_fresh(NOW - 301, NOW, 300) is False
        assert is_fresh(NOW + 301, NOW, 300) is False

    def test_malformed_never_fresh(self):
        """Unparsable timestamps fail closed."""
        assert is_fresh(None, NOW, 10**12) is False
        assert check_timestamp("garbage", 10**12, now=NOW) is False
        assert check_timestamp("0", 300, now=NOW) is False

    def test_check_timestamp(self):
        """Raw header values are parsed then checked."""
        assert check_timestamp(str(NOW - 10), 300, now=NOW) is True
        assert check_timestamp(str(NOW - 600), 300, now=NOW) is False


class TestHeaders:
    """Tests for header extraction and creation."""

    def test_extract_case_insensitive(self):
        """Header names match regardless of case."""
        credentials = extract_credentials({
            "x-api-key": "K1",
            "X-API-TIMESTAMP": "1700000000",
            "X-Api-Signature": "abc",
        })

        assert credentials == SignedCredentials(api_key="K1", timestamp="1700000000", signature="abc")

    @pytest.mark.parametrize("missing", ["X-Api-Key", "X-Api-Timestamp", "X-Api-Signature"])
    def test_partial_headers_are_absent(self, missing):
        """Any missing header means no credentials at all."""
        headers = {"X-Api-Key": "K1", "X-Api-Timestamp": "1", "X-Api-Signature": "abc"}
        del headers[missing]

        assert extract_credentials(headers) is None

    def test_blank_header_is_absent(self):
        """Blank values count as missing."""
        headers = {"X-Api-Key": "  ", "X-Api-Timestamp": "1", "X-Api-Signature": "abc"}

        assert extract_credentials(headers) is None

    def test_create_signed_headers(self):
        """Client headers carry the key, timestamp and reference signature."""
        headers = create_signed_headers("K1", "S1", "get", "/v1/items", timestamp=NOW)

        expected = legacy_signature(
            {"api_key": "K1", "request_method": "GET", "request_uri": "/v1/items", "timestamp": str(NOW)},
            "S1",
        )
        assert headers == {
            "X-Api-Key": "K1",
            "X-Api-Timestamp": str(NOW),
            "X-Api-Signature": expected,
        }
