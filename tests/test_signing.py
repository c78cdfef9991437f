"""
Test suite for EdgeGrid V1 request signing functionality

This module tests the complete request signing implementation including
configuration, body hashing, canonical request construction, signature
computation and the signer itself.
"""

import base64
import hashlib
import hmac
import io
import re
from datetime import datetime, timedelta, timezone

import pytest

from edgegrid_auth.exceptions import (
    BodyStreamError,
    InvalidArgumentError,
    ValidationError,
)
from edgegrid_auth.signing import (
    # Core signing
    EdgeGridV1Signer,
    create_signer,
    sign_request,
    # Building blocks
    BodyHasher,
    hash_body_stream,
    CanonicalRequestBuilder,
    build_canonical_request,
    AuthDataBuilder,
    SignatureEngine,
    # Types
    ClientCredential,
    SignableRequest,
    SigningConfig,
    SigningContext,
    SigningErrorCodes,
    SigningError,
    HttpMethod,
    # Configuration
    SigningConfigBuilder,
    create_signing_config,
    signing_config_from_dict,
    # Utilities
    generate_nonce,
    generate_timestamp,
    create_signing_context,
    format_edgegrid_timestamp,
    validate_nonce,
    normalize_header_value,
    parse_url,
)

FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
FIXED_TIMESTAMP = "20240102T03:04:05Z"
FIXED_NONCE = "000102030405060708090a0b0c0d0e0f"

AUTH_HEADER_PATTERN = re.compile(
    r'^EG1-HMAC-SHA256 client_token=ct;access_token=at;'
    r'timestamp=\d{8}T\d{2}:\d{2}:\d{2}Z;nonce=[0-9a-f]{32};'
    r'signature=[A-Za-z0-9+/]+={0,2}$'
)


def fixed_clock():
    return FIXED_TIME


def fixed_random(n):
    return bytes(range(n))


def b64_sha256(data: bytes) -> str:
    return base64.b64encode(hashlib.sha256(data).digest()).decode('ascii')


def expected_signature(secret: str, timestamp: str, canonical: str, auth_data: str) -> str:
    signing_key = base64.b64encode(
        hmac.new(secret.encode('utf-8'), timestamp.encode('utf-8'), hashlib.sha256).digest()
    )
    return base64.b64encode(
        hmac.new(signing_key, (canonical + auth_data).encode('utf-8'), hashlib.sha256).digest()
    ).decode('ascii')


@pytest.fixture
def credential():
    return ClientCredential("ct", "at", "s")


class TestSigningUtilities:
    """Test utility functions"""

    def test_generate_nonce(self):
        """Test nonce generation"""
        nonce = generate_nonce()
        assert isinstance(nonce, str)
        assert validate_nonce(nonce)

        # Generate multiple nonces to ensure uniqueness
        nonces = [generate_nonce() for _ in range(10)]
        assert len(set(nonces)) == 10

    def test_generate_nonce_uses_random_source(self):
        assert generate_nonce(fixed_random) == FIXED_NONCE

    def test_generate_nonce_rejects_short_random_source(self):
        with pytest.raises(SigningError) as exc_info:
            generate_nonce(lambda n: b"\x00" * 8)
        assert exc_info.value.error_code == SigningErrorCodes.INVALID_NONCE

    def test_validate_nonce(self):
        assert validate_nonce(FIXED_NONCE)
        assert not validate_nonce(FIXED_NONCE.upper())
        assert not validate_nonce("0001-0203")
        assert not validate_nonce("")
        assert not validate_nonce(None)

    def test_generate_timestamp_truncates_to_seconds(self):
        timestamp = generate_timestamp(fixed_clock)
        assert timestamp == FIXED_TIME.replace(microsecond=0)
        assert timestamp.tzinfo == timezone.utc

    def test_generate_timestamp_defaults_to_now(self):
        timestamp = generate_timestamp()
        assert timestamp.microsecond == 0
        assert abs(datetime.now(timezone.utc) - timestamp) < timedelta(seconds=2)

    def test_generate_timestamp_converts_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        timestamp = generate_timestamp(lambda: datetime(2024, 1, 2, 5, 4, 5, tzinfo=plus_two))
        assert format_edgegrid_timestamp(timestamp) == FIXED_TIMESTAMP

    def test_format_edgegrid_timestamp(self):
        assert format_edgegrid_timestamp(FIXED_TIME.replace(microsecond=0)) == FIXED_TIMESTAMP
        # Naive datetimes are taken as UTC
        assert format_edgegrid_timestamp(datetime(2024, 1, 2, 3, 4, 5)) == FIXED_TIMESTAMP

    def test_create_signing_context(self):
        context = create_signing_context(fixed_random, fixed_clock)
        assert context.nonce == FIXED_NONCE
        assert context.timestamp_string == FIXED_TIMESTAMP

    def test_normalize_header_value(self):
        assert normalize_header_value("  a   b\t\tc  ") == "a b c"
        assert normalize_header_value(["one", " two ", "three"]) == "one two three"
        assert normalize_header_value("") == ""

    def test_parse_url(self):
        parsed = parse_url("https://Example.com:8443/api/resource?x=1&y=2")
        assert parsed["scheme"] == "https"
        assert parsed["host"] == "example.com"
        assert parsed["path_and_query"] == "/api/resource?x=1&y=2"

        assert parse_url("http://example.com")["path_and_query"] == "/"
        assert parse_url("https://example.com/items;rev=2")["path_and_query"] == "/items;rev=2"

        with pytest.raises(SigningError):
            parse_url("not-a-url")

        with pytest.raises(SigningError):
            parse_url("ftp://example.com/file")


class TestTypes:
    """Test type definitions"""

    def test_credential_is_immutable(self, credential):
        with pytest.raises(Exception):
            credential.secret = "other"

    def test_credential_repr_masks_values(self, credential):
        text = repr(ClientCredential("client-tok", "access-tok", "super-secret"))
        assert "super-secret" not in text
        assert "client-tok" not in text
        assert "access-tok" not in text

    def test_credential_validation(self):
        with pytest.raises(ValidationError):
            ClientCredential("", "at", "s")
        with pytest.raises(ValidationError):
            ClientCredential("ct", "at", None)

    def test_signable_request_url_parts(self):
        request = SignableRequest(HttpMethod.GET, "https://Example.com:8443/a/b?q=1")
        assert request.method == "GET"
        assert request.scheme == "https"
        assert request.host == "example.com"
        assert request.path_and_query == "/a/b?q=1"

    def test_signable_request_url_parts_match_parse_url(self):
        url = "https://Example.com/items;rev=2?q=1"
        request = SignableRequest("GET", url)
        parsed = parse_url(url)
        assert (request.scheme, request.host, request.path_and_query) == (
            parsed["scheme"], parsed["host"], parsed["path_and_query"]
        )

    def test_signable_request_headers_case_insensitive(self):
        request = SignableRequest("GET", "https://example.com/", headers={"X-Test": "1"})
        assert request.has_header("x-test")
        assert request.get_header_values("X-TEST") == ["1"]
        assert request.get_header_values("X-Missing") is None

    def test_signable_request_does_not_alias_caller_headers(self):
        headers = {"X-Test": "1"}
        request = SignableRequest("GET", "https://example.com/", headers=headers)
        request.headers["Authorization"] = "x"
        assert "Authorization" not in headers

    def test_signable_request_validation(self):
        with pytest.raises(ValidationError):
            SignableRequest("GET", "")
        with pytest.raises(ValidationError):
            SignableRequest("GET", "/relative/path")
        with pytest.raises(ValidationError):
            SignableRequest("", "https://example.com/")

    def test_signing_context_formats_timestamp_once(self):
        context = SigningContext(timestamp=FIXED_TIME, nonce=FIXED_NONCE)
        assert context.timestamp.microsecond == 0
        assert context.timestamp_string == FIXED_TIMESTAMP


class TestSigningConfiguration:
    """Test signing configuration and builders"""

    def test_defaults(self):
        config = SigningConfig()
        assert config.headers_to_include == ()
        assert config.max_body_hash_size == 2048

    def test_headers_keep_configured_order(self):
        config = create_signing_config(headers=["X-B", "X-A"], max_body_hash_size=None)
        assert config.headers_to_include == ("X-B", "X-A")
        assert config.max_body_hash_size is None

    def test_config_accepts_header_iterator(self):
        config = SigningConfig(headers_to_include=(h for h in ["X-A", "X-B"]))
        assert config.headers_to_include == ("X-A", "X-B")

        config = create_signing_config(headers=iter(["X-A"]))
        assert config.headers_to_include == ("X-A",)

    def test_config_is_immutable(self):
        config = create_signing_config(headers=["X-A"])
        with pytest.raises(Exception):
            config.max_body_hash_size = 10

    def test_builder(self):
        config = (SigningConfigBuilder()
                  .with_header("X-A")
                  .with_headers(["X-B", "X-C"])
                  .unlimited_body_hash()
                  .build())
        assert config.headers_to_include == ("X-A", "X-B", "X-C")
        assert config.max_body_hash_size is None

    def test_config_validation(self):
        with pytest.raises(ValidationError):
            create_signing_config(max_body_hash_size=-1)

        with pytest.raises(ValidationError):
            create_signing_config(headers=["X-A", ""])

        with pytest.raises(ValidationError):
            create_signing_config(headers=["X-A", "x-a"])

        with pytest.raises(ValidationError):
            SigningConfig(headers_to_include="X-A")

    def test_duplicate_headers_rejected_case_insensitively(self):
        with pytest.raises(ValidationError) as exc_info:
            EdgeGridV1Signer(SigningConfig(headers_to_include=("X-A", "X-B", "x-a")))
        assert exc_info.value.details == {"duplicate_headers": ["x-a"]}

    def test_from_dict(self):
        config = signing_config_from_dict({"headers_to_include": ["X-A"], "max_body_hash_size": None})
        assert config.headers_to_include == ("X-A",)
        assert config.max_body_hash_size is None

        assert signing_config_from_dict({}).max_body_hash_size == 2048

        with pytest.raises(ValidationError):
            signing_config_from_dict({"headers": ["X-A"]})


class TestBodyHasher:
    """Test bounded body hashing"""

    def test_no_stream_returns_empty_marker(self):
        assert BodyHasher().hash(None) == ""
        assert hash_body_stream(None) != b64_sha256(b"")

    def test_hashes_full_content_under_limit(self):
        stream = io.BytesIO(b"Test content")
        digest = hash_body_stream(stream, 2048)
        assert digest == b64_sha256(b"Test content")
        assert stream.tell() == 0

    def test_truncates_to_limit_and_rewinds(self):
        content = bytes(range(256)) * 20
        stream = io.BytesIO(content)
        digest = hash_body_stream(stream, 2048)
        assert digest == b64_sha256(content[:2048])
        assert stream.tell() == 0
        # The full body is still available for sending
        assert stream.read() == content

    def test_unlimited_hashes_everything(self):
        content = b"x" * 50000
        assert hash_body_stream(io.BytesIO(content), None) == b64_sha256(content)

    def test_zero_limit_hashes_no_bytes(self):
        assert hash_body_stream(io.BytesIO(b"data"), 0) == b64_sha256(b"")

    def test_empty_stream(self):
        assert hash_body_stream(io.BytesIO(b"")) == b64_sha256(b"")

    def test_unreadable_stream(self):
        class WriteOnly(io.BytesIO):
            def readable(self):
                return False

        with pytest.raises(BodyStreamError) as exc_info:
            hash_body_stream(WriteOnly(b"data"))
        assert exc_info.value.error_code == SigningErrorCodes.STREAM_NOT_READABLE

    def test_closed_stream(self):
        stream = io.BytesIO(b"data")
        stream.close()
        with pytest.raises(BodyStreamError) as exc_info:
            hash_body_stream(stream)
        assert exc_info.value.error_code == SigningErrorCodes.STREAM_NOT_READABLE

    def test_unseekable_stream(self):
        class Unseekable(io.BytesIO):
            def seekable(self):
                return False

        with pytest.raises(BodyStreamError) as exc_info:
            hash_body_stream(Unseekable(b"data"))
        assert exc_info.value.error_code == SigningErrorCodes.STREAM_NOT_SEEKABLE

    def test_object_without_read(self):
        with pytest.raises(BodyStreamError):
            hash_body_stream(iter([b"data"]))

    def test_read_failure(self):
        class Failing(io.BytesIO):
            def read(self, size=-1):
                raise OSError("device unavailable")

        with pytest.raises(BodyStreamError) as exc_info:
            hash_body_stream(Failing(b"data"))
        assert exc_info.value.error_code == SigningErrorCodes.STREAM_READ_FAILED
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_text_stream_rejected(self):
        with pytest.raises(BodyStreamError) as exc_info:
            hash_body_stream(io.StringIO("text"))
        assert exc_info.value.error_code == SigningErrorCodes.STREAM_NOT_BINARY


class TestCanonicalRequest:
    """Test canonical request construction"""

    def test_layout_without_headers_or_body(self):
        request = SignableRequest("get", "https://example.com/api/resource")
        canonical = build_canonical_request(request)
        assert canonical == "GET\thttps\texample.com\t/api/resource\t\t\t"

        fields = canonical.split("\t")
        assert len(fields) == 7
        assert fields[-1] == ""

    def test_query_is_kept(self):
        request = SignableRequest("GET", "https://example.com/api?b=2&a=1")
        assert build_canonical_request(request).split("\t")[3] == "/api?b=2&a=1"

    def test_path_parameters_are_kept(self):
        request = SignableRequest("GET", "https://example.com/items;rev=2")
        assert build_canonical_request(request).split("\t")[3] == "/items;rev=2"

        request = SignableRequest("GET", "https://example.com/api;v=1/items;rev=2?x=1")
        assert build_canonical_request(request).split("\t")[3] == "/api;v=1/items;rev=2?x=1"

    def test_headers_follow_configured_order(self):
        request = SignableRequest(
            "GET",
            "https://example.com/",
            headers={"x-a": "1", "X-B": "  two   words \t here ", "X-Other": "ignored"}
        )
        builder = CanonicalRequestBuilder(["X-B", "X-Missing", "X-A"])
        assert builder.build_headers(request) == "X-B:two words here\tX-A:1\t"

    def test_multi_valued_header(self):
        request = SignableRequest("GET", "https://example.com/", headers={"X-A": ["a", " b "]})
        builder = CanonicalRequestBuilder(["X-A"])
        assert builder.build_headers(request) == "X-A:a b\t"

    def test_no_configured_headers_present(self):
        request = SignableRequest("GET", "https://example.com/")
        assert CanonicalRequestBuilder(["X-A"]).build_headers(request) == ""

    def test_build_with_explicit_parts(self):
        request = SignableRequest("GET", "https://example.com/", headers={"X-A": "1"})
        canonical = CanonicalRequestBuilder(["X-A"]).build(
            "post", "https", "example.com", "/p", request, "HASH"
        )
        assert canonical == "POST\thttps\texample.com\t/p\tX-A:1\t\tHASH\t"

    def test_post_body_is_hashed(self):
        body = io.BytesIO(b"Test content")
        request = SignableRequest("POST", "https://example.com/api")
        canonical = build_canonical_request(request, body=body)
        assert canonical.endswith(f"\t{b64_sha256(b'Test content')}\t")
        assert body.tell() == 0

    def test_lowercase_post_body_is_hashed(self):
        request = SignableRequest("post", "https://example.com/api")
        canonical = build_canonical_request(request, body=io.BytesIO(b"data"))
        assert canonical.startswith("POST\t")
        assert canonical.split("\t")[5] == b64_sha256(b"data")

    def test_put_body_is_not_hashed(self):
        # Only POST bodies are part of the signature
        body = io.BytesIO(b"Test content")
        request = SignableRequest("PUT", "https://example.com/api")
        canonical = build_canonical_request(request, body=body)
        assert canonical == "PUT\thttps\texample.com\t/api\t\t\t"
        assert body.tell() == 0

    def test_post_without_body_has_empty_hash(self):
        request = SignableRequest("POST", "https://example.com/api")
        assert build_canonical_request(request).split("\t")[5] == ""

    def test_body_hash_respects_limit(self):
        content = b"a" * 100
        request = SignableRequest("POST", "https://example.com/api")
        canonical = build_canonical_request(request, body=io.BytesIO(content), max_body_hash_size=10)
        assert canonical.split("\t")[5] == b64_sha256(content[:10])


class TestAuthDataAndSignature:
    """Test auth data and signature computation"""

    def test_auth_data_format(self, credential):
        context = SigningContext(timestamp=FIXED_TIME, nonce=FIXED_NONCE)
        auth_data = AuthDataBuilder().build(credential, context)
        assert auth_data == (
            "EG1-HMAC-SHA256 client_token=ct;access_token=at;"
            f"timestamp={FIXED_TIMESTAMP};nonce={FIXED_NONCE};"
        )

    def test_signing_key_derivation(self):
        engine = SignatureEngine()
        expected = base64.b64encode(
            hmac.new(b"s", FIXED_TIMESTAMP.encode(), hashlib.sha256).digest()
        ).decode()
        assert engine.derive_signing_key("s", FIXED_TIMESTAMP) == expected

    def test_signature_uses_signing_key_text(self):
        engine = SignatureEngine()
        canonical = "GET\thttps\texample.com\t/\t\t\t"
        auth_data = "EG1-HMAC-SHA256 client_token=ct;"
        signature = engine.sign("s", FIXED_TIMESTAMP, canonical, auth_data)
        assert signature == expected_signature("s", FIXED_TIMESTAMP, canonical, auth_data)

        # Keying with the decoded signing key gives a different signature
        raw_key = hmac.new(b"s", FIXED_TIMESTAMP.encode(), hashlib.sha256).digest()
        decoded_variant = base64.b64encode(
            hmac.new(raw_key, (canonical + auth_data).encode(), hashlib.sha256).digest()
        ).decode()
        assert signature != decoded_variant

    def test_authorization_header(self):
        assert SignatureEngine().authorization_header("data;", "SIG") == "data;signature=SIG"


class TestEdgeGridV1Signer:
    """Test the signer"""

    def setup_method(self):
        """Set up test fixtures"""
        self.signer = EdgeGridV1Signer(
            create_signing_config(headers=["X-Included"]),
            random_source=fixed_random,
            clock=fixed_clock
        )

    def test_sign_adds_authorization_header(self, credential):
        signer = EdgeGridV1Signer()
        request = SignableRequest("GET", "https://example.com/api/resource")

        signer.sign(request, credential)

        assert "Authorization" in request.headers
        assert AUTH_HEADER_PATTERN.match(request.headers["Authorization"])

    def test_signature_is_reproducible(self, credential):
        request = SignableRequest("GET", "https://example.com/api/resource")
        self.signer.sign(request, credential)

        canonical = "GET\thttps\texample.com\t/api/resource\t\t\t"
        auth_data = (
            "EG1-HMAC-SHA256 client_token=ct;access_token=at;"
            f"timestamp={FIXED_TIMESTAMP};nonce={FIXED_NONCE};"
        )
        signature = expected_signature("s", FIXED_TIMESTAMP, canonical, auth_data)
        assert request.headers["Authorization"] == f"{auth_data}signature={signature}"

        other = SignableRequest("GET", "https://example.com/api/resource")
        create_signer(self.signer.config, random_source=fixed_random, clock=fixed_clock).sign(other, credential)
        assert other.headers["Authorization"] == request.headers["Authorization"]

    def test_timestamp_is_shared_by_auth_data_and_key(self, credential):
        request = SignableRequest("GET", "https://example.com/")
        result = self.signer.create_authorization(request, credential)

        assert f"timestamp={result.context.timestamp_string};" in result.auth_data
        assert result.signature == expected_signature(
            "s", result.context.timestamp_string, result.canonical_request, result.auth_data
        )

    def test_included_header_changes_signature(self, credential):
        context = SigningContext(timestamp=FIXED_TIME, nonce=FIXED_NONCE)
        first = SignableRequest("GET", "https://example.com/", headers={"X-Included": "one"})
        second = SignableRequest("GET", "https://example.com/", headers={"X-Included": "two"})

        sig1 = self.signer.create_authorization(first, credential, context=context).signature
        sig2 = self.signer.create_authorization(second, credential, context=context).signature
        assert sig1 != sig2

    def test_other_header_does_not_change_signature(self, credential):
        context = SigningContext(timestamp=FIXED_TIME, nonce=FIXED_NONCE)
        first = SignableRequest("GET", "https://example.com/", headers={"X-Other": "one"})
        second = SignableRequest("GET", "https://example.com/", headers={"X-Other": "two"})

        sig1 = self.signer.create_authorization(first, credential, context=context).signature
        sig2 = self.signer.create_authorization(second, credential, context=context).signature
        assert sig1 == sig2

    def test_fresh_context_per_call(self, credential):
        signer = EdgeGridV1Signer()
        request = SignableRequest("GET", "https://example.com/")
        first = signer.create_authorization(request, credential)
        second = signer.create_authorization(request, credential)
        assert first.context.nonce != second.context.nonce
        assert first.authorization != second.authorization

    def test_sign_twice_adds_header_once(self, credential):
        signer = EdgeGridV1Signer()
        request = SignableRequest("GET", "https://example.com/api/resource")

        signer.sign(request, credential)
        first = request.headers["Authorization"]
        signer.sign(request, credential)

        assert request.headers["Authorization"] == first
        assert list(request.headers.keys()).count("Authorization") == 1

    def test_existing_authorization_is_kept(self, credential):
        request = SignableRequest(
            "GET", "https://example.com/", headers={"authorization": "Bearer external"}
        )
        self.signer.sign(request, credential)
        assert request.headers["Authorization"] == "Bearer external"

    def test_post_body_is_signed_and_rewound(self, credential):
        body = io.BytesIO(b"Test upload content")
        request = SignableRequest("POST", "https://example.com/api/resource")

        result = self.signer.create_authorization(request, credential, body)

        assert result.canonical_request.split("\t")[5] == b64_sha256(b"Test upload content")
        assert body.tell() == 0

    def test_put_body_is_not_signed(self, credential):
        context = SigningContext(timestamp=FIXED_TIME, nonce=FIXED_NONCE)
        request = SignableRequest("PUT", "https://example.com/api/resource")

        with_body = self.signer.create_authorization(request, credential, io.BytesIO(b"x"), context)
        without_body = self.signer.create_authorization(request, credential, None, context)

        assert with_body.canonical_request.split("\t")[5] == ""
        assert with_body.signature == without_body.signature

    def test_sign_rejects_missing_request(self, credential):
        with pytest.raises(InvalidArgumentError):
            self.signer.sign(None, credential)

    def test_sign_rejects_missing_credential(self):
        request = SignableRequest("GET", "https://example.com/api/resource")
        with pytest.raises(ValueError):
            self.signer.sign(request, None)
        assert "Authorization" not in request.headers

    def test_sign_propagates_stream_errors(self, credential):
        class Unseekable(io.BytesIO):
            def seekable(self):
                return False

        request = SignableRequest("POST", "https://example.com/api")
        with pytest.raises(BodyStreamError):
            self.signer.sign(request, credential, Unseekable(b"data"))
        assert "Authorization" not in request.headers

    def test_invalid_config_rejected(self):
        with pytest.raises(ValidationError):
            EdgeGridV1Signer(config={"headers_to_include": []})

    def test_sign_request_helper(self, credential):
        request = SignableRequest("GET", "https://example.com/api/resource")
        signed = sign_request(request, credential)
        assert signed is request
        assert AUTH_HEADER_PATTERN.match(request.headers["Authorization"])


if __name__ == '__main__':
    pytest.main([__file__])
