"""
Type definitions for request signing functionality

This module provides type definitions and data classes for the EdgeGrid V1
request signing protocol (EG1-HMAC-SHA256).
"""

from datetime import datetime, timezone
from typing import Any, BinaryIO, Callable, Dict, List, Mapping, Optional, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum

from requests.structures import CaseInsensitiveDict

from ..exceptions import SigningError, ValidationError


AUTHORIZATION_HEADER = "Authorization"
AUTH_SCHEME = "EG1-HMAC-SHA256"
DEFAULT_MAX_BODY_HASH_SIZE = 2048
DEFAULT_CONTENT_TYPE = "application/json"
TIMESTAMP_FORMAT = "%Y%m%dT%H:%M:%SZ"
NONCE_BYTES = 16


class HttpMethod(str, Enum):
    """HTTP methods supported for signing"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


@dataclass(frozen=True)
class ClientCredential:
    """
    Client credential used to sign requests

    Attributes:
        client_token: Client token sent in the clear in the Authorization header
        access_token: Access token sent in the clear in the Authorization header
        secret: Shared secret, used only as HMAC key material
    """
    client_token: str
    access_token: str
    secret: str

    def __post_init__(self):
        """Validate credential fields"""
        for name in ('client_token', 'access_token', 'secret'):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ValidationError(
                    f"Credential {name} must be a non-empty string",
                    SigningErrorCodes.INVALID_CREDENTIAL,
                    {"field": name}
                )

    def __repr__(self) -> str:
        return "ClientCredential(client_token='***', access_token='***', secret='***')"


@dataclass(frozen=True)
class SigningConfig:
    """
    Configuration for request signing

    Attributes:
        headers_to_include: Ordered header names to include in the signature
        max_body_hash_size: Maximum number of body bytes to hash (None = unlimited)
    """
    headers_to_include: Tuple[str, ...] = ()
    max_body_hash_size: Optional[int] = DEFAULT_MAX_BODY_HASH_SIZE

    def __post_init__(self):
        """Validate signing configuration"""
        headers = self.headers_to_include
        if headers is None:
            headers = ()
        if not isinstance(headers, str):
            headers = tuple(headers)
        if isinstance(headers, str) or not all(isinstance(h, str) and h.strip() for h in headers):
            raise ValidationError(
                "Headers to include must be a sequence of non-empty header names",
                SigningErrorCodes.INVALID_CONFIG,
                {"headers_to_include": headers}
            )
        object.__setattr__(self, 'headers_to_include', tuple(h.strip() for h in headers))

        size = self.max_body_hash_size
        if size is not None and (isinstance(size, bool) or not isinstance(size, int) or size < 0):
            raise ValidationError(
                f"Max body hash size must be a non-negative integer or None, got {size!r}",
                SigningErrorCodes.INVALID_CONFIG,
                {"max_body_hash_size": size}
            )


@dataclass(frozen=True)
class SigningContext:
    """
    Per-call signing context

    The formatted timestamp is computed once so that the auth data and the
    signing key derivation always see the same string.

    Attributes:
        timestamp: UTC instant, truncated to seconds
        nonce: 32 lowercase hex digits
        timestamp_string: Timestamp formatted as yyyyMMddTHH:mm:ssZ
    """
    timestamp: datetime
    nonce: str
    timestamp_string: str = field(init=False)

    def __post_init__(self):
        timestamp = self.timestamp
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        timestamp = timestamp.astimezone(timezone.utc).replace(microsecond=0)
        object.__setattr__(self, 'timestamp', timestamp)
        object.__setattr__(self, 'timestamp_string', timestamp.strftime(TIMESTAMP_FORMAT))


HeaderValue = Union[str, List[str]]


@dataclass
class SignableRequest:
    """
    Request to be signed with EdgeGrid V1

    Attributes:
        method: HTTP method (GET, POST, etc.)
        url: Absolute request URL
        headers: Request headers; values may be lists for repeated headers
        content: Optional body attached for transmission
        content_type: Content type of the attached body
    """
    method: Union[HttpMethod, str]
    url: str
    headers: Mapping[str, HeaderValue] = field(default_factory=CaseInsensitiveDict)
    content: Optional[Union[bytes, str, BinaryIO]] = None
    content_type: Optional[str] = None

    def __post_init__(self):
        """Validate request after initialization"""
        if isinstance(self.method, HttpMethod):
            self.method = self.method.value

        if not self.method or not isinstance(self.method, str):
            raise ValidationError(
                "Request method cannot be empty",
                SigningErrorCodes.INVALID_METHOD
            )

        if not self.url:
            raise ValidationError(
                "Request URL cannot be empty",
                SigningErrorCodes.INVALID_URL
            )

        try:
            self._url_parts()
        except SigningError as e:
            raise ValidationError(
                f"Invalid request URL: {self.url}",
                SigningErrorCodes.INVALID_URL,
                {"url": self.url}
            ) from e

        self.headers = CaseInsensitiveDict(self.headers or {})

    def _url_parts(self) -> Dict[str, str]:
        from .utils import parse_url
        return parse_url(self.url)

    @property
    def scheme(self) -> str:
        return self._url_parts()["scheme"]

    @property
    def host(self) -> str:
        return self._url_parts()["host"]

    @property
    def path_and_query(self) -> str:
        return self._url_parts()["path_and_query"]

    def get_header_values(self, name: str) -> Optional[List[str]]:
        """
        Get all values of a header, or None when the header is absent.

        Args:
            name: Header name (case-insensitive)
        """
        if name not in self.headers:
            return None
        value = self.headers[name]
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value]
        return [str(value)]

    def has_header(self, name: str) -> bool:
        return name in self.headers


@dataclass(frozen=True)
class EdgeGridSignatureResult:
    """
    Result of one EdgeGrid signing computation

    Attributes:
        authorization: Complete Authorization header value
        auth_data: Authentication data prefix (ends with ';')
        canonical_request: Canonical request string that was signed
        signature: Base64 signature
        context: Signing context used for the computation
    """
    authorization: str
    auth_data: str
    canonical_request: str
    signature: str
    context: SigningContext


class SigningErrorCodes:
    """Standard error codes for signing operations"""

    # Configuration errors
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_CREDENTIAL = "INVALID_CREDENTIAL"
    TRANSPORT_NOT_CONFIGURED = "TRANSPORT_NOT_CONFIGURED"

    # Request errors
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_URL = "INVALID_URL"
    INVALID_METHOD = "INVALID_METHOD"

    # Body stream errors
    STREAM_NOT_READABLE = "STREAM_NOT_READABLE"
    STREAM_NOT_SEEKABLE = "STREAM_NOT_SEEKABLE"
    STREAM_NOT_BINARY = "STREAM_NOT_BINARY"
    STREAM_READ_FAILED = "STREAM_READ_FAILED"

    # Signing errors
    SIGNING_FAILED = "SIGNING_FAILED"
    INVALID_NONCE = "INVALID_NONCE"


# Type aliases for convenience
RandomSource = Callable[[int], bytes]
Clock = Callable[[], datetime]
BodyStream = Optional[Any]
