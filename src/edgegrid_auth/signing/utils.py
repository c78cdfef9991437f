"""
Utility functions for request signing

This module provides utility functions for EdgeGrid V1 signing, including
nonce and timestamp generation, timestamp formatting, header value
normalization and the base64/HMAC primitives shared by the signer.
"""

import base64
import hashlib
import hmac
import re
import secrets
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional, Union
from urllib.parse import urlsplit

from .types import (
    NONCE_BYTES,
    TIMESTAMP_FORMAT,
    Clock,
    RandomSource,
    SigningContext,
    SigningError,
    SigningErrorCodes,
)

_WHITESPACE_RUN = re.compile(r'\s+')
_NONCE_PATTERN = re.compile(r'^[0-9a-f]{32}$')


def generate_nonce(random_source: Optional[RandomSource] = None) -> str:
    """
    Generate a 128-bit nonce rendered as 32 lowercase hex digits.

    Args:
        random_source: Callable returning n random bytes (defaults to secrets.token_bytes)

    Returns:
        str: Nonce for this request

    Raises:
        SigningError: If the random source returns the wrong number of bytes
    """
    source = random_source or secrets.token_bytes
    raw = source(NONCE_BYTES)
    if not isinstance(raw, (bytes, bytearray)) or len(raw) != NONCE_BYTES:
        raise SigningError(
            f"Random source must return {NONCE_BYTES} bytes",
            SigningErrorCodes.INVALID_NONCE,
            {"length": len(raw) if isinstance(raw, (bytes, bytearray)) else None}
        )
    return to_hex(bytes(raw))


def generate_timestamp(clock: Optional[Clock] = None) -> datetime:
    """
    Generate the current UTC time truncated to whole seconds.

    Args:
        clock: Callable returning the current datetime (defaults to UTC now)
    """
    now = clock() if clock else datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).replace(microsecond=0)


def format_edgegrid_timestamp(timestamp: datetime) -> str:
    """
    Format a timestamp as yyyyMMddTHH:mm:ssZ in UTC.

    Naive datetimes are taken to be UTC already.
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc)
    return timestamp.strftime(TIMESTAMP_FORMAT)


def create_signing_context(
    random_source: Optional[RandomSource] = None,
    clock: Optional[Clock] = None
) -> SigningContext:
    """
    Create a fresh signing context with a new timestamp and nonce.

    Args:
        random_source: Randomness source for the nonce
        clock: Clock for the timestamp

    Returns:
        SigningContext: Context for exactly one signing call
    """
    return SigningContext(
        timestamp=generate_timestamp(clock),
        nonce=generate_nonce(random_source)
    )


def validate_nonce(nonce: str) -> bool:
    """
    Validate nonce format (32 lowercase hex digits).

    Args:
        nonce: Nonce string to validate

    Returns:
        bool: True if nonce is valid
    """
    if not isinstance(nonce, str):
        return False
    return bool(_NONCE_PATTERN.match(nonce))


def normalize_header_value(values: Union[str, Iterable[str]]) -> str:
    """
    Normalize header values for the canonical request.

    Values are joined with a single space, trimmed, and every run of
    whitespace is collapsed to one space.
    """
    if isinstance(values, str):
        joined = values
    else:
        joined = " ".join(values)
    return _WHITESPACE_RUN.sub(" ", joined.strip())


def parse_url(url: str) -> Dict[str, str]:
    """
    Parse URL to extract components needed for signing.

    Args:
        url: URL string to parse

    Returns:
        dict: scheme, host and path_and_query of the URL

    Raises:
        SigningError: If URL format is invalid
    """
    try:
        parsed = urlsplit(url)
    except ValueError as e:
        raise SigningError(
            f"Invalid URL format: {url}",
            SigningErrorCodes.INVALID_URL,
            {"url": url, "original_error": str(e)}
        ) from e

    if parsed.scheme not in ('http', 'https') or not parsed.hostname:
        raise SigningError(
            f"Invalid URL format: {url}",
            SigningErrorCodes.INVALID_URL,
            {"url": url}
        )

    path = parsed.path or "/"
    return {
        "scheme": parsed.scheme.lower(),
        "host": parsed.hostname,
        "path_and_query": f"{path}?{parsed.query}" if parsed.query else path,
    }


def to_base64(data: bytes) -> str:
    """Encode bytes as standard base64 text."""
    return base64.b64encode(data).decode('ascii')


def to_hex(data: bytes) -> str:
    """
    Convert bytes to lowercase hex string.

    Args:
        data: Bytes to convert

    Returns:
        str: Lowercase hex string
    """
    return data.hex().lower()


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, str):
        return value.encode('utf-8')
    return bytes(value)


def hmac_sha256_base64(key: Union[str, bytes], message: Union[str, bytes]) -> str:
    """
    Compute HMAC-SHA256 and return it base64 encoded.

    String keys and messages are encoded as UTF-8.
    """
    digest = hmac.new(_to_bytes(key), _to_bytes(message), hashlib.sha256).digest()
    return to_base64(digest)
