"""
Bounded request body hashing

The body hash covers at most ``max_bytes`` bytes of the stream. The stream is
always rewound to its start afterwards so the full body can still be sent.
"""

import hashlib
import logging
from typing import Optional

from .types import (
    BodyStream,
    DEFAULT_MAX_BODY_HASH_SIZE,
    SigningErrorCodes,
)
from .utils import to_base64
from ..exceptions import BodyStreamError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class BodyHasher:
    """
    SHA-256 hasher for request body streams.
    """

    def __init__(self, max_bytes: Optional[int] = DEFAULT_MAX_BODY_HASH_SIZE):
        """
        Initialize the hasher.

        Args:
            max_bytes: Maximum number of bytes to hash (None = whole stream)
        """
        self.max_bytes = max_bytes

    def hash(self, stream: BodyStream) -> str:
        """
        Hash the body stream.

        Args:
            stream: Readable, seekable binary stream, or None

        Returns:
            str: Base64 SHA-256 of the hashed bytes, or "" when there is no stream

        Raises:
            BodyStreamError: If the stream cannot be read or rewound
        """
        if stream is None:
            return ""

        self._check_stream(stream)

        hasher = hashlib.sha256()
        total = 0
        try:
            while self.max_bytes is None or total < self.max_bytes:
                size = CHUNK_SIZE
                if self.max_bytes is not None:
                    size = min(CHUNK_SIZE, self.max_bytes - total)
                chunk = stream.read(size)
                if not chunk:
                    break
                if isinstance(chunk, str):
                    raise BodyStreamError(
                        "Stream must be opened in binary mode to compute hash",
                        SigningErrorCodes.STREAM_NOT_BINARY
                    )
                hasher.update(chunk)
                total += len(chunk)
            stream.seek(0)
        except OSError as e:
            raise BodyStreamError(
                f"Failed to read stream to compute hash: {e}",
                SigningErrorCodes.STREAM_READ_FAILED,
                {"original_error": str(e)}
            ) from e

        logger.debug(f"Hashed {total} body bytes (limit: {self.max_bytes})")
        return to_base64(hasher.digest())

    def _check_stream(self, stream: BodyStream) -> None:
        if getattr(stream, 'closed', False):
            raise BodyStreamError(
                "Cannot read closed stream to compute hash",
                SigningErrorCodes.STREAM_NOT_READABLE
            )

        readable = getattr(stream, 'readable', None)
        if not hasattr(stream, 'read') or (readable is not None and not readable()):
            raise BodyStreamError(
                "Cannot read stream to compute hash",
                SigningErrorCodes.STREAM_NOT_READABLE
            )

        seekable = getattr(stream, 'seekable', None)
        if not hasattr(stream, 'seek') or (seekable is not None and not seekable()):
            raise BodyStreamError(
                "Stream must be seekable",
                SigningErrorCodes.STREAM_NOT_SEEKABLE
            )


def hash_body_stream(stream: BodyStream, max_bytes: Optional[int] = DEFAULT_MAX_BODY_HASH_SIZE) -> str:
    """
    Hash a body stream with a one-off BodyHasher.

    Args:
        stream: Readable, seekable binary stream, or None
        max_bytes: Maximum number of bytes to hash (None = whole stream)

    Returns:
        str: Base64 SHA-256 digest, or "" when stream is None
    """
    return BodyHasher(max_bytes).hash(stream)
