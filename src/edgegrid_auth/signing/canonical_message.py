"""
Canonical request construction for EdgeGrid V1 signatures

The canonical request is the tab-delimited string that is signed:

    METHOD<TAB>SCHEME<TAB>HOST<TAB>PATH_AND_QUERY<TAB>HEADERS<TAB>BODYHASH<TAB>

HEADERS is itself a sequence of ``Name:value<TAB>`` entries, so it may
contain tabs of its own.
"""

from typing import Optional, Sequence

from .body_hash import BodyHasher
from .types import BodyStream, DEFAULT_MAX_BODY_HASH_SIZE, HttpMethod, SignableRequest
from .utils import normalize_header_value

FIELD_SEPARATOR = "\t"


class CanonicalRequestBuilder:
    """
    Canonical request builder for EdgeGrid V1 signatures
    """

    def __init__(self, headers_to_include: Sequence[str] = (), body_hasher: Optional[BodyHasher] = None):
        """
        Initialize canonical request builder.

        Args:
            headers_to_include: Ordered header names to include
            body_hasher: Hasher for POST bodies
        """
        self.headers_to_include = tuple(headers_to_include)
        self.body_hasher = body_hasher or BodyHasher()

    def build(
        self,
        method: str,
        scheme: str,
        host: str,
        path_and_query: str,
        request: SignableRequest,
        body_hash: str
    ) -> str:
        """
        Build the canonical request string.

        Args:
            method: HTTP method (upper-cased in the output)
            scheme: URL scheme
            host: URL host
            path_and_query: URL path with query string
            request: Request whose headers are looked up
            body_hash: Body hash, or "" for no body

        Returns:
            str: Canonical request string
        """
        fields = [
            method.upper(),
            scheme,
            host,
            path_and_query,
            self.build_headers(request),
            body_hash,
        ]
        return FIELD_SEPARATOR.join(fields) + FIELD_SEPARATOR

    def build_headers(self, request: SignableRequest) -> str:
        """
        Build the HEADERS field in configured order.

        Headers absent from the request are skipped.
        """
        parts = []
        for name in self.headers_to_include:
            values = request.get_header_values(name)
            if values is None:
                continue
            parts.append(f"{name}:{normalize_header_value(values)}{FIELD_SEPARATOR}")
        return "".join(parts)

    def build_for_request(self, request: SignableRequest, body: BodyStream = None) -> str:
        """
        Build the canonical request string for a request.

        Only POST bodies are hashed; for every other method the body hash
        field is empty even when a body stream is supplied.
        """
        method = request.method.upper()
        body_hash = self.body_hasher.hash(body) if method == HttpMethod.POST.value else ""
        return self.build(
            method,
            request.scheme,
            request.host,
            request.path_and_query,
            request,
            body_hash
        )


def build_canonical_request(
    request: SignableRequest,
    headers_to_include: Sequence[str] = (),
    body: BodyStream = None,
    max_body_hash_size: Optional[int] = DEFAULT_MAX_BODY_HASH_SIZE
) -> str:
    """
    Build the canonical request string for a request.

    Args:
        request: Request to describe
        headers_to_include: Ordered header names to include
        body: Optional body stream (hashed for POST only)
        max_body_hash_size: Maximum body bytes to hash (None = unlimited)

    Returns:
        str: Canonical request string
    """
    builder = CanonicalRequestBuilder(headers_to_include, BodyHasher(max_body_hash_size))
    return builder.build_for_request(request, body)
