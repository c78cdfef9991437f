"""
Transports for sending signed requests

The signer never owns a network client. These transports wrap a
``requests.Session`` (synchronous) or an ``httpx.AsyncClient`` (asynchronous)
and are injected into the signer. Any object with a ``send(request)`` method
can be used in their place.
"""

import logging
from typing import Any, Dict, Optional, Protocol, Union

import httpx
import requests
from requests.structures import CaseInsensitiveDict

from ..signing.types import SignableRequest

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Collaborator that sends a signed request and returns the response."""

    def send(self, request: SignableRequest) -> Any:
        ...


def build_wire_headers(request: SignableRequest) -> Dict[str, str]:
    """
    Flatten request headers for the wire.

    Repeated header values are joined with ", ", and the content type of an
    attached body is added as Content-Type.
    """
    headers = CaseInsensitiveDict()
    for name, value in request.headers.items():
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value)
        headers[name] = str(value)

    if request.content_type:
        headers['Content-Type'] = request.content_type

    return dict(headers)


def read_content(content: Any) -> Optional[bytes]:
    """Read request content into bytes, rewinding streams afterwards."""
    if content is None:
        return None
    if isinstance(content, str):
        return content.encode('utf-8')
    if isinstance(content, (bytes, bytearray)):
        return bytes(content)

    data = content.read()
    if hasattr(content, 'seek'):
        content.seek(0)
    if isinstance(data, str):
        return data.encode('utf-8')
    return data


class RequestsTransport:
    """
    Synchronous transport backed by requests.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        verify: Union[bool, str] = True
    ):
        """
        Initialize the transport.

        Args:
            session: Session to send through (a new one is created when omitted)
            timeout: Request timeout in seconds
            verify: TLS verification flag or CA bundle path
        """
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.timeout = timeout
        self.verify = verify

    def send(self, request: SignableRequest) -> requests.Response:
        """
        Send a signed request.

        Args:
            request: Signed request

        Returns:
            requests.Response: Unprocessed response
        """
        logger.debug(f"Sending {request.method.upper()} request to {request.url}")
        return self.session.request(
            request.method.upper(),
            request.url,
            headers=build_wire_headers(request),
            data=request.content,
            timeout=self.timeout,
            verify=self.verify
        )

    def close(self) -> None:
        """Close the underlying session if this transport created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


class HttpxTransport:
    """
    Asynchronous transport backed by httpx.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize the transport.

        Args:
            client: Async client to send through (a new one is created when omitted)
            timeout: Request timeout in seconds
        """
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=timeout) if timeout is not None else httpx.AsyncClient()
        self.client = client
        self.timeout = timeout

    async def send(self, request: SignableRequest) -> httpx.Response:
        """
        Send a signed request.

        Args:
            request: Signed request

        Returns:
            httpx.Response: Unprocessed response
        """
        logger.debug(f"Sending {request.method.upper()} request to {request.url}")
        wire_request = self.client.build_request(
            request.method.upper(),
            request.url,
            headers=build_wire_headers(request),
            content=read_content(request.content)
        )
        return await self.client.send(wire_request)

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()
