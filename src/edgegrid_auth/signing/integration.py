"""
HTTP client integration for request signing

This module provides integration between EdgeGrid request signing and the
``requests`` library: an auth handler that signs prepared requests, and a
helper that creates a session signing every outbound request.
"""

import io
import logging
from typing import Optional

import requests
from requests.auth import AuthBase
from requests.models import PreparedRequest
from requests.structures import CaseInsensitiveDict

from .edgegrid_signer import EdgeGridV1Signer
from .types import AUTHORIZATION_HEADER, BodyStream, ClientCredential, SignableRequest

logger = logging.getLogger(__name__)


def _body_stream(body) -> BodyStream:
    """Wrap a prepared request body in a stream suitable for hashing."""
    if body is None:
        return None
    if isinstance(body, str):
        return io.BytesIO(body.encode('utf-8'))
    if isinstance(body, (bytes, bytearray)):
        return io.BytesIO(bytes(body))
    return body


def sign_prepared_request(
    prepared_request: PreparedRequest,
    credential: ClientCredential,
    signer: Optional[EdgeGridV1Signer] = None
) -> PreparedRequest:
    """
    Sign a prepared request.

    Args:
        prepared_request: Prepared request to sign
        credential: Client credential
        signer: Signer to use (a default signer when omitted)

    Returns:
        PreparedRequest: Request with the Authorization header added

    Raises:
        BodyStreamError: If a POST body stream cannot be hashed
    """
    signer = signer or EdgeGridV1Signer()

    signable_request = SignableRequest(
        method=prepared_request.method,
        url=prepared_request.url,
        headers=dict(prepared_request.headers or {})
    )
    signer.sign(signable_request, credential, _body_stream(prepared_request.body))

    if prepared_request.headers is None:
        prepared_request.headers = CaseInsensitiveDict()

    authorization = signable_request.headers.get(AUTHORIZATION_HEADER)
    if authorization is not None and AUTHORIZATION_HEADER not in prepared_request.headers:
        prepared_request.headers[AUTHORIZATION_HEADER] = authorization

    return prepared_request


class EdgeGridAuth(AuthBase):
    """
    requests auth handler signing requests with EdgeGrid V1.

    Usage:
        session.auth = EdgeGridAuth(credential, signer)
    """

    def __init__(self, credential: ClientCredential, signer: Optional[EdgeGridV1Signer] = None):
        self.credential = credential
        self.signer = signer or EdgeGridV1Signer()

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        sign_prepared_request(request, self.credential, self.signer)
        logger.debug(f"Signed {request.method} request to {request.url}")
        return request


def create_signing_session(
    credential: ClientCredential,
    signer: Optional[EdgeGridV1Signer] = None,
    session: Optional[requests.Session] = None
) -> requests.Session:
    """
    Create a requests session that signs every request.

    Args:
        credential: Client credential
        signer: Signer to use (a default signer when omitted)
        session: Existing session to configure

    Returns:
        requests.Session: Session with EdgeGrid auth installed
    """
    session = session or requests.Session()
    session.auth = EdgeGridAuth(credential, signer)
    return session
