"""
EdgeGrid V1 request signer

This module provides the main signer implementation. It composes the auth
data, canonical request and signature builders, writes the Authorization
header onto the request and can hand the signed request to an injected
transport.
"""

import asyncio
import inspect
import logging
from typing import Any, Optional

from .auth_data import AuthDataBuilder
from .body_hash import BodyHasher
from .canonical_message import CanonicalRequestBuilder
from .signature import SignatureEngine
from .signing_config import validate_signing_config
from .types import (
    AUTHORIZATION_HEADER,
    DEFAULT_CONTENT_TYPE,
    BodyStream,
    ClientCredential,
    Clock,
    EdgeGridSignatureResult,
    HttpMethod,
    RandomSource,
    SignableRequest,
    SigningConfig,
    SigningContext,
    SigningErrorCodes,
)
from .utils import create_signing_context
from ..exceptions import InvalidArgumentError, ValidationError

logger = logging.getLogger(__name__)


class EdgeGridV1Signer:
    """
    EdgeGrid V1 (EG1-HMAC-SHA256) request signer

    A signer holds only immutable configuration and injected collaborators,
    so one instance can sign many requests concurrently.
    """

    def __init__(
        self,
        config: Optional[SigningConfig] = None,
        transport: Optional[Any] = None,
        random_source: Optional[RandomSource] = None,
        clock: Optional[Clock] = None
    ):
        """
        Initialize the signer with configuration.

        Args:
            config: Signing configuration (defaults to no headers, 2048 byte body hash)
            transport: Collaborator with a ``send(request)`` method used by execute()
            random_source: Callable returning n random bytes, used for nonces
            clock: Callable returning the current datetime

        Raises:
            ValidationError: If configuration is invalid
        """
        self.config = config if config is not None else SigningConfig()
        validate_signing_config(self.config)
        self.transport = transport
        self.random_source = random_source
        self.clock = clock

        self._auth_data_builder = AuthDataBuilder()
        self._canonical_builder = CanonicalRequestBuilder(
            self.config.headers_to_include,
            BodyHasher(self.config.max_body_hash_size)
        )
        self._engine = SignatureEngine()

    def create_authorization(
        self,
        request: SignableRequest,
        credential: ClientCredential,
        body: BodyStream = None,
        context: Optional[SigningContext] = None
    ) -> EdgeGridSignatureResult:
        """
        Compute the Authorization header for a request without modifying it.

        Args:
            request: Request to sign
            credential: Client credential
            body: Optional body stream (hashed for POST only)
            context: Signing context; a fresh one is generated when omitted

        Returns:
            EdgeGridSignatureResult: Header value and intermediate strings

        Raises:
            InvalidArgumentError: If request or credential is missing
            BodyStreamError: If the body stream cannot be read or rewound
        """
        self._check_arguments(request, credential)

        if context is None:
            context = create_signing_context(self.random_source, self.clock)

        auth_data = self._auth_data_builder.build(credential, context)
        canonical_request = self._canonical_builder.build_for_request(request, body)
        signature = self._engine.sign(
            credential.secret,
            context.timestamp_string,
            canonical_request,
            auth_data
        )

        return EdgeGridSignatureResult(
            authorization=self._engine.authorization_header(auth_data, signature),
            auth_data=auth_data,
            canonical_request=canonical_request,
            signature=signature,
            context=context
        )

    def sign(
        self,
        request: SignableRequest,
        credential: ClientCredential,
        body: BodyStream = None
    ) -> None:
        """
        Sign a request in place.

        The Authorization header is only added when the request does not
        already carry one; otherwise the call leaves the request untouched.

        Args:
            request: Request to sign
            credential: Client credential
            body: Optional body stream (hashed for POST only)

        Raises:
            InvalidArgumentError: If request or credential is missing
            BodyStreamError: If the body stream cannot be read or rewound
        """
        result = self.create_authorization(request, credential, body)

        if request.has_header(AUTHORIZATION_HEADER):
            logger.debug(f"Request to {request.url} already has an Authorization header, not re-signing")
            return

        request.headers[AUTHORIZATION_HEADER] = result.authorization
        logger.debug(f"Signed {request.method.upper()} request to {request.url}")

    async def execute(
        self,
        request: SignableRequest,
        credential: ClientCredential,
        body: BodyStream = None
    ) -> Any:
        """
        Sign a request and send it through the configured transport.

        POST bodies are attached to the request as its content with a
        JSON content type. Coroutine transports are awaited; blocking
        transports are run in the event loop's default executor. The
        transport response is returned unchanged.

        Args:
            request: Request to sign and send
            credential: Client credential
            body: Optional body stream

        Returns:
            The transport's response

        Raises:
            InvalidArgumentError: If request or credential is missing
            ValidationError: If no transport is configured
        """
        self._check_arguments(request, credential)

        if self.transport is None:
            raise ValidationError(
                "No transport configured for request execution",
                SigningErrorCodes.TRANSPORT_NOT_CONFIGURED
            )

        self.sign(request, credential, body)

        if body is not None and request.method.upper() == HttpMethod.POST.value:
            request.content = body
            request.content_type = DEFAULT_CONTENT_TYPE

        if inspect.iscoroutinefunction(self.transport.send):
            return await self.transport.send(request)

        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(None, self.transport.send, request)
        if inspect.isawaitable(response):
            response = await response
        return response

    def _check_arguments(self, request: SignableRequest, credential: ClientCredential) -> None:
        if request is None:
            raise InvalidArgumentError(
                "Request cannot be None",
                SigningErrorCodes.INVALID_REQUEST,
                {"argument": "request"}
            )

        if credential is None:
            raise InvalidArgumentError(
                "Credential cannot be None",
                SigningErrorCodes.INVALID_CREDENTIAL,
                {"argument": "credential"}
            )


def create_signer(
    config: Optional[SigningConfig] = None,
    transport: Optional[Any] = None,
    random_source: Optional[RandomSource] = None,
    clock: Optional[Clock] = None
) -> EdgeGridV1Signer:
    """
    Create a new EdgeGrid V1 signer.

    Args:
        config: Signing configuration
        transport: Optional transport collaborator
        random_source: Optional randomness source for nonces
        clock: Optional clock for timestamps

    Returns:
        EdgeGridV1Signer: Configured signer instance
    """
    return EdgeGridV1Signer(config, transport, random_source, clock)


def sign_request(
    request: SignableRequest,
    credential: ClientCredential,
    config: Optional[SigningConfig] = None,
    body: BodyStream = None
) -> SignableRequest:
    """
    Sign a request with the given configuration.

    Args:
        request: Request to sign
        credential: Client credential
        config: Signing configuration
        body: Optional body stream

    Returns:
        SignableRequest: The same request, signed
    """
    create_signer(config).sign(request, credential, body)
    return request
