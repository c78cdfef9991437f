"""
EdgeGrid Python SDK
EdgeGrid V1 (EG1-HMAC-SHA256) request signing for API clients
"""

from .version import __version__
from .exceptions import (
    EdgeGridSDKError,
    ValidationError,
    InvalidArgumentError,
    BodyStreamError,
    SigningError,
)
from .signing import (
    # Core signing functionality
    EdgeGridV1Signer,
    create_signer,
    sign_request,
    # Types
    ClientCredential,
    SignableRequest,
    SigningConfig,
    SigningContext,
    EdgeGridSignatureResult,
    HttpMethod,
    AUTHORIZATION_HEADER,
    DEFAULT_MAX_BODY_HASH_SIZE,
    # Configuration
    SigningConfigBuilder,
    create_signing_config,
    signing_config_from_dict,
    # HTTP Integration
    EdgeGridAuth,
    sign_prepared_request,
    create_signing_session,
)
from .http_clients import (
    Transport,
    RequestsTransport,
    HttpxTransport,
)


# Public API exports
__all__ = [
    '__version__',
    # Exceptions
    'EdgeGridSDKError',
    'ValidationError',
    'InvalidArgumentError',
    'BodyStreamError',
    'SigningError',
    # Signing
    'EdgeGridV1Signer',
    'create_signer',
    'sign_request',
    'ClientCredential',
    'SignableRequest',
    'SigningConfig',
    'SigningContext',
    'EdgeGridSignatureResult',
    'HttpMethod',
    'AUTHORIZATION_HEADER',
    'DEFAULT_MAX_BODY_HASH_SIZE',
    'SigningConfigBuilder',
    'create_signing_config',
    'signing_config_from_dict',
    'EdgeGridAuth',
    'sign_prepared_request',
    'create_signing_session',
    # Transports
    'Transport',
    'RequestsTransport',
    'HttpxTransport',
]
