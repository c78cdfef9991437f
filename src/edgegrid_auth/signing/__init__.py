"""
EdgeGrid Python SDK - Request Signing Module

EdgeGrid V1 (EG1-HMAC-SHA256) request signing. This module provides the
signer, its building blocks and the requests integration used to
authenticate calls to EdgeGrid-protected APIs.
"""

from .types import (
    AUTHORIZATION_HEADER,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_MAX_BODY_HASH_SIZE,
    ClientCredential,
    SignableRequest,
    SigningConfig,
    SigningContext,
    EdgeGridSignatureResult,
    SigningError,
    SigningErrorCodes,
    HttpMethod,
)

from .body_hash import (
    BodyHasher,
    hash_body_stream,
)

from .canonical_message import (
    CanonicalRequestBuilder,
    build_canonical_request,
)

from .auth_data import (
    AuthDataBuilder,
    build_auth_data,
)

from .signature import SignatureEngine

from .edgegrid_signer import (
    EdgeGridV1Signer,
    create_signer,
    sign_request,
)

from .signing_config import (
    SigningConfigBuilder,
    create_signing_config,
    signing_config_from_dict,
    validate_signing_config,
)

from .utils import (
    generate_nonce,
    generate_timestamp,
    create_signing_context,
    format_edgegrid_timestamp,
    validate_nonce,
    normalize_header_value,
    parse_url,
)

from .integration import (
    EdgeGridAuth,
    sign_prepared_request,
    create_signing_session,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'EdgeGridV1Signer',
    'create_signer',
    'sign_request',
    # Building blocks
    'BodyHasher',
    'hash_body_stream',
    'CanonicalRequestBuilder',
    'build_canonical_request',
    'AuthDataBuilder',
    'build_auth_data',
    'SignatureEngine',
    # Types
    'AUTHORIZATION_HEADER',
    'DEFAULT_CONTENT_TYPE',
    'DEFAULT_MAX_BODY_HASH_SIZE',
    'ClientCredential',
    'SignableRequest',
    'SigningConfig',
    'SigningContext',
    'EdgeGridSignatureResult',
    'SigningError',
    'SigningErrorCodes',
    'HttpMethod',
    # Configuration
    'SigningConfigBuilder',
    'create_signing_config',
    'signing_config_from_dict',
    'validate_signing_config',
    # Utilities
    'generate_nonce',
    'generate_timestamp',
    'create_signing_context',
    'format_edgegrid_timestamp',
    'validate_nonce',
    'normalize_header_value',
    'parse_url',
    # HTTP Integration
    'EdgeGridAuth',
    'sign_prepared_request',
    'create_signing_session',
]
