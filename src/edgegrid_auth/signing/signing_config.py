"""
Configuration management for request signing

This module provides configuration management for EdgeGrid V1 signing,
including a configuration builder, factory functions and validation.
"""

from typing import Any, List, Mapping, Optional, Sequence

from .types import (
    DEFAULT_MAX_BODY_HASH_SIZE,
    SigningConfig,
    SigningErrorCodes,
)
from ..exceptions import ValidationError

_UNSET = object()


class SigningConfigBuilder:
    """
    Fluent builder for signing configuration
    """

    def __init__(self):
        self._headers: List[str] = []
        self._max_body_hash_size: Optional[int] = DEFAULT_MAX_BODY_HASH_SIZE

    def with_header(self, name: str) -> 'SigningConfigBuilder':
        """Append a header to include in the signature."""
        self._headers.append(name)
        return self

    def with_headers(self, names: Sequence[str]) -> 'SigningConfigBuilder':
        """Append several headers, keeping their order."""
        self._headers.extend(names)
        return self

    def with_max_body_hash_size(self, size: Optional[int]) -> 'SigningConfigBuilder':
        """Set the maximum number of body bytes to hash."""
        self._max_body_hash_size = size
        return self

    def unlimited_body_hash(self) -> 'SigningConfigBuilder':
        """Hash the whole body regardless of its size."""
        self._max_body_hash_size = None
        return self

    def build(self) -> SigningConfig:
        """
        Build the signing configuration.

        Returns:
            SigningConfig: Validated configuration

        Raises:
            ValidationError: If the configuration is invalid
        """
        config = SigningConfig(
            headers_to_include=tuple(self._headers),
            max_body_hash_size=self._max_body_hash_size
        )
        validate_signing_config(config)
        return config


def create_signing_config(
    headers: Optional[Sequence[str]] = None,
    max_body_hash_size: Optional[int] = DEFAULT_MAX_BODY_HASH_SIZE
) -> SigningConfig:
    """
    Create a signing configuration.

    Args:
        headers: Ordered header names to include in the signature
        max_body_hash_size: Maximum body bytes to hash (None = unlimited)

    Returns:
        SigningConfig: Validated configuration
    """
    return (
        SigningConfigBuilder()
        .with_headers(headers or [])
        .with_max_body_hash_size(max_body_hash_size)
        .build()
    )


def signing_config_from_dict(data: Mapping[str, Any]) -> SigningConfig:
    """
    Create a signing configuration from a mapping, e.g. parsed JSON.

    Recognized keys are ``headers_to_include`` and ``max_body_hash_size``;
    an explicit null size means unlimited.

    Raises:
        ValidationError: If the mapping contains unknown keys or invalid values
    """
    unknown = set(data) - {'headers_to_include', 'max_body_hash_size'}
    if unknown:
        raise ValidationError(
            f"Unknown signing configuration keys: {', '.join(sorted(unknown))}",
            SigningErrorCodes.INVALID_CONFIG,
            {"unknown_keys": sorted(unknown)}
        )

    size = data.get('max_body_hash_size', _UNSET)
    return create_signing_config(
        headers=data.get('headers_to_include') or [],
        max_body_hash_size=DEFAULT_MAX_BODY_HASH_SIZE if size is _UNSET else size
    )


def validate_signing_config(config: SigningConfig) -> None:
    """
    Validate signing configuration.

    Args:
        config: Configuration to validate

    Raises:
        ValidationError: If configuration is invalid
    """
    if not isinstance(config, SigningConfig):
        raise ValidationError(
            "Config must be a SigningConfig instance",
            SigningErrorCodes.INVALID_CONFIG,
            {"config_type": str(type(config))}
        )

    lowered = [h.lower() for h in config.headers_to_include]
    duplicates = sorted({h for h in lowered if lowered.count(h) > 1})
    if duplicates:
        raise ValidationError(
            f"Duplicate headers in signing configuration: {', '.join(duplicates)}",
            SigningErrorCodes.INVALID_CONFIG,
            {"duplicate_headers": duplicates}
        )
