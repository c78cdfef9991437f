"""
EG1-HMAC-SHA256 signature computation

The secret is never used directly on the request. A signing key is first
derived from the secret and the request timestamp; its base64 text (not the
decoded bytes) is then the HMAC key for the canonical request plus auth data.
"""

from .types import SigningError, SigningErrorCodes
from .utils import hmac_sha256_base64


class SignatureEngine:
    """
    Two-stage HMAC-SHA256 signature engine
    """

    def derive_signing_key(self, secret: str, timestamp: str) -> str:
        """
        Derive the per-timestamp signing key.

        Args:
            secret: Client secret
            timestamp: Formatted request timestamp

        Returns:
            str: Base64 signing key
        """
        return hmac_sha256_base64(secret, timestamp)

    def sign(self, secret: str, timestamp: str, canonical_request: str, auth_data: str) -> str:
        """
        Compute the request signature.

        Args:
            secret: Client secret
            timestamp: Formatted request timestamp, identical to the one in auth_data
            canonical_request: Canonical request string
            auth_data: Authentication data prefix

        Returns:
            str: Base64 signature

        Raises:
            SigningError: If the HMAC computation fails
        """
        try:
            signing_key = self.derive_signing_key(secret, timestamp)
            return hmac_sha256_base64(signing_key.encode('ascii'), canonical_request + auth_data)
        except (TypeError, ValueError) as e:
            raise SigningError(
                f"Signature computation failed: {e}",
                SigningErrorCodes.SIGNING_FAILED,
                {"original_error": str(e)}
            ) from e

    def authorization_header(self, auth_data: str, signature: str) -> str:
        """Build the complete Authorization header value."""
        return f"{auth_data}signature={signature}"
