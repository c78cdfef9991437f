"""
Authentication data prefix for the EdgeGrid Authorization header
"""

from .types import AUTH_SCHEME, ClientCredential, SigningContext


class AuthDataBuilder:
    """Builds the ``EG1-HMAC-SHA256 ...;`` prefix of the Authorization header."""

    def build(self, credential: ClientCredential, context: SigningContext) -> str:
        """
        Build the authentication data prefix.

        Args:
            credential: Client credential supplying the tokens
            context: Signing context supplying timestamp and nonce

        Returns:
            str: Auth data, terminated by ';'
        """
        return (
            f"{AUTH_SCHEME} "
            f"client_token={credential.client_token};"
            f"access_token={credential.access_token};"
            f"timestamp={context.timestamp_string};"
            f"nonce={context.nonce};"
        )


def build_auth_data(credential: ClientCredential, context: SigningContext) -> str:
    return AuthDataBuilder().build(credential, context)
