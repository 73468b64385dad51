"""
Use case for authenticating WebSocket connections.
"""

from typing import Optional

from crieur.domain.auth import TokenPayload
from crieur.domain.exceptions import AuthenticationError
from crieur.infrastructure.auth import JWTVerifier


class AuthenticateWebSocketUseCase:
    """
    Use case for authenticating WebSocket connections.

    Verifies the JWT token presented at connect time.
    """

    def __init__(self, jwt_verifier: JWTVerifier):
        """
        Initialize use case.

        Args:
            jwt_verifier: JWT token verifier
        """
        self.jwt_verifier = jwt_verifier

    def execute(self, token: Optional[str]) -> TokenPayload:
        """
        Authenticate WebSocket connection.

        Args:
            token: JWT token from the query string

        Returns:
            TokenPayload carrying the authenticated username

        Raises:
            AuthenticationError: If no token is given
            TokenExpiredError: If token is expired
            TokenInvalidError: If token is invalid
        """
        if not token:
            raise AuthenticationError("Authentication token required")

        return self.jwt_verifier.verify_token(token)
