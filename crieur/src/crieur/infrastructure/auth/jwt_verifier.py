"""
JWT verification infrastructure for Crieur.

Handles JWT token validation for WebSocket connections.
"""

import jwt
from pydantic import ValidationError

from crieur.domain.auth import TokenPayload
from crieur.domain.exceptions import TokenExpiredError, TokenInvalidError


class JWTVerifier:
    """
    JWT token verifier.

    Verifies JWT tokens presented by WebSocket clients. The token's
    username claim is the identity the connection acts as.

    Attributes:
        secret: JWT secret key for verification
        algorithm: JWT algorithm (default: HS256)
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        """
        Initialize JWT verifier.

        Args:
            secret: JWT secret key
            algorithm: JWT algorithm (default: HS256)
        """
        self.secret = secret
        self.algorithm = algorithm

    def verify_token(self, token: str) -> TokenPayload:
        """
        Verify JWT token and return payload.

        Args:
            token: JWT token string

        Returns:
            Validated TokenPayload

        Raises:
            TokenExpiredError: If token is expired
            TokenInvalidError: If token is malformed, badly signed or
                missing required claims
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token expired")
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"Invalid token: {str(e)}")

        try:
            return TokenPayload(**payload)
        except ValidationError as e:
            raise TokenInvalidError(
                f"Invalid token payload: {e.error_count()} invalid claims"
            )
