"""
Authentication domain models for Crieur.
"""

from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    """
    JWT token payload structure.

    Attributes:
        username: Identity asserted by the token issuer
        exp: Token expiration timestamp (Unix epoch)
        iat: Token issued at timestamp (Unix epoch)
    """

    username: str = Field(..., min_length=1, description="Authenticated username")
    exp: int = Field(..., description="Expiration time (Unix timestamp)")
    iat: int = Field(..., description="Issued at time (Unix timestamp)")
