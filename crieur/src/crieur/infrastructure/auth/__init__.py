"""
Authentication infrastructure for Crieur.
"""
from crieur.infrastructure.auth.jwt_verifier import JWTVerifier

__all__ = ["JWTVerifier"]
