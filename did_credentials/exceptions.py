"""
Exceptions for the did-credentials SDK.
"""
from typing import Any, Optional


class CredentialsError(Exception):
    """Base exception for all did-credentials errors."""
    pass


class ConfigurationError(CredentialsError, ValueError):
    """Raised when the identity is missing or configured inconsistently."""
    pass


class ValidationError(CredentialsError, ValueError):
    """Raised when request or credential parameters fail validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class CorrelationError(CredentialsError):
    """Raised when a response cannot be matched to the challenge that prompted it."""
    pass


class AudienceMismatchError(CorrelationError):
    """Raised when a JWT is addressed to a different DID."""

    def __init__(self, aud: Any, did: Optional[str]):
        self.aud = aud
        self.did = did
        super().__init__(f"JWT audience does not match your DID: aud: {aud} !== yours: {did}")


class JWTVerificationError(CredentialsError):
    """Raised when a JWT is malformed, expired or carries an invalid signature."""
    pass


class ResolutionError(CredentialsError):
    """Raised when a DID document cannot be resolved."""

    def __init__(self, message: str, did: Optional[str] = None):
        self.did = did
        super().__init__(message)
