"""
did-credentials: DID-based disclosure requests and verifiable credentials.
"""
from .credentials import Credentials
from .exceptions import (
    CredentialsError,
    ConfigurationError,
    ValidationError,
    CorrelationError,
    AudienceMismatchError,
    JWTVerificationError,
    ResolutionError,
)
from .gateway import JWTGateway, VerifiedJWT
from .models import AccountType, Profile, RequestType
from .resolver import Resolver, default_resolver
from .signer import SignatureParts, Signer, SimpleSigner
from .version import __version__

__all__ = [
    "Credentials",
    "CredentialsError",
    "ConfigurationError",
    "ValidationError",
    "CorrelationError",
    "AudienceMismatchError",
    "JWTVerificationError",
    "ResolutionError",
    "JWTGateway",
    "VerifiedJWT",
    "AccountType",
    "Profile",
    "RequestType",
    "Resolver",
    "default_resolver",
    "SignatureParts",
    "Signer",
    "SimpleSigner",
    "__version__",
]
