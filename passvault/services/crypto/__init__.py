"""
Passvault Security Services Module

Provides the cryptographic core of the vault:
- Signed, stateless session tokens
- Authenticated encryption of stored secrets
- Random password generation under a character-class policy
"""

from .cipher_service import CipherService, CryptoError, CryptoIntegrityError, EncryptionError
from .password_generator import ConfigurationError, PasswordGenerator, PasswordPolicy
from .token_service import AuthenticationError, TokenService
from .token_models import (
    TokenPayload,
    LoginRequest,
    LoginResponse
)

__all__ = [
    "CipherService",
    "CryptoError",
    "CryptoIntegrityError",
    "EncryptionError",
    "PasswordGenerator",
    "PasswordPolicy",
    "ConfigurationError",
    "TokenService",
    "AuthenticationError",
    "TokenPayload",
    "LoginRequest",
    "LoginResponse",
]
