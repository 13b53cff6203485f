"""
Cipher Service for Passvault

Authenticated encryption of stored secrets:
- AES-256-GCM with a fresh 96-bit random nonce per call
- Self-describing text blobs: base64url(nonce || ciphertext || tag)
- Fail-closed decryption

Security Note:
    Never log plaintext, blobs or key material.
"""

import os
import secrets

import structlog
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .encoding import b64url_decode, b64url_encode

log = structlog.get_logger()


class CryptoError(Exception):
    """Base exception for cryptographic operations"""
    pass


class EncryptionError(CryptoError):
    """Raised when encryption fails"""
    pass


class CryptoIntegrityError(CryptoError):
    """Raised when a blob fails authentication; never carries plaintext"""
    pass


class CipherService:
    """
    Encrypts and decrypts secret strings under one long-lived key.

    The key is bound at construction and never written anywhere else.
    """

    KEY_LENGTH = 32    # AES-256
    NONCE_SIZE = 12    # 96-bit GCM nonce
    TAG_SIZE = 16      # 128-bit GCM tag
    KEY_DERIVATION_INFO = b"passvault-record-key"

    _INTEGRITY_MESSAGE = "Stored secret failed integrity verification"

    def __init__(self, key: str | bytes):
        """
        Initialize CipherService.

        Args:
            key: Either URL-safe base64 text decoding to exactly 32 bytes,
                 raw 32 bytes, or any other non-empty passphrase, which is
                 stretched to 32 bytes with HKDF-SHA256.

        Raises:
            CryptoError: If the key is empty
        """
        if not key:
            raise CryptoError("Encryption key must not be empty")
        self._aead = AESGCM(self._resolve_key(key))

    @classmethod
    def _resolve_key(cls, key: str | bytes) -> bytes:
        if isinstance(key, bytes):
            if len(key) == cls.KEY_LENGTH:
                return key
            return cls.derive_key(key)

        try:
            decoded = b64url_decode(key)
        except ValueError:
            decoded = b""
        if len(decoded) == cls.KEY_LENGTH:
            return decoded
        return cls.derive_key(key.encode("utf-8"))

    @classmethod
    def derive_key(cls, material: bytes) -> bytes:
        """
        Derive a 32-byte key from arbitrary key material using HKDF-SHA256.

        Args:
            material: Input key material

        Returns:
            32-byte derived key
        """
        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=cls.KEY_LENGTH,
            salt=None,  # same passphrase, same key
            info=cls.KEY_DERIVATION_INFO,
        )
        return hkdf.derive(material)

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a secret string.

        Args:
            plaintext: Secret to encrypt

        Returns:
            URL-safe base64 blob of nonce || ciphertext || tag

        Raises:
            EncryptionError: If the plaintext cannot be encoded
        """
        try:
            data = plaintext.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncryptionError(f"Failed to encode plaintext: {e}")

        nonce = os.urandom(self.NONCE_SIZE)
        sealed = self._aead.encrypt(nonce, data, None)
        return b64url_encode(nonce + sealed)

    def decrypt(self, blob: str) -> str:
        """
        Decrypt a blob produced by encrypt().

        Args:
            blob: URL-safe base64 text

        Returns:
            Recovered plaintext

        Raises:
            CryptoIntegrityError: On any decoding, length, tag or text failure
        """
        try:
            raw = b64url_decode(blob)
        except (ValueError, AttributeError):
            raise CryptoIntegrityError(self._INTEGRITY_MESSAGE)

        # Only the canonical spelling of the bytes is accepted
        if b64url_encode(raw) != blob.rstrip("="):
            raise CryptoIntegrityError(self._INTEGRITY_MESSAGE)

        if len(raw) < self.NONCE_SIZE + self.TAG_SIZE:
            raise CryptoIntegrityError(self._INTEGRITY_MESSAGE)

        nonce, sealed = raw[:self.NONCE_SIZE], raw[self.NONCE_SIZE:]
        try:
            data = self._aead.decrypt(nonce, sealed, None)
        except InvalidTag:
            log.warning("cipher.integrity_failure")
            raise CryptoIntegrityError(self._INTEGRITY_MESSAGE)

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            raise CryptoIntegrityError(self._INTEGRITY_MESSAGE)

    @staticmethod
    def generate_key() -> str:
        """
        Generate a new random encryption key.

        Returns:
            URL-safe base64 text of 32 random bytes, suitable for ENCRYPTION_KEY
        """
        return b64url_encode(secrets.token_bytes(CipherService.KEY_LENGTH))
