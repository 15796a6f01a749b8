"""
Symmetric encryption of object payloads.

Every encrypted object gets its own random AES-256 key and 128-bit nonce.
The key material is returned as an EncryptionEnvelope to be stored with the
object's metadata; the engine itself keeps no state between calls.

Two modes are supported, chosen per deployment:

- AES-256-GCM: authenticated. Any modification of the ciphertext is
  detected on decryption.
- AES-256-CBC with PKCS7 padding: confidentiality only. There is no
  integrity tag, so a modified ciphertext usually decrypts to garbage
  instead of failing. Only malformed padding is reported as an
  authentication failure.
"""

from __future__ import annotations

import base64
import binascii
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from loguru import logger

from tunevault_core.config import settings
from tunevault_core.domain.exceptions import (
    AuthenticationFailedError,
    InvalidKeyOrNonceLengthError,
)
from tunevault_core.domain.storage import EncryptionAlgorithm, EncryptionEnvelope

# AES-256 key size (32 bytes)
KEY_SIZE = 32
# Nonce / IV size (16 bytes) for both modes
NONCE_SIZE = 16
_AES_BLOCK_BITS = 128


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _b64decode(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidKeyOrNonceLengthError(
            "Envelope key material is not valid base64", cause=e
        ) from e


class EncryptionEngine:
    """Generates keys and nonces and (de)crypts byte payloads.

    Usage:
        engine = EncryptionEngine()
        ciphertext, envelope = engine.seal(b"audio bytes")
        plaintext = engine.unseal(ciphertext, envelope)
    """

    def __init__(self, algorithm: EncryptionAlgorithm | str | None = None):
        """
        Initialize the engine.

        Args:
            algorithm: Algorithm used for new encryptions. Defaults to
                settings.ENCRYPTION_ALGORITHM.
        """
        self.algorithm = EncryptionAlgorithm(algorithm or settings.ENCRYPTION_ALGORITHM)
        if self.algorithm is EncryptionAlgorithm.AES_256_CBC:
            logger.warning("Encryption engine using AES-256-CBC: stored objects carry no integrity tag")

    @staticmethod
    def generate_key() -> bytes:
        """Generate a random 256-bit key."""
        return os.urandom(KEY_SIZE)

    @staticmethod
    def generate_nonce() -> bytes:
        """Generate a random 128-bit nonce / IV."""
        return os.urandom(NONCE_SIZE)

    def encrypt(
        self,
        plaintext: bytes,
        key: bytes,
        nonce: bytes,
        algorithm: EncryptionAlgorithm | None = None,
    ) -> bytes:
        """
        Encrypt a payload. Deterministic for identical inputs.

        Args:
            plaintext: Bytes to encrypt.
            key: 32-byte key.
            nonce: 16-byte nonce (GCM) or IV (CBC).
            algorithm: Overrides the engine's algorithm.

        Returns:
            Ciphertext. For GCM the 16-byte tag is appended.
        """
        self._check_lengths(key, nonce)
        algorithm = algorithm or self.algorithm

        if algorithm is EncryptionAlgorithm.AES_256_GCM:
            return AESGCM(key).encrypt(nonce, plaintext, None)

        padder = padding.PKCS7(_AES_BLOCK_BITS).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(nonce)).encryptor()
        return encryptor.update(padded) + encryptor.finalize()

    def decrypt(
        self,
        ciphertext: bytes,
        key: bytes,
        nonce: bytes,
        algorithm: EncryptionAlgorithm | None = None,
    ) -> bytes:
        """
        Decrypt a payload produced by ``encrypt``.

        Raises:
            InvalidKeyOrNonceLengthError: Key or nonce has the wrong size.
            AuthenticationFailedError: The ciphertext was modified or corrupted
                (GCM), or its padding is invalid (CBC).
        """
        self._check_lengths(key, nonce)
        algorithm = algorithm or self.algorithm

        if algorithm is EncryptionAlgorithm.AES_256_GCM:
            try:
                return AESGCM(key).decrypt(nonce, ciphertext, None)
            except InvalidTag as e:
                raise AuthenticationFailedError(cause=e) from e

        if not ciphertext or len(ciphertext) % (_AES_BLOCK_BITS // 8):
            raise AuthenticationFailedError(message_debug="CBC ciphertext is not block aligned")

        decryptor = Cipher(algorithms.AES(key), modes.CBC(nonce)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(_AES_BLOCK_BITS).unpadder()
        try:
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise AuthenticationFailedError(message_debug="Invalid CBC padding", cause=e) from e

    def seal(self, plaintext: bytes) -> tuple[bytes, EncryptionEnvelope]:
        """Encrypt with a fresh key and nonce and describe them in an envelope."""
        key = self.generate_key()
        nonce = self.generate_nonce()
        ciphertext = self.encrypt(plaintext, key, nonce)
        envelope = EncryptionEnvelope(
            algorithm=self.algorithm,
            key=_b64encode(key),
            nonce=_b64encode(nonce),
        )
        return ciphertext, envelope

    def unseal(self, ciphertext: bytes, envelope: EncryptionEnvelope) -> bytes:
        """Decrypt using the key material and algorithm recorded in an envelope."""
        return self.decrypt(
            ciphertext,
            _b64decode(envelope.key),
            _b64decode(envelope.nonce),
            algorithm=envelope.algorithm,
        )

    @staticmethod
    def _check_lengths(key: bytes, nonce: bytes) -> None:
        if len(key) != KEY_SIZE or len(nonce) != NONCE_SIZE:
            raise InvalidKeyOrNonceLengthError(
                message_debug=f"key={len(key)} bytes nonce={len(nonce)} bytes"
            )
