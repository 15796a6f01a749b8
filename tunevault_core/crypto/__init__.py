"""
Encryption at rest for stored audio objects.
"""

from tunevault_core.crypto.engine import KEY_SIZE, NONCE_SIZE, EncryptionEngine

__all__ = ["EncryptionEngine", "KEY_SIZE", "NONCE_SIZE"]
