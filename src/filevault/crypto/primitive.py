"""
Block cipher primitives used by the chunked engine.

A primitive transforms one whole chunk with an explicit IV and keeps no state
between calls. The chain IV lives in the engine.
"""

from abc import ABC, abstractmethod

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..errors import CipherError

BLOCK_SIZE = 16


class BlockCipher(ABC):
    """One-shot chunk cipher: ``(data, key, iv) -> data``."""

    @abstractmethod
    def encrypt_block(self, plaintext: bytes, key: bytes, iv: bytes) -> bytes:
        pass

    @abstractmethod
    def decrypt_block(self, ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
        """Raises CipherError when the ciphertext is rejected."""
        pass


class AesCbcCipher(BlockCipher):
    """AES-CBC with PKCS#7 padding. Key length selects AES-128 or AES-256."""

    name = "AES-CBC"

    def encrypt_block(self, plaintext: bytes, key: bytes, iv: bytes) -> bytes:
        padder = padding.PKCS7(BLOCK_SIZE * 8).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv), backend=default_backend()).encryptor()
        return encryptor.update(padded) + encryptor.finalize()

    def decrypt_block(self, ciphertext: bytes, key: bytes, iv: bytes) -> bytes:
        try:
            decryptor = Cipher(algorithms.AES(key), modes.CBC(iv), backend=default_backend()).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(BLOCK_SIZE * 8).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            # empty input, length not a multiple of the block, or bad padding
            raise CipherError("decryption failed", algorithm=self.name) from e
