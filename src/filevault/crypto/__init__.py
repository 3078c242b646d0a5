"""
FileVault cryptography layer: cipher suites, the AES-CBC primitive and the
chunked stream engine.
"""

from .chunking import (
    CIPHER_CHUNK_SIZE,
    HEADER_SIZE,
    PLAIN_CHUNK_SIZE,
    ChainState,
    Encrypter,
    decrypt_stream,
    encrypt_stream,
)
from .primitive import AesCbcCipher, BlockCipher
from .suite import CipherAlgorithm, CipherSuite, decode_key, encode_key, generate_key

__all__ = [
    # Engine
    "CIPHER_CHUNK_SIZE",
    "HEADER_SIZE",
    "PLAIN_CHUNK_SIZE",
    "ChainState",
    "Encrypter",
    "encrypt_stream",
    "decrypt_stream",
    # Primitive
    "AesCbcCipher",
    "BlockCipher",
    # Suite
    "CipherAlgorithm",
    "CipherSuite",
    "decode_key",
    "encode_key",
    "generate_key",
]
