"""
Cipher suite: a validated (key, algorithm) pair.

Keys may be given as raw bytes, as a raw string, or as a string with the
``base64:`` prefix produced by ``encode_key``.
"""

import base64
import binascii
import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Union

from ..errors import ConfigurationError
from ..utils.config import BASE64_KEY_PREFIX


class CipherAlgorithm(str, Enum):
    AES_128_CBC = "AES-128-CBC"
    AES_256_CBC = "AES-256-CBC"

    @property
    def key_size(self) -> int:
        """Key length in bytes."""
        return 16 if self is CipherAlgorithm.AES_128_CBC else 32

    @classmethod
    def parse(cls, value: Union[str, "CipherAlgorithm"]) -> "CipherAlgorithm":
        if isinstance(value, CipherAlgorithm):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ConfigurationError(
                "The only supported ciphers are AES-128-CBC and AES-256-CBC",
                cipher=str(value),
            )


KeyInput = Union[bytes, bytearray, memoryview, str]


def decode_key(key: KeyInput) -> bytes:
    """Turn a configured key into raw key bytes."""
    if isinstance(key, bytes):
        return key
    if isinstance(key, (bytearray, memoryview)):
        return bytes(key)
    if not isinstance(key, str):
        raise ConfigurationError(f"key must be str or bytes, got {type(key).__name__}")
    if key.startswith(BASE64_KEY_PREFIX):
        try:
            return base64.b64decode(key[len(BASE64_KEY_PREFIX):], validate=True)
        except (binascii.Error, ValueError):
            raise ConfigurationError("key has a base64: prefix but is not valid base64")
    return key.encode("utf-8")


def encode_key(key: bytes) -> str:
    """Render raw key bytes in the ``base64:`` form accepted by ``decode_key``."""
    return BASE64_KEY_PREFIX + base64.b64encode(key).decode("ascii")


def generate_key(algorithm: Union[str, CipherAlgorithm] = CipherAlgorithm.AES_256_CBC) -> bytes:
    """Generate a random key of the right length for ``algorithm``."""
    return secrets.token_bytes(CipherAlgorithm.parse(algorithm).key_size)


@dataclass(frozen=True)
class CipherSuite:
    key: bytes
    algorithm: CipherAlgorithm

    def __post_init__(self):
        if not isinstance(self.key, bytes):
            raise ConfigurationError("key must be bytes, use CipherSuite.create for strings")
        algorithm = CipherAlgorithm.parse(self.algorithm)
        # frozen dataclass: normalise a string algorithm in place
        object.__setattr__(self, "algorithm", algorithm)
        if len(self.key) != algorithm.key_size:
            raise ConfigurationError(
                "The only supported ciphers are AES-128-CBC and AES-256-CBC with the correct key lengths",
                cipher=algorithm.value,
                key_length=len(self.key),
            )

    def __repr__(self) -> str:
        return f"CipherSuite(algorithm={self.algorithm.value!r}, key=<{len(self.key)} bytes>)"

    @classmethod
    def create(
        cls,
        key: KeyInput,
        algorithm: Union[str, CipherAlgorithm] = CipherAlgorithm.AES_128_CBC,
    ) -> "CipherSuite":
        """Build a suite from a raw or base64-prefixed key."""
        return cls(decode_key(key), CipherAlgorithm.parse(algorithm))

    @staticmethod
    def supported(key: KeyInput, algorithm: Union[str, CipherAlgorithm]) -> bool:
        """Determine if the given key and cipher combination is valid."""
        try:
            CipherSuite.create(key, algorithm)
        except ConfigurationError:
            return False
        return True
