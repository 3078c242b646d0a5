"""
FileVault: chunked AES-CBC encryption for large files.

- Streams files in 4 KiB ciphertext chunks with bounded memory
- Per-chunk IV chained from the previous chunk's ciphertext
- AES-128-CBC and AES-256-CBC, raw or base64: keys
- Disk-relative vault facade and a small CLI

No authentication tag is stored: tampering is not detected.
"""

__version__ = "1.0.0"

from .crypto.chunking import Encrypter, decrypt_stream, encrypt_stream
from .crypto.suite import CipherAlgorithm, CipherSuite, encode_key, generate_key
from .errors import CipherError, ConfigurationError, FormatError, StreamIOError, VaultError
from .utils.config import VaultSettings
from .vault import Vault

__all__ = [
    "__version__",
    "Encrypter",
    "encrypt_stream",
    "decrypt_stream",
    "CipherAlgorithm",
    "CipherSuite",
    "encode_key",
    "generate_key",
    "VaultError",
    "ConfigurationError",
    "StreamIOError",
    "FormatError",
    "CipherError",
    "VaultSettings",
    "Vault",
]
