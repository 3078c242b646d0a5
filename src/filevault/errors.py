"""
FileVault Error Taxonomy.

All FileVault errors include:
- Machine-readable error codes
- Structured details (never key material)

Error Code Naming Convention:
- FV_<CATEGORY>_<SPECIFIC>
- Categories: CONFIG, IO, FORMAT, CIPHER

Security:
- NEVER include keys or plaintext in error messages
- Errors should be safe to log
"""

from typing import Any, Dict, Optional


class VaultError(Exception):
    """Base exception for all FileVault errors.

    All FileVault errors include:
    - code: Machine-readable error code (e.g., FV_CIPHER_FAILED)
    - message: Human-readable description
    - details: Structured metadata (NEVER include key material)
    """

    def __init__(
        self,
        message: str,
        code: str = "FV_INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# Configuration Errors (FV_CONFIG_*)
# =============================================================================


class ConfigurationError(VaultError):
    """Raised when a key/cipher combination or disk setting is unusable.

    Always raised before any file is opened.
    """

    def __init__(
        self,
        reason: str,
        cipher: Optional[str] = None,
        key_length: Optional[int] = None,
    ):
        details: Dict[str, Any] = {}
        if cipher:
            details["cipher"] = cipher
        if key_length is not None:
            details["key_length"] = key_length
        super().__init__(
            message=f"Invalid configuration: {reason}",
            code="FV_CONFIG_INVALID",
            details=details,
        )


# =============================================================================
# Stream Errors (FV_IO_*, FV_FORMAT_*)
# =============================================================================


class StreamIOError(VaultError):
    """Raised when a source cannot be read or a destination cannot be written."""

    def __init__(
        self,
        reason: str,
        path: Optional[str] = None,
        code: str = "FV_IO_ERROR",
    ):
        super().__init__(
            message=reason,
            code=code,
            details={"path": path} if path else {},
        )


class FormatError(StreamIOError):
    """Raised when an encrypted stream is structurally invalid (e.g. truncated header)."""

    def __init__(self, reason: str, path: Optional[str] = None):
        super().__init__(reason, path=path, code="FV_FORMAT_ERROR")


# =============================================================================
# Cipher Errors (FV_CIPHER_*)
# =============================================================================


class CipherError(VaultError):
    """Raised when the block cipher rejects a ciphertext chunk.

    Typical causes are bad padding after corruption, a wrong key, or a chunk
    whose length is not a multiple of the block size.
    """

    def __init__(
        self,
        reason: str = "decryption failed",
        algorithm: Optional[str] = None,
        chunk_index: Optional[int] = None,
    ):
        details: Dict[str, Any] = {}
        if algorithm:
            details["algorithm"] = algorithm
        if chunk_index is not None:
            details["chunk_index"] = chunk_index
        super().__init__(
            message=reason,
            code="FV_CIPHER_FAILED",
            details=details,
        )


# =============================================================================
# Error Code Registry
# =============================================================================

ERROR_CODES = {
    "FV_CONFIG_INVALID": "Unsupported key/cipher combination",
    "FV_IO_ERROR": "Source or destination stream failure",
    "FV_FORMAT_ERROR": "Encrypted stream is malformed",
    "FV_CIPHER_FAILED": "Block cipher rejected the ciphertext",
    "FV_INTERNAL_ERROR": "Internal error",
}


def validate_error_code(code: str) -> bool:
    """Validate that an error code is registered."""
    return code in ERROR_CODES


__all__ = [
    "VaultError",
    "ConfigurationError",
    "StreamIOError",
    "FormatError",
    "CipherError",
    "ERROR_CODES",
    "validate_error_code",
]
