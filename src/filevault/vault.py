"""
FileVault facade.

Encrypts and decrypts files on a configured disk with the configured key and
cipher. Every operation builds and validates its cipher suite before any
file is touched.

Usage:
    from filevault import Vault

    vault = Vault()
    vault.encrypt("report.pdf")          # writes report.pdf.enc, deletes report.pdf
    vault.decrypt_copy("report.pdf.enc") # writes report.pdf, keeps the .enc
"""

import sys
from typing import BinaryIO, Optional, Union

from .crypto.chunking import Encrypter
from .crypto.suite import CipherAlgorithm, CipherSuite, generate_key
from .errors import ConfigurationError
from .storage import DiskManager, StorageBackend
from .utils.config import VaultSettings
from .utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

ENCRYPTED_SUFFIX = ".enc"
DECRYPTED_SUFFIX = ".dec"


class Vault:
    def __init__(self, settings: Optional[VaultSettings] = None, disks: Optional[DiskManager] = None):
        self.settings = settings or VaultSettings()
        configure_logging(self.settings)
        self.disks = disks or DiskManager(self.settings.DISKS)
        self._disk = self.settings.DISK
        self._key: Optional[Union[str, bytes]] = self.settings.KEY
        self._cipher = self.settings.CIPHER

    def disk(self, name: str) -> "Vault":
        """Set the disk where the files are located."""
        self._disk = name
        return self

    def key(self, key: Union[str, bytes]) -> "Vault":
        """Set the encryption key (raw, bytes or 'base64:' prefixed)."""
        self._key = key
        return self

    def generate_key(self) -> bytes:
        """Create a new random key sized for the configured cipher."""
        algorithm = (
            CipherAlgorithm.AES_128_CBC
            if self._cipher.upper() == CipherAlgorithm.AES_128_CBC.value
            else CipherAlgorithm.AES_256_CBC
        )
        return generate_key(algorithm)

    def _encrypter(self) -> Encrypter:
        if not self._key:
            raise ConfigurationError("no key configured (set FILE_VAULT_KEY or APP_KEY)")
        return Encrypter(CipherSuite.create(self._key, self._cipher))

    def _storage(self) -> StorageBackend:
        return self.disks.disk(self._disk)

    def encrypt(self, source: str, destination: Optional[str] = None, delete_source: bool = True) -> "Vault":
        """
        Encrypt ``source`` into ``destination`` (default ``<source>.enc``).

        Args:
            source: File name relative to the current disk
            destination: File name relative to the current disk
            delete_source: Delete the source file once encryption succeeded
        """
        encrypter = self._encrypter()
        storage = self._storage()

        if destination is None:
            destination = f"{source}{ENCRYPTED_SUFFIX}"

        chunks = encrypter.encrypt(storage.path(source), storage.path(destination))
        logger.info(f"Encrypted {source} -> {destination} on disk '{self._disk}' ({chunks} chunks)")

        if delete_source:
            storage.delete(source)
        return self

    def encrypt_copy(self, source: str, destination: Optional[str] = None) -> "Vault":
        """Encrypt ``source`` and keep it."""
        return self.encrypt(source, destination, delete_source=False)

    def decrypt(self, source: str, destination: Optional[str] = None, delete_source: bool = True) -> "Vault":
        """
        Decrypt ``source`` into ``destination``.

        The default destination drops a trailing ``.enc`` or, failing that,
        appends ``.dec``. If decryption fails the partially written
        destination is left in place for the caller to remove.
        """
        encrypter = self._encrypter()
        storage = self._storage()

        if destination is None:
            if source.endswith(ENCRYPTED_SUFFIX):
                destination = source[: -len(ENCRYPTED_SUFFIX)]
            else:
                destination = f"{source}{DECRYPTED_SUFFIX}"

        chunks = encrypter.decrypt(storage.path(source), storage.path(destination))
        logger.info(f"Decrypted {source} -> {destination} on disk '{self._disk}' ({chunks} chunks)")

        if delete_source:
            storage.delete(source)
        return self

    def decrypt_copy(self, source: str, destination: Optional[str] = None) -> "Vault":
        """Decrypt ``source`` and keep it."""
        return self.decrypt(source, destination, delete_source=False)

    def stream_decrypt(self, source: str, sink: Optional[BinaryIO] = None) -> None:
        """Decrypt ``source`` straight into ``sink`` (stdout by default)."""
        encrypter = self._encrypter()
        storage = self._storage()
        if sink is None:
            sink = sys.stdout.buffer
        encrypter.decrypt_to(storage.path(source), sink)
