"""
Chunked stream cipher engine.

Files are processed in chunks so that memory use does not grow with file
size. Each chunk is an independent CBC message whose IV is the first block of
the previous chunk's ciphertext; the first chunk uses a random IV stored in
the clear as a 16 byte header.

Encrypted file layout:

    [16]      initial IV
    [<=4096]  ciphertext chunk 0
    [<=4096]  ciphertext chunk 1
    ...

Plaintext chunks are 255 blocks (4080 bytes); with PKCS#7 padding a full
chunk encrypts to 256 blocks (4096 bytes), which is the decryption read size.

There is no integrity tag. A flipped ciphertext byte garbles the block it is
in and flips the matching byte of the following block (or of the first block
of the next chunk) without being detected, unless it happens to break the
final padding.
"""

import math
import os
import secrets
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Tuple, Union

from ..errors import CipherError, FormatError, StreamIOError
from ..utils.logging import get_logger
from .primitive import BLOCK_SIZE, AesCbcCipher, BlockCipher
from .suite import CipherSuite

logger = get_logger(__name__)

# 255 blocks per plaintext chunk so a padded chunk reads back as 4 KiB
CHUNK_BLOCKS = 255
PLAIN_CHUNK_SIZE = BLOCK_SIZE * CHUNK_BLOCKS
CIPHER_CHUNK_SIZE = BLOCK_SIZE * (CHUNK_BLOCKS + 1)
HEADER_SIZE = BLOCK_SIZE
MAX_SHORT_READ_RETRIES = 8


@dataclass(frozen=True)
class ChainState:
    """IV for the next chunk."""
    iv: bytes

    @classmethod
    def random(cls) -> "ChainState":
        return cls(secrets.token_bytes(BLOCK_SIZE))

    def advance(self, ciphertext: bytes) -> "ChainState":
        """Derive the next chain IV from the ciphertext of the current chunk."""
        return ChainState(ciphertext[:BLOCK_SIZE])


def chunk_count(length: int, chunk_size: int) -> int:
    if length <= 0:
        return 0
    return math.ceil(length / chunk_size)


def encrypt_chunk(
    plaintext: bytes, chain: ChainState, suite: CipherSuite, cipher: BlockCipher
) -> Tuple[bytes, ChainState]:
    ciphertext = cipher.encrypt_block(plaintext, suite.key, chain.iv)
    return ciphertext, chain.advance(ciphertext)


def decrypt_chunk(
    ciphertext: bytes, chain: ChainState, suite: CipherSuite, cipher: BlockCipher
) -> Tuple[bytes, ChainState]:
    # chain follows the ciphertext read, never the plaintext
    plaintext = cipher.decrypt_block(ciphertext, suite.key, chain.iv)
    return plaintext, chain.advance(ciphertext)


def _remaining_length(stream: BinaryIO) -> int:
    start = stream.tell()
    end = stream.seek(0, os.SEEK_END)
    stream.seek(start)
    return end - start


def _require_seekable(stream: BinaryIO):
    seekable = getattr(stream, "seekable", None)
    if seekable is None or not seekable():
        raise StreamIOError("source stream must be seekable")


def _read_units(
    source: BinaryIO, unit_size: int, total_chunks: int, data_offset: int
) -> Iterator[Tuple[int, bytes]]:
    """
    Yield ``(index, unit)`` for each chunk read from ``source``.

    A short unit that is not the last expected chunk is a transient short
    read: seek back to the start of the chunk and read it again.
    """
    index = 0
    retries = 0
    while True:
        unit = source.read(unit_size)
        if not unit:
            return

        if len(unit) != unit_size and index + 1 < total_chunks:
            retries += 1
            if retries > MAX_SHORT_READ_RETRIES:
                raise StreamIOError(
                    f"source returned short reads for chunk {index} "
                    f"{MAX_SHORT_READ_RETRIES} times, it may have been truncated"
                )
            logger.debug(f"Short read of {len(unit)} bytes at chunk {index}, retrying")
            source.seek(data_offset + unit_size * index)
            continue

        retries = 0
        yield index, unit
        index += 1


def encrypt_stream(
    source: BinaryIO,
    sink: BinaryIO,
    suite: CipherSuite,
    cipher: Optional[BlockCipher] = None,
) -> int:
    """
    Encrypt ``source`` from its current position into ``sink``.

    Returns:
        Number of ciphertext chunks written after the header
    """
    cipher = cipher or AesCbcCipher()
    _require_seekable(source)

    try:
        data_offset = source.tell()
        total_chunks = chunk_count(_remaining_length(source), PLAIN_CHUNK_SIZE)

        chain = ChainState.random()
        sink.write(chain.iv)

        written = 0
        for _, plaintext in _read_units(source, PLAIN_CHUNK_SIZE, total_chunks, data_offset):
            ciphertext, chain = encrypt_chunk(plaintext, chain, suite, cipher)
            sink.write(ciphertext)
            written += 1

        sink.flush()
    except OSError as e:
        raise StreamIOError(f"stream failure during encryption: {e}") from e

    logger.debug(f"Encrypted {written} chunks ({suite.algorithm.value})")
    return written


def decrypt_stream(
    source: BinaryIO,
    sink: BinaryIO,
    suite: CipherSuite,
    cipher: Optional[BlockCipher] = None,
) -> int:
    """
    Decrypt ``source`` from its current position into ``sink``.

    On CipherError the chunks already written to ``sink`` stay there; callers
    must discard the destination.

    Returns:
        Number of ciphertext chunks decrypted
    """
    cipher = cipher or AesCbcCipher()
    _require_seekable(source)

    try:
        header = source.read(HEADER_SIZE)
        if len(header) < HEADER_SIZE:
            raise FormatError("truncated header")

        data_offset = source.tell()
        total_chunks = chunk_count(_remaining_length(source), CIPHER_CHUNK_SIZE)

        chain = ChainState(header)
        read = 0
        for index, ciphertext in _read_units(source, CIPHER_CHUNK_SIZE, total_chunks, data_offset):
            try:
                plaintext, chain = decrypt_chunk(ciphertext, chain, suite, cipher)
            except CipherError as e:
                e.details["chunk_index"] = index
                raise
            sink.write(plaintext)
            read += 1

        sink.flush()
    except OSError as e:
        raise StreamIOError(f"stream failure during decryption: {e}") from e

    logger.debug(f"Decrypted {read} chunks ({suite.algorithm.value})")
    return read


PathLike = Union[str, Path]


def open_for_read(path: PathLike) -> BinaryIO:
    try:
        return open(path, "rb")
    except OSError as e:
        raise StreamIOError("Cannot open file for reading", path=str(path)) from e


def open_for_write(path: PathLike) -> BinaryIO:
    try:
        return open(path, "wb")
    except OSError as e:
        raise StreamIOError("Cannot open file for writing", path=str(path)) from e


class Encrypter:
    """
    Encrypts and decrypts files on disk with one cipher suite.

    The suite is validated when it is built, so a bad key never reaches the
    file system.
    """

    def __init__(self, suite: CipherSuite, cipher: Optional[BlockCipher] = None):
        self.suite = suite
        self.cipher = cipher or AesCbcCipher()

    @classmethod
    def from_key(cls, key, algorithm="AES-128-CBC") -> "Encrypter":
        # AES-128-CBC is the historical engine default; VaultSettings.CIPHER
        # and generate_key default to AES-256-CBC and are what Vault uses.
        return cls(CipherSuite.create(key, algorithm))

    def encrypt(self, source_path: PathLike, destination_path: PathLike) -> int:
        """Encrypt ``source_path`` into ``destination_path`` (truncated)."""
        with ExitStack() as stack:
            sink = stack.enter_context(open_for_write(destination_path))
            source = stack.enter_context(open_for_read(source_path))
            return encrypt_stream(source, sink, self.suite, self.cipher)

    def decrypt(self, source_path: PathLike, destination_path: PathLike) -> int:
        """Decrypt ``source_path`` into ``destination_path`` (truncated)."""
        with ExitStack() as stack:
            sink = stack.enter_context(open_for_write(destination_path))
            source = stack.enter_context(open_for_read(source_path))
            return decrypt_stream(source, sink, self.suite, self.cipher)

    def decrypt_to(self, source_path: PathLike, sink: BinaryIO) -> int:
        """Decrypt ``source_path`` into an already open stream, e.g. stdout."""
        with open_for_read(source_path) as source:
            return decrypt_stream(source, sink, self.suite, self.cipher)
