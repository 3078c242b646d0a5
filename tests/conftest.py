"""
Pytest configuration and fixtures.

This file ensures proper path setup for imports.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from filevault.crypto.suite import CipherSuite  # noqa: E402


def make_plaintext(length: int) -> bytes:
    """Deterministic, non-repeating-per-block test data."""
    return bytes((i * 7 + i // 251) % 256 for i in range(length))


@pytest.fixture
def key128() -> bytes:
    return bytes(range(16))


@pytest.fixture
def key256() -> bytes:
    return bytes(range(32, 64))


@pytest.fixture(params=["AES-128-CBC", "AES-256-CBC"])
def suite(request, key128, key256) -> CipherSuite:
    key = key128 if request.param == "AES-128-CBC" else key256
    return CipherSuite.create(key, request.param)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove FileVault variables that would leak into settings."""
    for var in (
        "FILE_VAULT_KEY",
        "APP_KEY",
        "FILE_VAULT_CIPHER",
        "FILE_VAULT_DISK",
        "FILE_VAULT_DISKS",
        "FILE_VAULT_ENVIRONMENT",
    ):
        monkeypatch.delenv(var, raising=False)
    yield monkeypatch
