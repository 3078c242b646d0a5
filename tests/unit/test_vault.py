import io
import logging

import pytest

from conftest import make_plaintext
from filevault.crypto.suite import encode_key
from filevault.errors import CipherError, ConfigurationError, StreamIOError
from filevault.utils.config import VaultSettings
from filevault.vault import Vault


@pytest.fixture
def disk_root(tmp_path):
    root = tmp_path / "disk"
    root.mkdir()
    return root


@pytest.fixture
def vault(clean_env, disk_root, key256):
    settings = VaultSettings(_env_file=None, DISKS={"local": str(disk_root)})
    return Vault(settings).key(encode_key(key256))


class TestVaultEncrypt:
    def test_encrypt_deletes_source_by_default(self, vault, disk_root):
        (disk_root / "report.pdf").write_bytes(make_plaintext(9000))

        vault.encrypt("report.pdf")

        assert not (disk_root / "report.pdf").exists()
        assert (disk_root / "report.pdf.enc").exists()

    def test_encrypt_copy_keeps_source(self, vault, disk_root):
        (disk_root / "notes.txt").write_bytes(b"keep me")

        vault.encrypt_copy("notes.txt", "notes.locked")

        assert (disk_root / "notes.txt").read_bytes() == b"keep me"
        assert (disk_root / "notes.locked").stat().st_size == 32

    def test_roundtrip_in_subdirectory(self, vault, disk_root):
        (disk_root / "docs").mkdir()
        plaintext = make_plaintext(50_000)
        (disk_root / "docs" / "a.bin").write_bytes(plaintext)

        vault.encrypt("docs/a.bin").decrypt("docs/a.bin.enc")

        assert (disk_root / "docs" / "a.bin").read_bytes() == plaintext
        assert not (disk_root / "docs" / "a.bin.enc").exists()

    def test_failed_encrypt_keeps_source(self, vault, disk_root):
        (disk_root / "a.txt").write_bytes(b"abc")
        with pytest.raises(StreamIOError):
            vault.encrypt("a.txt", "missing-dir/a.txt.enc")
        assert (disk_root / "a.txt").exists()


class TestVaultDecrypt:
    def test_default_destination_strips_enc(self, vault, disk_root):
        (disk_root / "photo.jpg").write_bytes(b"jpeg bytes")
        vault.encrypt("photo.jpg")

        vault.decrypt_copy("photo.jpg.enc")

        assert (disk_root / "photo.jpg").read_bytes() == b"jpeg bytes"
        assert (disk_root / "photo.jpg.enc").exists()

    def test_default_destination_without_enc_suffix(self, vault, disk_root):
        (disk_root / "data").write_bytes(b"payload")
        vault.encrypt("data", "data.locked")

        vault.decrypt("data.locked")

        assert (disk_root / "data.locked.dec").read_bytes() == b"payload"
        assert not (disk_root / "data.locked").exists()

    def test_failed_decrypt_keeps_source(self, vault, disk_root):
        (disk_root / "x.enc").write_bytes(b"\x00" * 16 + b"\x01" * 20)
        with pytest.raises(CipherError):
            vault.decrypt("x.enc")
        assert (disk_root / "x.enc").exists()

    def test_stream_decrypt(self, vault, disk_root):
        (disk_root / "a.txt").write_bytes(b"to stdout")
        vault.encrypt_copy("a.txt")

        sink = io.BytesIO()
        vault.stream_decrypt("a.txt.enc", sink)
        assert sink.getvalue() == b"to stdout"


class TestVaultConfiguration:
    def test_invalid_key_fails_before_io(self, vault, disk_root):
        (disk_root / "a.txt").write_bytes(b"abc")

        with pytest.raises(ConfigurationError):
            vault.key(b"\x00" * 15).encrypt("a.txt")

        assert not (disk_root / "a.txt.enc").exists()
        assert (disk_root / "a.txt").exists()

    def test_missing_key(self, clean_env, disk_root):
        vault = Vault(VaultSettings(_env_file=None, DISKS={"local": str(disk_root)}))
        (disk_root / "a.txt").write_bytes(b"abc")
        with pytest.raises(ConfigurationError):
            vault.encrypt("a.txt")

    def test_unknown_disk(self, vault):
        with pytest.raises(ConfigurationError):
            vault.disk("s3").encrypt("a.txt")

    def test_switch_disk(self, clean_env, tmp_path, key128):
        first = tmp_path / "one"
        second = tmp_path / "two"
        first.mkdir()
        second.mkdir()
        settings = VaultSettings(
            _env_file=None,
            CIPHER="AES-128-CBC",
            DISKS={"one": str(first), "two": str(second)},
            DISK="one",
        )
        (second / "b.txt").write_bytes(b"on disk two")

        Vault(settings).key(key128).disk("two").encrypt_copy("b.txt")

        assert (second / "b.txt.enc").exists()
        assert not (first / "b.txt.enc").exists()

    def test_path_traversal_rejected(self, vault):
        with pytest.raises(StreamIOError):
            vault.encrypt_copy("../outside.txt")

    def test_two_vaults_are_independent(self, clean_env, disk_root, key128, key256):
        a = Vault(VaultSettings(_env_file=None, DISKS={"local": str(disk_root)})).key(key256)
        b = Vault(VaultSettings(_env_file=None, DISKS={"local": str(disk_root)}, CIPHER="AES-128-CBC")).key(key128)
        (disk_root / "f").write_bytes(make_plaintext(5000))

        a.encrypt_copy("f", "f.a")
        b.encrypt_copy("f", "f.b")
        a.decrypt_copy("f.a", "f.a.out")
        b.decrypt_copy("f.b", "f.b.out")

        assert (disk_root / "f.a.out").read_bytes() == make_plaintext(5000)
        assert (disk_root / "f.b.out").read_bytes() == make_plaintext(5000)

    @pytest.mark.parametrize("cipher,length", [("AES-128-CBC", 16), ("AES-256-CBC", 32)])
    def test_generate_key(self, clean_env, cipher, length):
        vault = Vault(VaultSettings(_env_file=None, CIPHER=cipher))
        assert len(vault.generate_key()) == length

    def test_settings_set_log_level(self, clean_env, disk_root):
        Vault(VaultSettings(_env_file=None, LOG_LEVEL="DEBUG", DISKS={"local": str(disk_root)}))
        assert logging.getLogger("filevault.crypto.chunking").getEffectiveLevel() == logging.DEBUG

        Vault(VaultSettings(_env_file=None, LOG_LEVEL="ERROR", DISKS={"local": str(disk_root)}))
        assert logging.getLogger("filevault.vault").getEffectiveLevel() == logging.ERROR
