import argparse
import sys
from typing import List, Optional

from .crypto.suite import encode_key, generate_key
from .errors import VaultError
from .utils.config import VaultSettings, get_settings
from .vault import Vault


def _vault(args, settings: VaultSettings) -> Vault:
    vault = Vault(settings)
    if args.disk:
        vault.disk(args.disk)
    if args.key:
        vault.key(args.key)
    return vault


def run_keygen(args, settings: VaultSettings):
    print(encode_key(generate_key(args.cipher or settings.CIPHER)))


def run_encrypt(args, settings: VaultSettings):
    _vault(args, settings).encrypt(args.source, args.out, delete_source=not args.keep)


def run_decrypt(args, settings: VaultSettings):
    _vault(args, settings).decrypt(args.source, args.out, delete_source=not args.keep)


def run_cat(args, settings: VaultSettings):
    _vault(args, settings).stream_decrypt(args.source)


def _add_vault_args(p: argparse.ArgumentParser):
    p.add_argument("source", help="File name relative to the disk root")
    p.add_argument("--disk", help="Disk name (default: FILE_VAULT_DISK)")
    p.add_argument("--key", help="Key, raw or base64: prefixed (default: FILE_VAULT_KEY)")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="filevault")
    subps = parser.add_subparsers(dest="cmd")

    kg = subps.add_parser("keygen", help="Print a new base64: key")
    kg.add_argument("--cipher", choices=["AES-128-CBC", "AES-256-CBC"])

    enc = subps.add_parser("encrypt", help="Encrypt a file")
    _add_vault_args(enc)
    enc.add_argument("--out", help="Destination (default: <source>.enc)")
    enc.add_argument("--keep", action="store_true", help="Keep the source file")

    dec = subps.add_parser("decrypt", help="Decrypt a file")
    _add_vault_args(dec)
    dec.add_argument("--out", help="Destination (default: source without .enc)")
    dec.add_argument("--keep", action="store_true", help="Keep the source file")

    cat = subps.add_parser("cat", help="Decrypt a file to stdout")
    _add_vault_args(cat)

    args = parser.parse_args(argv)
    commands = {
        "keygen": run_keygen,
        "encrypt": run_encrypt,
        "decrypt": run_decrypt,
        "cat": run_cat,
    }
    if args.cmd not in commands:
        parser.print_help()
        return 1

    try:
        commands[args.cmd](args, get_settings())
    except VaultError as e:
        print(f"filevault: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
