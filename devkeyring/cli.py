"""

Dev Keyring CLI

Thin wrapper around the devkeyring library:
- List the well-known test accounts
- Inspect an account or any secret URI
- Sign and verify messages as a test account

Test keys only. Every secret printed here is public knowledge.


"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from .core import DerivationError
from .keyring import Keyring
from .schemes import DEFAULT_SCHEME, KeyDerivation, available_schemes, get_scheme

logger = logging.getLogger(__name__)

SCHEME_ENV = "DEVKEYRING_SCHEME"


def _scheme(args: argparse.Namespace) -> KeyDerivation:
    # --scheme wins over the environment
    name = args.scheme or os.environ.get(SCHEME_ENV) or DEFAULT_SCHEME
    try:
        scheme = get_scheme(name)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)
    logger.debug("using %s scheme", scheme.name)
    return scheme


def _account(name: str) -> Keyring:
    try:
        return Keyring.from_name(name)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)


def cmd_list(args: argparse.Namespace) -> None:
    scheme = _scheme(args)

    if args.json:
        accounts = [
            {
                "name": str(account),
                "seed": account.to_seed(),
                "public_hex": account.public(scheme).hex(),
            }
            for account in Keyring.iter()
        ]
        print(json.dumps({"scheme": scheme.name, "accounts": accounts}, indent=2))
        return

    for account in Keyring.iter():
        print(f"{str(account):<8} {account.to_seed():<10} {account.public(scheme).hex()}")


def cmd_inspect(args: argparse.Namespace) -> None:
    scheme = _scheme(args)
    uri = args.uri

    # Bare labels such as "alice" refer to the test accounts.
    if "/" not in uri:
        try:
            uri = Keyring.from_name(uri).to_seed()
        except ValueError:
            pass

    try:
        pair = scheme.derive_from_string(uri, args.password)
    except DerivationError as exc:
        print(f"Could not derive key: {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"=== {scheme.name} key ===")
    print(f"Secret URI: {uri}")
    print(f"Public key (hex): {pair.public.hex()}")
    if args.show_secret:
        print(f"Secret seed (hex): {pair.to_raw_vec().hex()}")


def cmd_sign(args: argparse.Namespace) -> None:
    scheme = _scheme(args)
    account = _account(args.account)
    signature = account.sign(args.message.encode("utf-8"), scheme)
    print(signature.hex())


def cmd_verify(args: argparse.Namespace) -> None:
    scheme = _scheme(args)
    account = _account(args.account)

    try:
        signature = bytes.fromhex(args.signature_hex)
    except ValueError:
        print("Signature is not valid hex.", file=sys.stderr)
        sys.exit(1)

    if scheme.verify(signature, args.message.encode("utf-8"), account.public(scheme)):
        print("VALID signature.")
        print(f"Account: {account}")
    else:
        print("INVALID signature.", file=sys.stderr)
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Deterministic test account keyring"
    )
    parser.add_argument(
        "--scheme",
        choices=available_schemes(),
        default=None,
        help="signature scheme (default: $DEVKEYRING_SCHEME or ecdsa)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="log derivation details",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # list
    p_list = sub.add_parser("list", help="list all test accounts")
    p_list.add_argument("--json", action="store_true", help="print JSON instead of a table")
    p_list.set_defaults(func=cmd_list)

    # inspect
    p_ins = sub.add_parser(
        "inspect",
        help="derive a key from an account name or secret URI",
    )
    p_ins.add_argument(
        "uri",
        help="account name (alice) or secret URI (//Alice, 0x<seed>//foo)",
    )
    p_ins.add_argument(
        "--password",
        help="optional password, overrides ///password in the URI",
    )
    p_ins.add_argument(
        "--show-secret",
        action="store_true",
        help="also print the raw secret seed",
    )
    p_ins.set_defaults(func=cmd_inspect)

    # sign
    p_sign = sub.add_parser("sign", help="sign a UTF-8 message as a test account")
    p_sign.add_argument("account", help="account name, e.g. Alice")
    p_sign.add_argument("message", help="message text")
    p_sign.set_defaults(func=cmd_sign)

    # verify
    p_ver = sub.add_parser(
        "verify",
        help="verify a signature against a test account",
    )
    p_ver.add_argument("account", help="account name, e.g. Alice")
    p_ver.add_argument("message", help="message text")
    p_ver.add_argument("signature_hex", help="signature in hex")
    p_ver.set_defaults(func=cmd_verify)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args.func(args)


if __name__ == "__main__":
    main()
