"""CLI entry point for nostrid.

Key conversion, DID derivation, NIP-05 verification, NIP-98 header signing
and the auth server behind one command. Results are printed to stdout as
JSON; diagnostics go to the structured log on stderr.

Examples:
    ```bash
    nostrid keygen
    nostrid encode npub 7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e
    nostrid decode npub10elfcs4fr0l0r8af98jlmgdh9c8tcxjvz9qkw038js35mp4dma8qzvjptg
    nostrid did npub1... --relay wss://relay.example.com
    nostrid verify-nip05 bob@example.com --pubkey npub1...
    nostrid resolve did:nostr:7e7e9c42... --verify-nip05
    NOSTRID_PRIVATE_KEY=nsec1... nostrid auth-header https://api.example.com/me
    nostrid serve --config config/auth_server.yaml
    ```
"""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Callable, Coroutine, Sequence
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any

from nostrid.core.exceptions import NostridError
from nostrid.core.logger import Logger, StructuredFormatter
from nostrid.did.document import generate_document
from nostrid.did.resolver import DidResolver
from nostrid.models.constants import Bech32Prefix
from nostrid.nips.nip01.signer import select_signer
from nostrid.nips.nip05.verifier import Nip05Verifier
from nostrid.nips.nip19.entities import decode_entity
from nostrid.nips.nip19.keys import (
    event_id_to_note,
    generate_keypair,
    parse_to_hex_pubkey,
    privkey_to_nsec,
    pubkey_to_npub,
)
from nostrid.nips.nip98.http_auth import create_auth_header
from nostrid.services.auth_server import AuthServer
from nostrid.utils.keys import ENV_PRIVATE_KEY, KeysConfig


DEFAULT_CONFIG = Path("config") / "auth_server.yaml"

ENCODERS: dict[str, Callable[[str], str]] = {
    Bech32Prefix.NPUB: pubkey_to_npub,
    Bech32Prefix.NSEC: privkey_to_nsec,
    Bech32Prefix.NOTE: event_id_to_note,
}

logger = Logger("cli")


def _emit(data: Any) -> None:
    print(json.dumps(data, indent=2))


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def cmd_keygen(_args: argparse.Namespace) -> int:
    keypair = generate_keypair()
    _emit(
        {
            "public_key": keypair.public_key,
            "npub": keypair.npub,
            "private_key": keypair.private_key,
            "nsec": keypair.nsec,
        }
    )
    return 0


async def cmd_encode(args: argparse.Namespace) -> int:
    print(ENCODERS[args.type](args.hex))
    return 0


async def cmd_decode(args: argparse.Namespace) -> int:
    entity = decode_entity(args.value)
    value = asdict(entity.value) if is_dataclass(entity.value) else entity.value
    _emit({"type": entity.prefix.value, "value": value})
    return 0


async def cmd_did(args: argparse.Namespace) -> int:
    pubkey = parse_to_hex_pubkey(args.key)
    document = generate_document(pubkey, relays=args.relay)
    _emit(document.to_dict())
    return 0


async def cmd_verify_nip05(args: argparse.Namespace) -> int:
    verifier = Nip05Verifier()
    result = await verifier.verify(args.identifier, expected_pubkey=args.pubkey, use_cache=False)
    if result is None:
        logger.warning("nip05_not_verified", identifier=args.identifier)
        return 1
    _emit(result.to_dict())
    return 0


async def cmd_resolve(args: argparse.Namespace) -> int:
    resolver = DidResolver(verifier=Nip05Verifier())
    result = await resolver.resolve(args.did, verify_nip05=args.verify_nip05, relays=args.relay)
    _emit(result.to_dict())
    return 0 if result.ok else 1


async def cmd_auth_header(args: argparse.Namespace) -> int:
    signer = select_signer(KeysConfig(keys_env=args.keys_env).keys)
    payload = args.body.read_bytes() if args.body else None
    print(await create_auth_header(args.url, args.method, signer, payload))
    return 0


async def cmd_serve(args: argparse.Namespace) -> int:
    config_path: Path = args.config or DEFAULT_CONFIG
    if config_path.exists():
        server = AuthServer.from_yaml(str(config_path))
    else:
        if args.config:
            logger.warning("config_not_found", path=str(config_path))
        server = AuthServer()
    await server.serve()
    return 0


COMMANDS: dict[str, Callable[[argparse.Namespace], Coroutine[Any, Any, int]]] = {
    "keygen": cmd_keygen,
    "encode": cmd_encode,
    "decode": cmd_decode,
    "did": cmd_did,
    "verify-nip05": cmd_verify_nip05,
    "resolve": cmd_resolve,
    "auth-header": cmd_auth_header,
    "serve": cmd_serve,
}


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="nostrid",
        description="Nostr keys, NIP-05, DID documents and signed authentication",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("keygen", help="Generate a new key pair")

    encode = sub.add_parser("encode", help="Encode a hex value as npub, nsec or note")
    encode.add_argument("type", choices=[str(p) for p in ENCODERS])
    encode.add_argument("hex", help="64-char hex value")

    decode = sub.add_parser("decode", help="Decode any NIP-19 string")
    decode.add_argument("value", help="bech32 string (npub1..., nprofile1..., ...)")

    did = sub.add_parser("did", help="Generate the DID document for a public key")
    did.add_argument("key", help="Hex or npub public key")
    did.add_argument("--relay", action="append", help="Relay URL (repeatable)")

    verify = sub.add_parser("verify-nip05", help="Verify a NIP-05 identifier")
    verify.add_argument("identifier", help="name@domain")
    verify.add_argument("--pubkey", help="Expected hex or npub public key")

    resolve = sub.add_parser("resolve", help="Resolve a did:nostr DID")
    resolve.add_argument("did")
    resolve.add_argument("--verify-nip05", action="store_true", help="Verify the profile's NIP-05")
    resolve.add_argument("--relay", action="append", help="Relay URL (repeatable)")

    header = sub.add_parser("auth-header", help="Sign a NIP-98 Authorization header")
    header.add_argument("url")
    header.add_argument("--method", default="GET")
    header.add_argument("--body", type=Path, help="File whose bytes are the request body")
    header.add_argument(
        "--keys-env",
        default=ENV_PRIVATE_KEY,
        help=f"Environment variable holding the private key (default: {ENV_PRIVATE_KEY})",
    )

    serve = sub.add_parser("serve", help="Run the HTTP auth server")
    serve.add_argument(
        "--config",
        type=Path,
        help=f"Server config path (default: {DEFAULT_CONFIG})",
    )

    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    """Configure the root logger with structured formatting.

    Installs a ``StructuredFormatter`` on a stderr handler so that output
    from ``Logger`` and from plain ``logging.getLogger()`` calls in the
    library layers is unified as ``level name message key=value ...``.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level))


async def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point: parse args and dispatch to the command."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        return await COMMANDS[args.command](args)
    except NostridError as e:
        logger.error(f"{args.command}_failed", error=str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("interrupted")
        return 130


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
