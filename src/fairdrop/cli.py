"""Fairdrop CLI — whitelist tooling and configuration checks.

Usage:
    python -m fairdrop.cli build-whitelist --principal 0xabc... --principal 0xdef... --out merkle-proof.json
    python -m fairdrop.cli build-whitelist --count 3 --out merkle-proof.json
    python -m fairdrop.cli verify-proof --root 0x... --position 0 --principal 0xabc... --proof 0x... 0x...
    python -m fairdrop.cli commit-digest --principal 0xabc... --secret my-secret
    python -m fairdrop.cli show-config --env-file .env
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from eth_account import Account

from fairdrop.allocation.whitelist import WhitelistVerifier
from fairdrop.config import DropConfig
from fairdrop.crypto.hashing import commit_digest, to_hex
from fairdrop.crypto.merkle import WhitelistSnapshot, build_whitelist

logger = logging.getLogger("fairdrop.cli")


def cmd_build_whitelist(args: argparse.Namespace) -> int:
    principals = list(args.principal or [])
    if args.principals_file:
        lines = args.principals_file.read_text(encoding="utf-8").splitlines()
        principals.extend(line.strip() for line in lines if line.strip())
    for _ in range(args.count):
        principals.append(Account.create().address)

    try:
        snapshot = build_whitelist(principals)
    except ValueError as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1

    if args.out:
        snapshot.write(args.out)
        logger.info("Wrote %d proofs to %s", len(snapshot.entries), args.out)
        print(f"Merkle Root: {snapshot.root}")
    else:
        print(json.dumps(snapshot.to_dict(), indent=2))
    return 0


def cmd_verify_proof(args: argparse.Namespace) -> int:
    if args.proof_file:
        snapshot = WhitelistSnapshot.load(args.proof_file)
        entry = snapshot.entry_for(args.principal)
        if entry is None:
            print(f"Failed: {args.principal} not in {args.proof_file}", file=sys.stderr)
            return 1
        root = args.root or snapshot.root
        position, proof = entry.index, entry.proof
    else:
        if args.root is None or args.position is None:
            print("Failed: --root and --position are required without --proof-file", file=sys.stderr)
            return 1
        root, position, proof = args.root, args.position, args.proof or []

    try:
        verifier = WhitelistVerifier(root)
    except ValueError as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1

    if verifier.verify(position, args.principal, proof):
        print(f"Valid: {args.principal} at position {position}")
        return 0
    print("Not whitelisted", file=sys.stderr)
    return 1


def cmd_commit_digest(args: argparse.Namespace) -> int:
    try:
        digest = commit_digest(args.principal, args.secret)
    except ValueError as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1
    print(to_hex(digest))
    return 0


def cmd_show_config(args: argparse.Namespace) -> int:
    try:
        if args.config:
            config = DropConfig.from_json(args.config)
        else:
            config = DropConfig.from_env(args.env_file)
    except (KeyError, ValueError) as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1
    print(json.dumps(config.to_dict(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fairdrop",
        description="Fairdrop — whitelist commit-reveal distribution tooling",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command")

    # build-whitelist
    p_build = sub.add_parser("build-whitelist", help="Build whitelist root and proofs")
    p_build.add_argument("--principal", action="append", help="Whitelisted address (repeatable)")
    p_build.add_argument("--principals-file", type=Path, help="File with one address per line")
    p_build.add_argument("--count", type=int, default=0, help="Append N freshly generated addresses")
    p_build.add_argument("--out", type=Path, help="Write merkle-proof JSON here (default: stdout)")

    # verify-proof
    p_verify = sub.add_parser("verify-proof", help="Verify a whitelist inclusion proof")
    p_verify.add_argument("--principal", required=True, help="Address to verify")
    p_verify.add_argument("--root", help="Whitelist root")
    p_verify.add_argument("--position", type=int, help="Whitelist position")
    p_verify.add_argument("--proof", nargs="*", help="Sibling digests")
    p_verify.add_argument("--proof-file", type=Path, help="merkle-proof JSON to read root and proof from")

    # commit-digest
    p_digest = sub.add_parser("commit-digest", help="Compute the commit digest for a secret")
    p_digest.add_argument("--principal", required=True, help="Committing address")
    p_digest.add_argument("--secret", required=True, help="Secret string")

    # show-config
    p_cfg = sub.add_parser("show-config", help="Load and print drop configuration")
    p_cfg.add_argument("--config", type=Path, help="JSON config file")
    p_cfg.add_argument("--env-file", type=Path, help=".env file (default: ./.env)")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level))

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "build-whitelist": cmd_build_whitelist,
        "verify-proof": cmd_verify_proof,
        "commit-digest": cmd_commit_digest,
        "show-config": cmd_show_config,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
