from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .canon import compact_json
from .config import Settings
from .digest import ALGORITHMS, content_digest, is_hex_digest
from .errors import RpcError
from .health import health_check

# Exit status for a failed request: ERROR_EXIT_BASE + RpcError.code.
ERROR_EXIT_BASE = 10

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT, stream=sys.stderr)


def settings_from_args(args: argparse.Namespace) -> Settings:
    s = Settings.from_env()
    overrides = {}
    if args.asset_root:
        overrides["asset_root"] = Path(args.asset_root)
    if args.storage_root:
        overrides["storage_root"] = Path(args.storage_root)
    if args.algorithm:
        overrides["digest_algorithm"] = args.algorithm
    if args.no_strict_paths:
        overrides["strict_paths"] = False
    if args.log_level:
        overrides["log_level"] = args.log_level
    return replace(s, **overrides) if overrides else s


def _read_asset_file(path: str) -> bytes:
    p = Path(path)
    if not p.is_file():
        raise SystemExit(f"no such file: {p}")
    return compact_json(p.read_bytes())


def _report(e: RpcError) -> int:
    print(json.dumps(e.to_dict()), file=sys.stderr)
    return ERROR_EXIT_BASE + e.code


def cmd_hash(args: argparse.Namespace, settings: Settings) -> int:
    try:
        canonical = _read_asset_file(args.path)
    except RpcError as e:
        return _report(e)
    print(content_digest(canonical, settings.digest_algorithm))
    return 0


def cmd_check(args: argparse.Namespace, settings: Settings) -> int:
    claimed = args.digest.strip()
    if not is_hex_digest(claimed, settings.digest_algorithm):
        raise SystemExit(f"not a lowercase hex {settings.digest_algorithm} digest: {claimed!r}")
    try:
        canonical = _read_asset_file(args.path)
    except RpcError as e:
        return _report(e)
    actual = content_digest(canonical, settings.digest_algorithm)
    if actual == claimed:
        print("OK")
        return 0
    print(f"digest mismatch: expected {claimed}, got {actual}")
    return 2


def cmd_canon(args: argparse.Namespace, settings: Settings) -> int:
    try:
        canonical = _read_asset_file(args.path)
    except RpcError as e:
        return _report(e)
    sys.stdout.write(canonical.decode("utf-8") + "\n")
    return 0


def cmd_request(args: argparse.Namespace, settings: Settings) -> int:
    payload = args.payload if args.payload is not None else sys.stdin.read()
    handler = settings.file_handler()
    try:
        out = handler(payload)
    except RpcError as e:
        return _report(e)
    print(out)
    return 0


def cmd_health(args: argparse.Namespace, settings: Settings) -> int:
    print(health_check())
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="assetgate", description="Verify-then-publish JSON asset handler.")
    p.add_argument("--asset-root", help="Asset tree root (<root>/<type>/<version>.json).")
    p.add_argument(
        "--storage-root",
        help="Directory for published objects. Without it, publishes go to an in-memory sink.",
    )
    p.add_argument("--algorithm", choices=sorted(ALGORITHMS), help="Digest algorithm (default md5).")
    p.add_argument(
        "--no-strict-paths",
        action="store_true",
        help="Allow type/version values that resolve outside the asset root (not recommended).",
    )
    p.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR.")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_hash = sub.add_parser("hash", help="Print the digest of a JSON file's canonical form.")
    p_hash.add_argument("path")
    p_hash.set_defaults(fn=cmd_hash)

    p_check = sub.add_parser("check", help="Check a JSON file against a digest a client would claim.")
    p_check.add_argument("path")
    p_check.add_argument("digest")
    p_check.set_defaults(fn=cmd_check)

    p_canon = sub.add_parser("canon", help="Print a JSON file's canonical (compacted) form.")
    p_canon.add_argument("path")
    p_canon.set_defaults(fn=cmd_canon)

    p_req = sub.add_parser("request", help="Run one asset request through the full pipeline.")
    p_req.add_argument("payload", nargs="?", help="Request JSON. Read from stdin when omitted.")
    p_req.set_defaults(fn=cmd_request)

    p_health = sub.add_parser("health", help="Print the liveness payload.")
    p_health.set_defaults(fn=cmd_health)

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    try:
        settings = settings_from_args(args)
    except ValueError as e:
        raise SystemExit(f"invalid configuration: {e}")
    configure_logging(settings.log_level)
    return args.fn(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
