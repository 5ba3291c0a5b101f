"""Command-line interface for the AGENTS.md provisioner.

Subcommands:

  - ``provision``: copy ``AGENTS.md`` (and optionally the rules directory)
    from the installed package into the project root. This is what the
    ``provision-agents`` pre-commit hook runs after checkout and merge.
  - ``check``: report whether the project copy is missing or out of date and
    exit non-zero when it is.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from .config import CONFIG_FILE, load_config
from .errors import ProvisionError
from .provisioner import default_vendor_root, pending_changes, provision, resolve_dev_mode


def _add_path_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--vendor-dir",
        default=None,
        help="Directory the package is installed under (default: this installation)",
    )
    parser.add_argument(
        "--target-dir",
        default=None,
        help="Project root to copy into (default: current directory)",
    )
    parser.add_argument(
        "--with-rules",
        action="store_true",
        default=None,
        help="Also copy the rules directory (overrides rules.copy)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="backend-ai-rules",
        description="Provision AI agent guidelines into a project",
        allow_abbrev=False,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config",
        default=None,
        help=f"Configuration file (default: <target-dir>/{CONFIG_FILE})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    prov = sub.add_parser("provision", help="Copy AGENTS.md into the project root")
    _add_path_options(prov)
    prov.add_argument(
        "--no-dev",
        action="store_true",
        help="Treat this run as a production install and skip copying",
    )

    chk = sub.add_parser("check", help="Exit non-zero when the project copy is out of date")
    _add_path_options(chk)
    return parser


def main(argv: List[str] | None = None) -> int:
    """Entry point for the CLI."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    target_root = Path(args.target_dir) if args.target_dir else Path.cwd()
    try:
        config = load_config(args.config or target_root / CONFIG_FILE)
        vendor_root = Path(args.vendor_dir) if args.vendor_dir else default_vendor_root(config)

        if args.command == "provision":
            provision(
                resolve_dev_mode(args.no_dev),
                vendor_root,
                target_root,
                config=config,
                with_rules=args.with_rules,
            )
            return 0

        if args.command == "check":
            changes = pending_changes(
                vendor_root, target_root, config=config, with_rules=args.with_rules
            )
            if changes:
                print("AGENTS.md provisioning needed:")
                for change in changes:
                    print(f"  {change}")
                return 1
            print("AGENTS.md up to date")
            return 0
    except ProvisionError as exc:
        print(f"[ai-rules] Error: {exc}", file=sys.stderr)
        return 1

    raise AssertionError(f"Unhandled command: {args.command}")
