"""Command-line interface for diskcached.

Inspects and clears the records of a disk store.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console

from diskcached.core.caching import (
    POLICY_SUFFIX,
    compose_policy_key,
    invalidate,
    is_policy_key,
)
from diskcached.core.config import LoggingConfig, load_app_config
from diskcached.core.errors import DiskCacheError
from diskcached.core.io import RealFileSystem, absolute_path
from diskcached.core.store import FSStore
from diskcached.core.utils.logging import configure_from_config

console = Console()
logger = logging.getLogger(__name__)


async def list_keys_async(store: FSStore) -> int:
    """Print stored base keys, marking which ones have a policy."""
    keys = await store.keys()
    stored = set(keys)
    # Value keys may themselves end in "_policy"; classify by what is paired
    policies = {k for k in keys if is_policy_key(k) and k[: -len(POLICY_SUFFIX)] in stored}
    orphans = [
        k
        for k in keys
        if is_policy_key(k) and k not in policies and compose_policy_key(k) not in stored
    ]
    values = [k for k in keys if k not in policies and k not in orphans]

    if not keys:
        console.print("[yellow]Store is empty[/yellow]")
        return 0

    for key in values:
        marker = "✅" if compose_policy_key(key) in stored else "⚠️  no policy"
        console.print(f"{key}  {marker}")
    for key in orphans:
        console.print(f"{key}  [yellow]⚠️  policy without value[/yellow]")
    return 0


async def show_key_async(store: FSStore, key: str) -> int:
    """Print the value and policy stored for key as JSON."""
    value, policy = await asyncio.gather(store.read(key), store.read(compose_policy_key(key)))

    if value is None and policy is None:
        console.print(f"[red]Nothing stored for {key!r}[/red]")
        return 1

    console.print(f"[bold]Value[/bold] ({key})")
    console.print_json(json.dumps(value, default=str))
    console.print(f"[bold]Policy[/bold] ({compose_policy_key(key)})")
    console.print_json(json.dumps(policy, default=str))
    return 0


async def invalidate_key_async(store: FSStore, key: str) -> int:
    """Delete the value and policy stored for key."""
    await invalidate(store, key)
    console.print(f"[green]✅ Invalidated {key!r}[/green]")
    return 0


def open_store(args: argparse.Namespace) -> FSStore:
    """Build the store selected by --root / --config."""
    config = load_app_config(args.config)
    logging_config = config.logging
    if args.log_level:
        logging_config = LoggingConfig.model_validate(
            {**logging_config.model_dump(), "level": args.log_level.upper()}
        )
    configure_from_config(logging_config)

    root = Path(args.root) if args.root else config.root
    return FSStore(RealFileSystem(), absolute_path(root))


def run_command(args: argparse.Namespace) -> int:
    """Run the selected subcommand and return its exit code."""
    try:
        store = open_store(args)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        console.print(f"[red]ERROR: Could not load config: {e}[/red]")
        return 1

    logger.debug(f"Using store at {store.root}")

    try:
        if args.cmd == "list":
            return asyncio.run(list_keys_async(store))
        if args.cmd == "show":
            return asyncio.run(show_key_async(store, args.key))
        if args.cmd == "invalidate":
            return asyncio.run(invalidate_key_async(store, args.key))
    except (DiskCacheError, OSError) as e:
        console.print(f"[red]ERROR: {e}[/red]")
        return 1

    console.print(f"[red]ERROR: Unknown command: {args.cmd}[/red]")
    return 1


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="diskcached",
        description="diskcached - inspect and clear read-through disk cache entries",
    )
    p.add_argument("--root", default=None, help="Store directory (default: from config)")
    p.add_argument(
        "--config",
        default=None,
        help="Path to config file, JSON or YAML (default: ./diskcached.yaml)",
    )
    p.add_argument("--log-level", default=None, help="Override configured log level")

    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("list", help="List stored keys")

    show = sub.add_parser("show", help="Print stored value and policy for a key")
    show.add_argument("key", help="Base storage key")

    inv = sub.add_parser("invalidate", help="Delete stored value and policy for a key")
    inv.add_argument("key", help="Base storage key")

    return p


def main(argv: list[str] | None = None) -> None:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args(argv)
    sys.exit(run_command(args))
