"""CLI module for inspecting and exercising a Strapi-backed data provider.

Provides commands for profile listing, offline query encoding, and the
read/delete operations of the provider.

Usage:
    strapi-adapter profiles
    strapi-adapter encode --dialect legacy --page 2 --per-page 25 --sort title:ASC --filter q=hello
    STRAPI_PROFILE=local strapi-adapter list posts --page 1 --per-page 10
    strapi-adapter --profile local get posts 12
    strapi-adapter --profile local delete posts 12 --confirm

Commands:
    profiles  - List available profiles
    encode    - Print the encoded list query (no network)
    list      - Fetch one page of a resource
    get       - Fetch one record
    delete    - Delete one record
"""

import argparse
import asyncio
import json
import logging
import sys

import httpx
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from strapi_adapter.config.loader import load_provider_config
from strapi_adapter.errors import DataProviderError
from strapi_adapter.factory import (
    ProfileNotFoundError,
    get_active_profile_name,
    get_provider,
)
from strapi_adapter.translation.dialects import dialect_for
from strapi_adapter.translation.encoder import encode_list_query
from strapi_adapter.translation.models import ListParams

console = Console()

# Failures reported as a one-line error with exit code 1
_COMMAND_ERRORS = (
    DataProviderError,
    ProfileNotFoundError,
    FileNotFoundError,
    httpx.HTTPError,
    ValueError,
)


# ============================================================================
# Argument helpers
# ============================================================================


def _parse_filters(pairs: list[str] | None) -> dict[str, str]:
    """Parse repeated ``key=value`` options into an ordered filter map.

    Raises:
        ValueError: If a pair has no ``=``.
    """
    filters: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Filter must look like key=value, got '{pair}'")
        filters[key] = value
    return filters


def _parse_sort(value: str | None) -> dict[str, str]:
    """Parse ``field:ORDER`` (order optional, default ASC)."""
    if not value:
        return {"field": "", "order": "ASC"}
    field, _, order = value.partition(":")
    return {"field": field, "order": order or "ASC"}


def _list_params(args: argparse.Namespace) -> ListParams:
    return ListParams.model_validate({
        "pagination": {"page": args.page, "perPage": args.per_page},
        "sort": _parse_sort(args.sort),
        "filter": _parse_filters(args.filter),
        "target": getattr(args, "target", None),
        "id": getattr(args, "id", None),
    })


def _provider(args: argparse.Namespace):
    return get_provider(
        args.profile,
        config_path=args.config,
        env_prefix=args.env_prefix,
    )


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_list(args: argparse.Namespace) -> int:
    """Fetch one page of ``args.resource`` and render it as a table.

    Returns:
        0 on success.
    """
    provider = _provider(args)
    try:
        result = await provider.get_list(args.resource, _list_params(args))
    finally:
        await provider.transport.close()

    records = result.data or []
    table = Table(
        title=f"{args.resource} (total: {result.total})",
        show_header=True,
        header_style="bold",
    )
    columns: list[str] = []
    for record in records:
        for key in record:
            if key not in columns:
                columns.append(key)
    for column in columns:
        table.add_column(column, style="dim" if column == "id" else None)
    for record in records:
        table.add_row(*(_cell(record.get(column)) for column in columns))

    console.print(table)
    return 0


async def _async_get(args: argparse.Namespace) -> int:
    """Fetch one record and print it as JSON.

    Returns:
        0 on success.
    """
    provider = _provider(args)
    try:
        result = await provider.get_one(args.resource, {"id": args.record_id})
    finally:
        await provider.transport.close()

    console.print_json(json.dumps(result.data, default=str))
    return 0


async def _async_delete(args: argparse.Namespace) -> int:
    """Delete one record (requires ``--confirm``).

    Returns:
        0 on success, 1 without ``--confirm``.
    """
    if not args.confirm:
        console.print(
            f"[yellow]Would delete[/yellow] {args.resource}/{args.record_id}. "
            "[dim]Re-run with[/dim] [cyan]--confirm[/cyan]"
        )
        return 1

    provider = _provider(args)
    try:
        await provider.delete(args.resource, {"id": args.record_id})
    finally:
        await provider.transport.close()

    console.print(
        f"[bold green]v[/bold green] Deleted [bold cyan]{args.resource}/{args.record_id}[/bold cyan]"
    )
    return 0


def _cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, dict | list):
        return json.dumps(value, default=str)
    return str(value)


# ============================================================================
# Command handlers
# ============================================================================


def _run(coro) -> int:
    """Run an async command, reporting known failures as exit code 1."""
    try:
        return asyncio.run(coro)
    except _COMMAND_ERRORS as e:
        console.print(f"[bold red]x[/bold red] {escape(str(e))}")
        return 1


def cmd_profiles(args: argparse.Namespace) -> int:
    """List available profiles from strapi.toml.

    Reads only local TOML config -- no network calls.

    Returns:
        0 on success, 1 if strapi.toml not found.
    """
    try:
        config = load_provider_config(args.config)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1

    try:
        current = get_active_profile_name(config, args.profile, args.env_prefix)
    except ProfileNotFoundError:
        current = None

    table = Table(title="Provider Profiles", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Profile")
    table.add_column("Dialect")
    table.add_column("URL")
    table.add_column("Description")

    for name, profile in config.profiles.items():
        marker = "[bold green]*[/bold green]" if name == current else " "
        name_style = "bold cyan" if name == current else ""
        table.add_row(
            marker,
            f"[{name_style}]{name}[/{name_style}]" if name_style else name,
            profile.dialect,
            profile.url,
            profile.description or "",
        )

    console.print(table)

    if current:
        console.print("\n[bold green]*[/bold green] = active profile")

    return 0


def cmd_encode(args: argparse.Namespace) -> int:
    """Print the encoded list query for the given parameters.

    Returns:
        0 on success, 1 on invalid parameters.
    """
    try:
        query = encode_list_query(_list_params(args), dialect_for(args.dialect))
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        return 1
    console.print(query, markup=False, highlight=False, soft_wrap=True)
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    return _run(_async_list(args))


def cmd_get(args: argparse.Namespace) -> int:
    return _run(_async_get(args))


def cmd_delete(args: argparse.Namespace) -> int:
    return _run(_async_delete(args))


# ============================================================================
# Main entry point
# ============================================================================


def _add_list_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--page", type=int, default=1, help="Page number (from 1)")
    parser.add_argument("--per-page", type=int, default=10, help="Page size")
    parser.add_argument("--sort", help="Sort as field:ORDER (default: updated_at desc)")
    parser.add_argument(
        "--filter",
        action="append",
        metavar="KEY=VALUE",
        help="Equality filter; repeatable. q=<text> is a full-text search",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="strapi-adapter",
        description="Strapi REST data provider toolkit",
    )

    parser.add_argument("--profile", help="Profile name from strapi.toml")
    parser.add_argument("--config", help="Path to strapi.toml (default: ./strapi.toml)")
    parser.add_argument(
        "--env-prefix",
        default="",
        help=(
            "Prefix for environment variable lookup "
            "(e.g., --env-prefix APP_ reads APP_STRAPI_PROFILE)"
        ),
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log requests")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # profiles command
    p_profiles = subparsers.add_parser("profiles", help="List available profiles")
    p_profiles.set_defaults(func=cmd_profiles)

    # encode command
    p_encode = subparsers.add_parser("encode", help="Print the encoded list query")
    p_encode.add_argument(
        "--dialect",
        default="modern",
        help="Dialect to encode for: legacy or modern",
    )
    _add_list_arguments(p_encode)
    p_encode.add_argument("--target", help="Reference field, e.g. post_id")
    p_encode.add_argument("--id", help="Reference value scoping the target")
    p_encode.set_defaults(func=cmd_encode)

    # list command
    p_list = subparsers.add_parser("list", help="Fetch one page of a resource")
    p_list.add_argument("resource", help="Resource name, e.g. posts")
    _add_list_arguments(p_list)
    p_list.set_defaults(func=cmd_list)

    # get command
    p_get = subparsers.add_parser("get", help="Fetch one record")
    p_get.add_argument("resource", help="Resource name, e.g. posts")
    p_get.add_argument("record_id", help="Record id (or SingleType)")
    p_get.set_defaults(func=cmd_get)

    # delete command
    p_delete = subparsers.add_parser("delete", help="Delete one record")
    p_delete.add_argument("resource", help="Resource name, e.g. posts")
    p_delete.add_argument("record_id", help="Record id (or SingleType)")
    p_delete.add_argument("--confirm", action="store_true", help="Actually delete")
    p_delete.set_defaults(func=cmd_delete)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Parses command line arguments and dispatches to appropriate handler.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
