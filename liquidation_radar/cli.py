"""Command-line interface for the liquidation analytics tools."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from .config import load_config
from .logging_setup import configure_logging
from .services import LiquidationEngine
from .tools import TOOLS, ToolError, call_tool

# subcommand → (tool name, argument builder)
_COMMANDS: dict[str, tuple[str, Any]] = {
    "health": ("get_user_health", lambda a: {"address": a.address}),
    "analyze": ("analyze_liquidation", lambda a: {"address": a.address}),
    "positions": ("get_user_positions", lambda a: {"address": a.address}),
    "reserves": ("get_aave_reserves", lambda a: {}),
    "price": ("get_asset_price", lambda a: {"assetAddress": a.asset}),
    "reserve-stats": ("get_reserve_stats", lambda a: {"assetAddress": a.asset}),
    "status": ("get_protocol_status", lambda a: {}),
    "batch": ("batch_check_addresses", lambda a: {"addresses": list(a.addresses)}),
    "validate": ("validate_address", lambda a: {"address": a.address}),
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="aave-liquidation-radar",
        description="Read-only Aave V3 liquidation analytics",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("tools", help="List available tools")

    for name, help_text in (
        ("health", "Account health factor and status"),
        ("analyze", "Liquidation opportunity for an address"),
        ("positions", "Collateral and debt breakdown for an address"),
        ("validate", "Validate an address format"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("address")

    sub.add_parser("reserves", help="List reserves and their configuration")

    for name, help_text in (
        ("price", "Oracle price of an asset"),
        ("reserve-stats", "Supply/borrow statistics of a reserve"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("asset")

    sub.add_parser("status", help="Protocol status and block number")

    batch_parser = sub.add_parser("batch", help="Check many addresses at once")
    batch_parser.add_argument("addresses", nargs="+")

    return parser


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command and print its JSON payload."""
    if args.command == "tools":
        print(json.dumps(TOOLS, indent=2))
        return 0

    config = load_config(args.config)
    engine = LiquidationEngine(config)

    tool_name, build_args = _COMMANDS[args.command]
    try:
        payload = await call_tool(engine, tool_name, build_args(args))
    except ToolError as e:
        print(json.dumps({"error": e.code, "message": e.message}, indent=2))
        return 1

    print(json.dumps(payload, indent=2))
    return 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging(args.log_level)
    sys.exit(asyncio.run(_run(args)))
