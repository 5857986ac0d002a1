"""Command-line interface.

Usage:
    intentswap assets
    intentswap quote inbound BTC 0.01 --recipient t1... --refund bc1q...
    intentswap quote outbound ETH.ETH 2.5 --recipient 0x... --refund t1...
    intentswap execute inbound BTC 0.01 --recipient t1... --refund bc1q... --watch
    intentswap status <swap_id>
    intentswap watch <swap_id>
    intentswap history [--active]

Environment variables:
    NEAR_INTENTS_API_KEY: enables live mode (mock mode without it)
    USE_MOCK: force mock mode
    DATABASE_URL: swap history database
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Optional

from intentswap.config import get_settings
from intentswap.errors import IntentSwapError
from intentswap.ledger.database import close_db, get_session_factory, init_db
from intentswap.models import ActiveSwap, ExecutionParams, SwapDirection
from intentswap.services.swap_service import SwapService, create_swap_service
from intentswap.swap_engine.monitor import SwapMonitor

logger = logging.getLogger(__name__)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intentswap", description="Cross-chain swaps to and from ZEC via intents"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("assets", help="List swappable assets")

    for name, help_text in (
        ("quote", "Get quotes"),
        ("execute", "Get the best quote and execute it"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "direction",
            choices=[d.value for d in SwapDirection],
            help="inbound: asset -> ZEC, outbound: ZEC -> asset",
        )
        sub.add_argument("asset", help="External asset identifier or symbol (e.g. BTC, ETH.ETH)")
        sub.add_argument("amount", help="Amount to sell, in display units")
        sub.add_argument("--recipient", required=True, help="Address receiving the bought asset")
        sub.add_argument(
            "--refund",
            default=None,
            help="Refund address (source chain for inbound, ZEC for outbound)",
        )
        if name == "execute":
            sub.add_argument(
                "--watch", action="store_true", help="Poll until the swap is terminal"
            )

    status = subparsers.add_parser("status", help="Refresh a swap's status once")
    status.add_argument("swap_id")

    watch = subparsers.add_parser("watch", help="Poll a swap until it is terminal")
    watch.add_argument("swap_id")

    history = subparsers.add_parser("history", help="Show recorded swaps")
    history.add_argument("--active", action="store_true", help="Only swaps in progress")
    history.add_argument("--limit", type=int, default=50)

    return parser


async def _quotes(service: SwapService, args: argparse.Namespace):
    asset = await service.find_asset(args.asset)
    if args.direction == SwapDirection.INBOUND.value:
        return await service.get_inbound_quotes(asset, args.amount, args.recipient, args.refund)
    return await service.get_outbound_quotes(asset, args.amount, args.recipient, args.refund)


async def _load_swap(service: SwapService, swap_id: str) -> ActiveSwap:
    swap = await service.get_swap(swap_id)
    if swap is None:
        raise IntentSwapError(f"No swap with id {swap_id}")
    return swap


async def _watch(service: SwapService, swap: ActiveSwap) -> ActiveSwap:
    monitor = SwapMonitor.from_settings(service)
    return await monitor.watch(
        swap, on_update=lambda s: logger.info(f"Swap {s.id} is now {s.status.value}")
    )


async def run(args: argparse.Namespace) -> Optional[Any]:
    """Run one command and return its JSON-serializable result."""
    await init_db()
    service = create_swap_service(session_factory=get_session_factory())

    if args.command == "assets":
        return [asset.to_dict() for asset in await service.list_assets()]

    if args.command == "quote":
        return [quote.to_dict() for quote in await _quotes(service, args)]

    if args.command == "execute":
        best = (await _quotes(service, args))[0]
        if args.direction == SwapDirection.INBOUND.value:
            params = ExecutionParams(args.recipient, source_chain_refund_address=args.refund)
        else:
            params = ExecutionParams(args.recipient, home_refund_address=args.refund)
        swap = await service.accept_quote(best, params)
        if args.watch:
            swap = await _watch(service, swap)
        return swap.to_dict()

    if args.command == "status":
        swap = await service.refresh(await _load_swap(service, args.swap_id))
        return swap.to_dict()

    if args.command == "watch":
        swap = await _watch(service, await _load_swap(service, args.swap_id))
        return swap.to_dict()

    if args.command == "history":
        swaps = await service.active_swaps() if args.active else await service.history(args.limit)
        return [swap.to_dict() for swap in swaps]

    raise IntentSwapError(f"Unknown command: {args.command}")


async def _main(args: argparse.Namespace) -> int:
    try:
        _print_json(await run(args))
        return 0
    except IntentSwapError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await close_db()


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = get_settings()

    log_level = logging.DEBUG if (args.debug or settings.debug) else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    if log_level == logging.DEBUG:
        # SQL statements go to the stderr handler, stdout carries only JSON
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
    logger.info(f"Mode: {'mock' if settings.mock_mode else 'live'}")

    return asyncio.run(_main(args))


if __name__ == "__main__":
    sys.exit(main())
