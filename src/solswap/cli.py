"""Command line entry point.

Usage:
    solswap balances [--address ADDRESS] [--token USDC]
    solswap quote --amount 10 [--from USDC] [--to SOL] [--slippage-bps 50]
    solswap swap --amount 10 [--from USDC] [--to SOL] [--destination ADDRESS]
"""

import argparse
import asyncio
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import Optional

from solswap.config import Settings, get_settings
from solswap.exceptions import ConfirmationTimeoutError, SolswapError
from solswap.routing.base import SwapRequest
from solswap.rpc import SolanaRpcClient
from solswap.services.balance import BalanceResolver
from solswap.services.swap_service import SwapService
from solswap.signing.local import LocalKeypairSigner
from solswap.tokens import from_base_units, get_asset

logger = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_UNKNOWN_OUTCOME = 2


def _decimal(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"Invalid amount: {value}")


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="solswap", description="Swap Solana tokens via Jupiter")
    sub = parser.add_subparsers(dest="command", required=True)

    balances = sub.add_parser("balances", help="Show SOL and token balances")
    balances.add_argument("--address", help="Wallet address (default: configured keypair)")
    balances.add_argument("--token", default=settings.balance_token, help="Token symbol")

    for name, help_text in (("quote", "Preview a swap"), ("swap", "Execute a swap")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--amount", type=_decimal, required=True, help="Amount of source token")
        cmd.add_argument("--from", dest="source", default="USDC", help="Source token")
        cmd.add_argument("--to", dest="destination_asset", default="SOL", help="Destination token")
        cmd.add_argument(
            "--slippage-bps",
            type=int,
            default=settings.default_slippage_bps,
            help="Slippage tolerance in basis points (10-500)",
        )
        cmd.add_argument("--destination", help="Send output to this wallet instead")

    return parser


def _load_signer(settings: Settings) -> LocalKeypairSigner:
    if not settings.wallet_keypair:
        raise SolswapError("WALLET_KEYPAIR is not configured")
    return LocalKeypairSigner.from_secret(settings.wallet_keypair)


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    if args.command == "balances":
        address = args.address or _load_signer(settings).public_key
        resolver = BalanceResolver(SolanaRpcClient(settings.sol_rpc_url, timeout=settings.http_timeout))
        snapshot = await resolver.resolve_balances(address, args.token)
        native = f"{snapshot.native_amount:.6f}" if snapshot.native_amount is not None else "N/A"
        token = f"{snapshot.token_amount:.2f}" if snapshot.token_amount is not None else "N/A"
        print(f"SOL:  {native}")
        print(f"{snapshot.token_symbol}: {token}")
        snapshot.raise_for_status()
        return 0

    signer = _load_signer(settings)
    service = SwapService.from_settings(signer, settings)
    request = SwapRequest(
        source_asset=args.source,
        destination_asset=args.destination_asset,
        source_amount=args.amount,
        slippage_bps=args.slippage_bps,
        requester=signer.public_key,
        destination=args.destination,
    )

    if args.command == "quote":
        quote = await service.quote(request)
        out_asset = get_asset(request.destination_asset)
        print(
            f"{request.source_amount} {request.source_asset} -> "
            f"~{from_base_units(quote.out_amount, out_asset.decimals)} {out_asset.symbol}"
        )
        print(f"Route: {' -> '.join(quote.dex_path)} (price impact {quote.price_impact_pct}%)")
        return 0

    result = await service.request_swap(request)
    print(f"Transaction confirmed: {result.signature}")
    if result.destination_overridden:
        print(f"Output sent to {request.destination}")
    print(result.explorer_url)
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    settings = get_settings()

    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    args = build_parser(settings).parse_args(argv)

    try:
        return asyncio.run(_run(args, settings))
    except ConfirmationTimeoutError as e:
        logger.error(str(e))
        print(
            f"Outcome unknown for {e.signature}. Check the explorer before trying again.",
            file=sys.stderr,
        )
        return EXIT_UNKNOWN_OUTCOME
    except ValueError as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return EXIT_ERROR
    except SolswapError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
