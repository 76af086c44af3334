"""Command-line entry point for valuation, price refresh and sheet sync."""

import argparse
import asyncio
import logging
import sys

from asset_sync.config import settings
from asset_sync.constants import ALL_OWNERS
from asset_sync.schemas import AccountSummary, OverviewSummary
from asset_sync.services.dashboard_session import DashboardSession

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _fmt(value) -> str:
    return "-" if value is None else f"{value:,.2f}"


def print_summary(summary: AccountSummary) -> None:
    print(f"{summary.account_name} ({summary.account_type.value}, owner: {summary.owner or '-'})")
    print(
        f"  value {_fmt(summary.total_current_value)}  "
        f"cost {_fmt(summary.total_purchase_amount)}  "
        f"P/L {_fmt(summary.total_profit_loss)} ({summary.total_return_rate}%)  "
        f"income {_fmt(summary.total_expected_income)}"
    )
    for asset in summary.assets:
        rate = "-" if asset.return_rate is None else f"{asset.return_rate}%"
        print(
            f"  [{asset.id}] {asset.name} {asset.code or ''} x{asset.quantity} "
            f"@ {_fmt(asset.current_price)} = {_fmt(asset.current_value)} ({rate})"
        )


def print_overview(overview: OverviewSummary) -> None:
    print(f"Overview ({overview.owner_filter}, {overview.account_count} accounts)")
    print(
        f"  value {_fmt(overview.total_current_value)}  "
        f"P/L {_fmt(overview.total_profit_loss)} ({overview.total_return_rate}%)  "
        f"income {_fmt(overview.total_expected_income)}"
    )
    for item in overview.allocation:
        print(f"  {item.label:<20} {_fmt(item.value):>20} {item.percent:6.1f}%")


def print_notices(session: DashboardSession) -> int:
    """Print notices; returns a non-zero exit code if any was an error."""
    exit_code = 0
    for notice in session.notices:
        stream = sys.stderr if notice.level == "error" else sys.stdout
        print(notice.message, file=stream)
        if notice.level == "error":
            exit_code = 1
    return exit_code


async def run(args: argparse.Namespace) -> int:
    async with DashboardSession() as session:
        if args.command == "accounts":
            for account in await session.load_accounts():
                print(f"[{account.id}] {account.name}  sheet={account.sheet_name}  owner={account.owner}")
        elif args.command == "summary":
            session.current_account_id = args.account_id
            summary = await session.load_summary(auto_refresh=False)
            if summary is not None:
                print_summary(summary)
        elif args.command == "refresh":
            session.current_account_id = args.account_id
            if args.asset_id is not None:
                result = await session.refresh_asset_price(args.asset_id, force=args.force)
            else:
                result = await session.refresh_all_prices(force=args.force)
            if result is not None:
                print(f"updated {len(result.updated)}, failed {len(result.failed)}")
            if session.summary is not None:
                print_summary(session.summary)
        elif args.command == "overview":
            overview = await session.load_overview(args.owner)
            if overview is not None:
                print_overview(overview)
        elif args.command == "sync":
            session.current_account_id = args.account_id
            await session.sync_account()
        elif args.command == "export":
            session.current_account_id = args.account_id
            await session.export_account()
        elif args.command == "watch":
            await session.reload()
            session.start_sync_monitor()
            logger.info("Watching spreadsheet sync status, Ctrl-C to stop")
            await asyncio.Event().wait()
        return print_notices(session)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="asset-sync", description=__doc__)
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("accounts", help="List accounts")

    summary = sub.add_parser("summary", help="Show one account summary")
    summary.add_argument("account_id", type=int)

    refresh = sub.add_parser("refresh", help="Refresh market prices of an account")
    refresh.add_argument("account_id", type=int)
    refresh.add_argument("--asset", dest="asset_id", type=int, default=None)
    refresh.add_argument(
        "--no-force", dest="force", action="store_false", help="Allow cached prices"
    )

    overview = sub.add_parser("overview", help="Show the cross-account overview")
    overview.add_argument("--owner", default=ALL_OWNERS)

    sync = sub.add_parser("sync", help="Pull an account from its sheet tab")
    sync.add_argument("account_id", type=int)

    export = sub.add_parser("export", help="Push an account to its sheet tab")
    export.add_argument("account_id", type=int)

    sub.add_parser("watch", help="Poll background sync status and reload on completion")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
