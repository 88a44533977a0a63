"""Command-line flags layered over environment configuration.

Flags take precedence over environment variables and the .env file. Only
the options operators commonly change per run are exposed here; everything
else is environment-only.
"""

import argparse
from collections.abc import Sequence

from feetracker.config import ApiSettings, AppSettings, HorizonSettings, PollSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feetracker",
        description="Poll Stellar Horizon fee statistics and serve current fees and insights over HTTP.",
    )
    parser.add_argument(
        "--horizon-url",
        type=str,
        default=None,
        help="Horizon base URL (env: HORIZON_URL)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="HTTP port for the query API (env: API_PORT)",
    )
    parser.add_argument(
        "--poll-interval",
        type=int,
        default=None,
        help="Seconds between fee polls, at least 1 (env: POLL_INTERVAL_SECONDS)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (env: LOG_LEVEL)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Poll once, print the snapshot and insights as JSON, then exit",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def load_settings(args: argparse.Namespace) -> AppSettings:
    """Load settings from the environment and apply CLI overrides.

    Raises:
        pydantic.ValidationError: if any resulting value is invalid.
    """
    settings = AppSettings()
    update: dict = {}

    if args.horizon_url is not None:
        update["horizon"] = HorizonSettings(url=args.horizon_url)
    if args.port is not None:
        update["api"] = ApiSettings(port=args.port)
    if args.poll_interval is not None:
        update["poll"] = PollSettings(interval_seconds=args.poll_interval)
    if args.log_level is not None:
        update["log_level"] = args.log_level

    return settings.model_copy(update=update) if update else settings
