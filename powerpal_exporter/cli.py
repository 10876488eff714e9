"""Command line entry point for the exporter."""

import argparse
import sys
from collections.abc import Sequence
from typing import Any, NoReturn

from pydantic import ValidationError

from powerpal_exporter import __version__
from powerpal_exporter.config import LOG_LEVELS, Environment, Settings
from powerpal_exporter.exceptions import ConfigurationError

# Flag destination -> Environment field it overrides
_FLAG_TO_ENV = {
    "token": "POWERPAL_TOKEN",
    "device": "POWERPAL_DEVICE",
    "powerpal_host": "POWERPAL_HOST",
    "refresh": "POWERPAL_REFRESH",
    "listen_address": "POWERPAL_LISTEN_ADDRESS",
    "access_log": "POWERPAL_ACCESS_LOG",
    "log_level": "LOG_LEVEL",
}


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="powerpal-exporter",
        description="Prometheus exporter for the Powerpal energy monitor API",
    )

    parser.add_argument(
        "--token",
        help="Authorisation token to talk to the PowerPal API. Env: POWERPAL_TOKEN",
    )
    parser.add_argument(
        "--device",
        help="The device ID of the PowerPal you wish to query. Env: POWERPAL_DEVICE",
    )
    parser.add_argument(
        "--powerpal-host",
        help="The hostname of the Powerpal API to connect to. Env: POWERPAL_HOST",
    )
    parser.add_argument(
        "--refresh",
        type=int,
        help="Frequency of refresh from Powerpal API in seconds. Env: POWERPAL_REFRESH",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        help="Address on which to expose metrics. Env: POWERPAL_LISTEN_ADDRESS",
    )
    parser.add_argument(
        "--web.access-log",
        dest="access_log",
        action="store_true",
        default=None,
        help="Log every HTTP request. Env: POWERPAL_ACCESS_LOG",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        choices=LOG_LEVELS,
        help="Only log messages with the given severity or above. Env: LOG_LEVEL",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    """Build settings from the environment with command line flags on top."""
    overrides: dict[str, Any] = {
        env_name: getattr(args, dest)
        for dest, env_name in _FLAG_TO_ENV.items()
        if getattr(args, dest) is not None
    }

    try:
        env = Environment(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration value: {e}") from e

    settings = Settings.load(env)
    settings.validate_config()
    return settings


def main(argv: Sequence[str] | None = None) -> NoReturn:
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
    except ConfigurationError as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        sys.exit(1)

    from powerpal_exporter.runner import run

    sys.exit(run(settings))


if __name__ == "__main__":
    main()
