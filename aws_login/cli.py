"""
aws-login command line interface.

    aws-login [options] <account-id-or-alias> [command [args...]]

Without a command, prints export lines for the AWS credential variables.
With a command, runs it with the credentials in its environment and exits
with its status. With --console, prints a console sign-in URL instead.
"""

import argparse
import os
import subprocess
import sys
from typing import List, Optional

from .broker import CredentialBroker
from .cache import CredentialCache, FileStorage
from .config import AccountDirectory, LoginSettings
from .console import DEFAULT_DESTINATION, ConsoleLinkBuilder, FederationClient
from .exceptions import AWSLoginError
from .sts import StsRoleAssumer, read_mfa_token
from .utils import get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aws-login",
        description="Assume an AWS role with cached, MFA-protected credentials.",
    )
    parser.add_argument("account", nargs="?", help="account ID or alias")
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="command to run with the credentials in its environment",
    )
    parser.add_argument(
        "--cache-directory", help="directory for cached credentials"
    )
    parser.add_argument("--config-file", help="account configuration file")
    parser.add_argument(
        "--console",
        action="store_true",
        help="print a link to the AWS console on standard output",
    )
    parser.add_argument(
        "--destination",
        default=DEFAULT_DESTINATION,
        help="the AWS Console URL to redirect to after authenticating",
    )
    parser.add_argument(
        "--duration-seconds",
        type=int,
        default=0,
        help="session duration (default: account setting, then 3600)",
    )
    return parser


def build_broker(settings: LoginSettings) -> CredentialBroker:
    directory = AccountDirectory.from_file(settings.config_file)
    cache = CredentialCache(FileStorage(settings.cache_directory))
    assumer = StsRoleAssumer(settings.default_profile, settings.default_region)
    return CredentialBroker(directory, cache, assumer, read_mfa_token)


def export_lines(environment) -> List[str]:
    return [f'export {name}="{value}"' for name, value in environment.items()]


def run(args: argparse.Namespace) -> int:
    settings = LoginSettings.from_env(args.cache_directory, args.config_file)
    broker = build_broker(settings)

    if args.console:
        builder = ConsoleLinkBuilder(broker, FederationClient())
        print(builder.build(args.account, args.destination, args.duration_seconds))
        return 0

    credentials = broker.resolve(args.account, args.duration_seconds)
    environment = credentials.environment()

    if not args.command:
        for line in export_lines(environment):
            print(line)
        return 0

    try:
        completed = subprocess.run(args.command, env={**os.environ, **environment})
    except OSError as e:
        print(f"unable to run command: {e}", file=sys.stderr)
        return 1
    return completed.returncode


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.account:
        print("missing account ID or alias", file=sys.stderr)
        return 1

    try:
        return run(args)
    except AWSLoginError as e:
        logger.debug("Resolution failed", exc_info=True)
        print(str(e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
