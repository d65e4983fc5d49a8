"""Argument parsing, configuration loading, and operation dispatch."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys

from .config import LOG_LEVELS, AppConfig, load_config
from .discovery.dns_client import DNSResolver
from .discovery.ec2_client import EC2Client
from .discovery.resolver import find_instances_then
from .exceptions import ConfigError, Ec2ByNameError, TimeSpecError, UsageError
from .logging_config import configure_logging
from .operations import build_operation
from .timespec import no_stop_before

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

OPERATIONS = {
    "print": "Print instance ids",
    "reboot": "Reboot instances",
    "set-no-stop-before": "Set the NoStopBefore tag to a time or a duration from now",
    "start": "Start instances",
    "stop": "Stop instances",
    "terminate": "Terminate instances",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ec2-by-name",
        description="Find EC2 instances by DNS name and act on them",
    )
    parser.add_argument(
        "-p", "--profile",
        help="Use AWS credentials from the specified profile in ~/.aws/credentials",
    )
    parser.add_argument(
        "-r", "--region",
        help="Use the specified AWS region",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to an optional YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level for messages on stderr (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="operation", metavar="<operation>")
    for name, help_text in OPERATIONS.items():
        sub = subparsers.add_parser(name, help=help_text, description=help_text)
        if name == "set-no-stop-before":
            sub.add_argument("-d", "--duration", help="Duration from now, e.g. 1h or '2days 4h'")
            sub.add_argument("-t", "--time", help="Absolute time, e.g. 2024-06-01T18:00:00Z")
        sub.add_argument("names", nargs="*", metavar="<name>", help="Host names to resolve")
        sub.set_defaults(subparser=sub)
    return parser


def _check_usage(args: argparse.Namespace) -> str | None:
    """Validate the parts of the command line argparse cannot; return the tag timestamp if any."""
    if args.operation is None:
        raise UsageError("No operation specified")
    if args.operation == "set-no-stop-before":
        return no_stop_before(duration=args.duration, time=args.time)
    return None


def _effective_config(args: argparse.Namespace) -> AppConfig:
    """Load the config file (if any) and apply command-line overrides."""
    config = load_config(args.config)
    aws = dataclasses.replace(
        config.aws,
        region=args.region or config.aws.region,
        credential_profile=args.profile or config.aws.credential_profile,
    )
    log = config.logging
    if args.log_level:
        log = dataclasses.replace(log, level=args.log_level)
    return dataclasses.replace(config, aws=aws, logging=log)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Resolve the timestamp before any lookup so it does not drift with DNS/API latency
    try:
        timestamp = _check_usage(args)
    except (UsageError, TimeSpecError) as exc:
        print(f"Invalid usage: {exc}", file=sys.stderr)
        getattr(args, "subparser", parser).print_help(sys.stderr)
        return EXIT_USAGE

    try:
        config = _effective_config(args)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    configure_logging(config.logging)

    try:
        ec2 = EC2Client(config.aws)
        resolver = DNSResolver(config.dns)
        operation = build_operation(args.operation, ec2, timestamp)
        asyncio.run(find_instances_then(ec2, resolver, args.names, operation))
    except Ec2ByNameError as exc:
        logger.debug("%s failed", args.operation, exc_info=True, extra={"operation": args.operation})
        print(exc, file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return EXIT_FAILURE

    return EXIT_SUCCESS


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())
