"""Argument parsing for the restgate CLI."""

import argparse
from pathlib import Path


def add_port_arg(parser: argparse.ArgumentParser) -> None:
    """Add --port argument to a parser."""
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Server port (default: from config, 8080)",
    )


def add_host_arg(parser: argparse.ArgumentParser) -> None:
    """Add --host argument to a parser."""
    parser.add_argument(
        "--host",
        default=None,
        help="Server host (default: from config, 127.0.0.1)",
    )


def add_config_arg(parser: argparse.ArgumentParser) -> None:
    """Add --config argument to a parser."""
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Explicit config.json (skips ~/.restgate and ./.restgate layering)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog="restgate",
        description="Basic-auth HTTP listener for local inter-process communication",
    )
    subparsers = parser.add_subparsers(dest="command")

    # restgate serve
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the listener and print every received payload",
    )
    add_port_arg(serve_parser)
    add_host_arg(serve_parser)
    add_config_arg(serve_parser)
    serve_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logging on the console",
    )
    serve_parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for server.log (default: from config, disabled)",
    )

    # restgate send
    send_parser = subparsers.add_parser(
        "send",
        help="POST a payload to a running listener",
    )
    send_parser.add_argument("body", help="Payload to send ('-' reads stdin)")
    add_port_arg(send_parser)
    add_host_arg(send_parser)
    add_config_arg(send_parser)
    send_parser.add_argument(
        "--username", "-u",
        default=None,
        help="Basic-auth username (default: resolved like the server's)",
    )
    send_parser.add_argument(
        "--password",
        default=None,
        help="Basic-auth password (default: resolved like the server's)",
    )
    send_parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Request timeout in seconds (default: 10)",
    )

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)
