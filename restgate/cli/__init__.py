"""Command-line interface for restgate."""

import asyncio

from restgate.cli.arg_parser import build_parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the restgate CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        raise SystemExit(1)

    try:
        if args.command == "serve":
            from restgate.cli.serve import run_serve

            exit_code = asyncio.run(run_serve(
                port=args.port,
                host=args.host,
                config_path=args.config,
                verbose=args.verbose,
                log_dir=args.log_dir,
            ))
        elif args.command == "send":
            from restgate.cli.send import cmd_send

            exit_code = asyncio.run(cmd_send(
                args.body,
                port=args.port,
                host=args.host,
                config_path=args.config,
                username=args.username,
                password=args.password,
                timeout=args.timeout,
            ))
        else:
            print(f"Unknown command: {args.command}")
            exit_code = 1
    except KeyboardInterrupt:
        # Ctrl+C stops the listener
        exit_code = 0

    raise SystemExit(exit_code)


__all__ = ["main"]
