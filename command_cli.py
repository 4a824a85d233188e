#!/usr/bin/env python3
"""
Command-line entry point for command code generation.

Run with:
    command-codes encode LEFT GRAB LEFT BACK LEFT BACK LEFT
    command-codes lookup LEFT --log LEFT GRAB LEFT BACK
"""
import argparse
import json
import logging
import sys

from command_core import get_codes_from_commands
from command_errors import CommandCodesError, CommandLogNotFoundError, CommandNotFoundError
from command_service import CommandEncodingService, ServiceConfig
from command_types import code_response

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_INVALID = 2


def build_parser():
    parser = argparse.ArgumentParser(
        prog="command-codes",
        description="Generate frequency-based prefix codes for command names",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable INFO logging")
    parser.add_argument(
        "--max-logs",
        type=int,
        default=None,
        help="Maximum number of stored command logs (default: COMMAND_CODES_MAX_LOGS or 100)",
    )
    subparsers = parser.add_subparsers(dest="action", required=True)

    encode = subparsers.add_parser("encode", help="Print the code table for a command log")
    encode.add_argument("commands", nargs="+", help="Command names in log order")
    encode.add_argument("--json", action="store_true", help="Print the table as JSON")

    lookup = subparsers.add_parser("lookup", help="Print the code of one command in a log")
    lookup.add_argument("command", help="Command name to look up")
    lookup.add_argument("--log", nargs="+", required=True, dest="log", help="Command names in log order")
    return parser


def format_code_table(codes):
    """Render codes sorted by code length, then command name."""
    rows = sorted(codes.items(), key=lambda item: (len(item[1]), item[0]))
    width = max((len(command) for command, _ in rows), default=0)
    return "\n".join(f"{command:<{width}} | {code}".rstrip() for command, code in rows)


def run_encode(args):
    codes = get_codes_from_commands(args.commands)
    if args.json:
        print(json.dumps(codes, indent=2, sort_keys=True))
    else:
        print(format_code_table(codes))
    return EXIT_OK


def run_lookup(args, config):
    service = CommandEncodingService(config=config)
    service.submit_commands(args.log)
    try:
        code = service.code_for_command(args.command)
    except (CommandNotFoundError, CommandLogNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_NOT_FOUND
    print(json.dumps(code_response(code)))
    return EXIT_OK


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        if args.max_logs is not None:
            config = ServiceConfig(max_command_logs=args.max_logs)
        else:
            config = ServiceConfig.from_env()
        if args.action == "encode":
            return run_encode(args)
        return run_lookup(args, config)
    except (CommandCodesError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
