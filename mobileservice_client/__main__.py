#!/usr/bin/env python3

import os
import sys
import asyncio
import argparse
from typing import List, Optional

from mobileservice_client import err, serializer, settings as _settings
from mobileservice_client.client import MobileServiceClient
from mobileservice_client.misc.logger import setup_logging
from mobileservice_client.schemas import config


def get_parser(program: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=program)

    parser.add_argument(
        "--config",
        type=str,
        metavar="config",
        help="Use this config file instead of the default search paths"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging of all requests"
    )

    commands = parser.add_subparsers(
        description="Available sub-commands: init, lookup, delete",
        dest="command",
        required=True,
        metavar="<command>",
        help="the sub-command to be executed"
    )

    parser_init = commands.add_parser(
        "init",
        description="Create a new config file for the client"
    )
    parser_lookup = commands.add_parser(
        "lookup",
        description="Look up a single row of a table and print it as JSON"
    )
    parser_delete = commands.add_parser(
        "delete",
        description="Delete a single row of a table"
    )

    parser_init.add_argument(
        "--app-url",
        type=str,
        metavar="url",
        required=True,
        help="Base URL of the mobile service"
    )
    parser_init.add_argument(
        "--system-properties",
        type=str,
        nargs="*",
        default=[],
        metavar="name",
        help="System properties to request for all tables (use '*' for all of them)"
    )
    parser_init.add_argument(
        "--force",
        action="store_true",
        help="Allow overwriting existing files"
    )

    for p in [parser_lookup, parser_delete]:
        p.add_argument(
            "table",
            type=str,
            help="Name of the table"
        )
        p.add_argument(
            "id",
            type=str,
            help="String id of the row (use --numeric for numeric ids)"
        )
        p.add_argument(
            "--numeric",
            action="store_true",
            help="Interpret the id as numeric id"
        )
        p.add_argument(
            "--param",
            type=str,
            nargs=2,
            action="append",
            default=[],
            metavar=("name", "value"),
            help="Additional query parameter (may be used multiple times)"
        )

    return parser


def handle_init(args: argparse.Namespace) -> int:
    path = os.path.abspath(_settings.CONFIG_PATHS[0])
    if os.path.exists(path) and not args.force:
        print(f"File {path!r} already exists. Aborting!", file=sys.stderr)
        return 1
    try:
        conf = config.ClientConfig(app_url=args.app_url, system_properties=args.system_properties)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1
    _settings.store_configuration(conf, path)
    print(f"Successfully created the new config file {path!r}.")
    return 0


async def handle_row_command(args: argparse.Namespace, settings: _settings.Settings) -> int:
    try:
        element_or_id = int(args.id) if args.numeric else args.id
    except ValueError:
        print(f"Invalid numeric id {args.id!r}", file=sys.stderr)
        return 1

    async with MobileServiceClient(settings=settings) as client:
        table = client.get_table(args.table)
        try:
            if args.command == "lookup":
                print(serializer.dumps(await table.lookup(element_or_id, args.param)))
            else:
                response = await table.delete(element_or_id, args.param)
                print(f"Deleted row {args.id!r} from {args.table!r} (status {response.status}).")
        except err.MobileServiceException as exc:
            print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
            return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = get_parser(sys.argv[0]).parse_args(argv)

    if args.config:
        _settings.CONFIG_PATHS.insert(0, args.config)
    if args.command == "init":
        return handle_init(args)
    if args.config and not os.path.exists(args.config):
        print(f"Config file {args.config!r} not found. Aborting!", file=sys.stderr)
        return 1

    try:
        settings = _settings.Settings()
    except ValueError:
        print("Ensure that the configuration file is valid. Please correct any errors.", file=sys.stderr)
        raise
    if args.debug:
        settings.logging.root["level"] = "DEBUG"
        for handler in settings.logging.handlers:
            settings.logging.handlers[handler]["level"] = "DEBUG"
    setup_logging(settings)

    if settings.app_url is None:
        print("No app URL configured. Use the 'init' command first.", file=sys.stderr)
        return 1
    return asyncio.run(handle_row_command(args, settings))


if __name__ == "__main__":
    sys.exit(main())
