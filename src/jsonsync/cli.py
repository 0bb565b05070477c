"""CLI entrypoint for jsonsync."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonsync.client.resource_client import ResourceClient, ResourceClientFactory
from jsonsync.config.loader import (
    get_resource_options,
    get_resource_path,
    list_resources,
    load_config,
)
from jsonsync.errors import ConfigurationError, RequestError
from jsonsync.sync.synchronizer import IS_FULLY_LOADED, IS_LOADING_ERROR, create_instance
from jsonsync.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def _load_cli_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Load the config named on the command line, or the default one if present."""
    if args.config:
        return load_config(Path(args.config))
    try:
        return load_config()
    except FileNotFoundError:
        logger.debug("No config file found, using built-in defaults")
        return {"version": 1}


def _make_client(args: argparse.Namespace, config: Dict[str, Any]) -> ResourceClient:
    factory = ResourceClientFactory.from_config(config)
    if args.server_url:
        factory.server_url = args.server_url
    return factory.create_instance(get_resource_path(config, args.resource))


def _parse_filters(raw_filters: Optional[List[str]]) -> Dict[str, Any]:
    filters: Dict[str, Any] = {}
    for raw in raw_filters or []:
        key, sep, value = raw.partition("=")
        if not sep or not key:
            raise ConfigurationError(f"Invalid filter '{raw}', expected key=value")
        filters[key] = value
    return filters


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def cmd_resources(args: argparse.Namespace) -> int:
    """List configured resources."""
    config = _load_cli_config(args)
    names = list_resources(config)
    if not names:
        print("No resources configured.")
        return 0

    print(f"{'Name':<24} {'Path':<24} {'Page size':<10}")
    print("-" * 60)
    for name in names:
        options = get_resource_options(config, name)
        print(f"{name:<24} {get_resource_path(config, name):<24} {options.get('page_size', ''):<10}")
    return 0


def cmd_find(args: argparse.Namespace) -> int:
    """List a page of a resource, or every page with --all."""
    config = _load_cli_config(args)
    client = _make_client(args, config)

    query = _parse_filters(args.filter)
    if args.text:
        query["text_search"] = args.text

    if not args.all:
        page_size = args.page_size or get_resource_options(config, args.resource)["page_size"]
        response = client.find(query, page=args.page, page_size=page_size)
        _print_json(response.items)
        return 0

    options = get_resource_options(config, args.resource)
    if args.page_size:
        options["page_size"] = args.page_size
    options["collection_field_name"] = "items"
    target: Dict[str, Any] = {}
    synchronizer = create_instance(client, target, options)

    page = synchronizer.load(query)
    while not target.get(IS_LOADING_ERROR) and not target.get(IS_FULLY_LOADED):
        # Without a total count, a short page marks the end
        if len(page) < synchronizer.config.page_size:
            break
        loaded_before = len(target["items"])
        page = synchronizer.load_more(query)
        if not target.get(IS_LOADING_ERROR) and len(target["items"]) == loaded_before:
            logger.warning(f"Page {target['current_page']} of {client.url} added no new items, stopping")
            break

    if target.get(IS_LOADING_ERROR):
        print(f"Error: {json.dumps(page, default=str)}", file=sys.stderr)
        return 1
    logger.info(f"Loaded {len(target['items'])} items from {client.url}")
    _print_json(target["items"])
    return 0


def cmd_get(args: argparse.Namespace) -> int:
    """Fetch a single item."""
    config = _load_cli_config(args)
    client = _make_client(args, config)
    _print_json(client.find_one(args.id))
    return 0


def cmd_put(args: argparse.Namespace) -> int:
    """Create or update an item from inline JSON or a JSON file."""
    config = _load_cli_config(args)
    client = _make_client(args, config)

    if args.file:
        raw = Path(args.file).read_text(encoding="utf-8")
    else:
        raw = args.data
    try:
        item = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Item is not valid JSON: {e}") from e
    if not isinstance(item, dict):
        raise ConfigurationError("Item must be a JSON object")

    _print_json(client.put(item))
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    """Delete a single item."""
    config = _load_cli_config(args)
    client = _make_client(args, config)
    _print_json(client.destroy(args.id))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonsync",
        description="Query and page through json-server style REST resources",
    )
    parser.add_argument("--config", type=str, help="Path to config file (default: jsonsync.config.yaml)")
    parser.add_argument("--server-url", type=str, help="Override the server URL from config")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    resources_parser = subparsers.add_parser("resources", help="List configured resources")
    resources_parser.set_defaults(func=cmd_resources)

    find_parser = subparsers.add_parser("find", help="List items of a resource")
    find_parser.add_argument("resource", help="Resource name or path")
    find_parser.add_argument("--text", type=str, help="Full text search")
    find_parser.add_argument("--page", type=int, default=0, help="Page to load (default: 0)")
    find_parser.add_argument("--page-size", type=int, help="Items per page (default: from config)")
    find_parser.add_argument(
        "--filter",
        action="append",
        metavar="KEY=VALUE",
        help="Filter passed through as a query parameter (repeatable)",
    )
    find_parser.add_argument("--all", action="store_true", help="Load every page")
    find_parser.set_defaults(func=cmd_find)

    get_parser = subparsers.add_parser("get", help="Fetch a single item")
    get_parser.add_argument("resource", help="Resource name or path")
    get_parser.add_argument("id", help="Item id")
    get_parser.set_defaults(func=cmd_get)

    put_parser = subparsers.add_parser("put", help="Create or update an item")
    put_parser.add_argument("resource", help="Resource name or path")
    source_group = put_parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument("--data", type=str, help="Item as inline JSON")
    source_group.add_argument("--file", type=str, help="Path to a JSON file with the item")
    put_parser.set_defaults(func=cmd_put)

    delete_parser = subparsers.add_parser("delete", help="Delete an item")
    delete_parser.add_argument("resource", help="Resource name or path")
    delete_parser.add_argument("id", help="Item id")
    delete_parser.set_defaults(func=cmd_delete)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if not args.command:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except RequestError as e:
        logger.error(f"Request failed for '{args.command}': {e}")
        print(f"Error: {json.dumps(e.payload, default=str)}", file=sys.stderr)
        return 1
    except (ConfigurationError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise


if __name__ == "__main__":
    sys.exit(main())
