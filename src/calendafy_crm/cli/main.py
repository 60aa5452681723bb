"""Main CLI entry point."""

import argparse
import json
import logging
import os
import sys
from pathlib import Path


def main() -> None:
    """Parse args and dispatch to subcommands."""
    parser = argparse.ArgumentParser(prog="calendafy-crm", description="Calendafy CRM API adapter")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # run
    run_parser = subparsers.add_parser("run", help="Run one operation over a batch of items")
    run_parser.add_argument(
        "--resource",
        required=True,
        choices=["account", "appointment", "contact", "deal", "note", "salesActivity", "search", "task"],
        help="Resource to operate on",
    )
    run_parser.add_argument(
        "--operation",
        required=True,
        choices=["create", "get", "getAll", "update", "delete", "query", "lookup"],
        help="Operation to apply to every item",
    )
    run_parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="JSON file holding an item object or an array of items",
    )
    run_parser.add_argument(
        "--continue-on-fail",
        action="store_true",
        help="Record per-item errors instead of aborting the batch",
    )
    run_parser.add_argument(
        "--timezone",
        type=str,
        default=None,
        help="Default timezone for dates without one (default: $CALENDAFY_DEFAULT_TIMEZONE or UTC)",
    )
    run_parser.add_argument(
        "--credentials",
        type=Path,
        default=None,
        help="Credentials YAML (default: CALENDAFY_* environment variables)",
    )
    run_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write results to file (default: stdout)",
    )

    # options
    options_parser = subparsers.add_parser("options", help="Print a dynamic option list (views, users...)")
    options_parser.add_argument("name", help="Option list name, e.g. users, deal_stages, contact_views")
    options_parser.add_argument(
        "--credentials",
        type=Path,
        default=None,
        help="Credentials YAML (default: CALENDAFY_* environment variables)",
    )

    # webhook
    webhook_parser = subparsers.add_parser("webhook", help="Normalize a webhook notification payload")
    webhook_parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="JSON file with the notification body",
    )

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "run":
        _run_batch(args)
    elif args.command == "options":
        _run_options(args)
    elif args.command == "webhook":
        _run_webhook(args)
    else:
        parser.print_help()


def _load_credentials(path: Path | None):
    """Credentials from YAML when given, else from the environment."""
    from pydantic import ValidationError

    from calendafy_crm.models.credentials import CalendafyCredentials

    try:
        if path is not None:
            return CalendafyCredentials.from_yaml(path)
        return CalendafyCredentials.from_env()
    except ValidationError as e:
        raise SystemExit(f"Invalid Calendafy credentials: {e}")


def _read_json(path: Path):
    try:
        return json.loads(path.read_text())
    except (OSError, ValueError) as e:
        raise SystemExit(f"Could not read JSON from {path}: {e}")


def _run_batch(args: argparse.Namespace) -> None:
    """Run the run command."""
    from calendafy_crm.client import CalendafyClient
    from calendafy_crm.dispatch import OperationDispatcher
    from calendafy_crm.errors import CalendafyError

    data = _read_json(args.input)
    items = data if isinstance(data, list) else [data]
    timezone = args.timezone or os.environ.get("CALENDAFY_DEFAULT_TIMEZONE") or "UTC"

    with CalendafyClient(_load_credentials(args.credentials)) as client:
        dispatcher = OperationDispatcher(client)
        try:
            batch = dispatcher.run(
                items,
                args.resource,
                args.operation,
                continue_on_fail=args.continue_on_fail,
                default_timezone=timezone,
            )
        except CalendafyError as e:
            raise SystemExit(f"Error: {e}")

    output = json.dumps(batch.to_json_items(), indent=2, default=str)
    if args.output:
        args.output.write_text(output, encoding="utf-8")
        print(f"Wrote {len(batch)} results ({len(batch.errors)} failed) to {args.output}")
    else:
        print(output)


def _run_options(args: argparse.Namespace) -> None:
    """Run the options command."""
    from calendafy_crm.client import CalendafyClient, OptionsLoader
    from calendafy_crm.errors import CalendafyError

    if args.name not in OptionsLoader.available():
        print(f"Unknown option list: {args.name}. Available: {OptionsLoader.available()}", file=sys.stderr)
        raise SystemExit(1)

    with CalendafyClient(_load_credentials(args.credentials)) as client:
        try:
            options = OptionsLoader(client).load(args.name)
        except CalendafyError as e:
            raise SystemExit(f"Error: {e}")
    print(json.dumps([o.model_dump(mode="json") for o in options], indent=2, default=str))


def _run_webhook(args: argparse.Namespace) -> None:
    """Run the webhook command."""
    from calendafy_crm.errors import CalendafyError
    from calendafy_crm.webhooks import normalize_notifications

    try:
        events = normalize_notifications(_read_json(args.input))
    except CalendafyError as e:
        raise SystemExit(f"Error: {e}")
    print(json.dumps(events, indent=2, default=str))


if __name__ == "__main__":
    main()
