"""
Command line interface for driving Atlas instances.

Examples:
    atlas-lifecycle create example-instance-01 cpu.2x
    atlas-lifecycle stop <instance-id>
    atlas-lifecycle list
    atlas-lifecycle run --timeout 1800
"""

import argparse
import sys
from pathlib import Path
from typing import Any

from tabulate import tabulate  # type: ignore[import-untyped]

from .api.client import client_from_config
from .core.context import Context
from .core.polling import poll_settings_from_config
from .core.state import Instance
from .instances.lifecycle import (
    LifecycleStep,
    create_instance,
    delete_instance,
    get_instance,
    list_instances,
    run_lifecycle,
    start_instance,
    stop_instance,
)
from .utils.config import load_config, require_config
from .utils.exceptions import AtlasError, ConfigurationError
from .utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def print_instances_table(instances: list[Instance]) -> None:
    """Print instances in a table."""
    if not instances:
        print("No instances found.")
        return

    table_data = [
        [
            instance.id,
            instance.name,
            instance.type,
            instance.state.label,
            "yes" if instance.ephemeral else "no",
        ]
        for instance in instances
    ]
    headers = ["ID", "Name", "Type", "State", "Ephemeral"]
    print(tabulate(table_data, headers=headers, tablefmt="grid"))


def print_steps_table(steps: list[LifecycleStep]) -> None:
    """Print the outcome of a lifecycle run."""
    table_data = [
        [step.step, step.instance_id, step.state.upper(), f"{step.seconds:.1f}s"]
        for step in steps
    ]
    headers = ["Step", "Instance", "State", "Elapsed"]
    print(tabulate(table_data, headers=headers, tablefmt="grid"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atlas-lifecycle", description="Drive Atlas compute instances"
    )
    parser.add_argument("--config", type=Path, help="JSON configuration file")
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL or INFO)")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument(
        "--timeout",
        type=float,
        help="Cancel the whole command after this many seconds",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Create an instance and wait until running")
    create.add_argument("name")
    create.add_argument("type")
    create.add_argument(
        "--persistent",
        action="store_true",
        help="Create a non-ephemeral instance",
    )

    for command, help_text in [
        ("stop", "Stop an instance and wait until stopped"),
        ("start", "Start an instance and wait until running"),
        ("delete", "Delete an instance and wait until gone"),
        ("show", "Show one instance"),
    ]:
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("instance_id")

    subparsers.add_parser("list", help="List instances in the project")

    run = subparsers.add_parser("run", help="Create, stop, start and delete one instance")
    run.add_argument("--name", default="example-instance-01")
    run.add_argument("--type", default="cpu.2x")

    return parser


def dispatch(args: argparse.Namespace, config: dict[str, Any]) -> None:
    project_id = str(config["ATLAS_PROJECT_ID"])
    client = client_from_config(config)
    settings = poll_settings_from_config(config)
    ctx = Context.with_timeout(args.timeout) if args.timeout else Context()

    if args.command == "create":
        instance = create_instance(
            client,
            project_id,
            args.name,
            args.type,
            ephemeral=not args.persistent,
            ctx=ctx,
            settings=settings,
        )
        print_instances_table([instance])
    elif args.command == "stop":
        print_instances_table(
            [stop_instance(client, project_id, args.instance_id, ctx=ctx, settings=settings)]
        )
    elif args.command == "start":
        print_instances_table(
            [start_instance(client, project_id, args.instance_id, ctx=ctx, settings=settings)]
        )
    elif args.command == "delete":
        delete_instance(client, project_id, args.instance_id, ctx=ctx, settings=settings)
        print(f"Deleted instance {args.instance_id}")
    elif args.command == "show":
        print_instances_table([get_instance(client, project_id, args.instance_id)])
    elif args.command == "list":
        print_instances_table(list_instances(client, project_id))
    elif args.command == "run":
        steps = run_lifecycle(
            client, project_id, args.name, args.type, ctx=ctx, settings=settings
        )
        print_steps_table(steps)


def main(argv: list[str] | None = None) -> int:
    """Entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        setup_logging(args.log_level or "INFO", args.log_file)
        logger.error(f"Configuration error: {e}")
        return 1

    setup_logging(args.log_level or str(config.get("LOG_LEVEL", "INFO")), args.log_file)

    try:
        require_config(config)
        dispatch(args, config)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except AtlasError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
