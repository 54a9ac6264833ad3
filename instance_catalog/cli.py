"""CLI interface for the instance catalog.

Entry point: instance-catalog [--config PATH] [--instances-dir PATH] <subcommand> [args...]
"""

import argparse
import asyncio
import json
import logging
import os
import signal
import sys
import uuid
from pathlib import Path

from .commands import CommandResult, dispatch
from .config import CONFIG_FILE, LOG_DIR
from .errors import InstanceError, classify_exception
from .logging_config import get_logger, setup_process_logging
from .state import AppState

logger = get_logger(__name__)


def _report(args, result: CommandResult, render=None) -> None:
    """Print a command result and exit 1 on failure."""
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.ok:
        if render is not None:
            render(result.data)
    else:
        error = result.error
        print(f"Error [{error.category}]: {error.text}")
        if error.instance_id and not error.fatal:
            print(f"  Instance {error.instance_id} was created anyway.")
    if not result.ok:
        sys.exit(1)


def _print_instance(data: dict) -> None:
    print(f"  {data['name']}")
    print(f"    ID:    {data['id']}")
    print(f"    Order: {data['order_index']}")


# --- Subcommands ---


def cmd_create(args):
    """Create a new instance."""
    result = dispatch(args.state, "create_instance", instance_name=args.name, image_path=args.image)

    def render(data):
        print(f"Created instance '{data['name']}'.")
        print(f"  ID: {data['id']}")

    _report(args, result, render)


def cmd_delete(args):
    """Delete an instance and its directory."""
    result = dispatch(args.state, "delete_instance", instance_id=args.id)
    _report(args, result, lambda _: print(f"Deleted instance {args.id}."))


def cmd_info(args):
    """Show one instance, read from the index file."""
    result = dispatch(args.state, "get_instance_info", instance_id=args.id)

    def render(data):
        _print_instance(data)
        store = args.state.store()
        instance_id = uuid.UUID(data["id"])
        image = store.image_path(instance_id)
        print(f"    Path:  {store.instance_dir(instance_id)}")
        if image:
            print(f"    Image: {image}")

    _report(args, result, render)


def cmd_list(args):
    """List instances from the cached index."""
    result = dispatch(args.state, "get_instances_index")

    def render(data):
        instances = data["instances"]
        if not instances:
            print("No instances.")
            print("  Use 'instance-catalog create <name>' to create one.")
            return
        print("=== Instances ===")
        for entry in instances:
            print()
            _print_instance(entry)

    _report(args, result, render)


def cmd_refresh(args):
    """Reload the cached index from disk."""
    result = dispatch(args.state, "refresh_instances_index")
    _report(args, result, lambda _: print("Index refreshed."))


def cmd_watch(args):
    """Watch the index file and print the listing whenever it changes."""
    from .watcher import IndexWatcher

    async def on_refresh(index):
        print(f"Index changed: {len(index.instances)} instance(s)")
        for info in index.instances:
            print(f"  {info.id}  {info.name}")

    async def run():
        watcher = IndexWatcher(args.state, on_refresh, poll_interval=args.interval)
        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop.set)
            except NotImplementedError:
                # Windows: fall back to KeyboardInterrupt
                pass
        await watcher.start()
        logger.info("Press Ctrl+C to stop")
        try:
            await stop.wait()
        finally:
            await watcher.stop()
            logger.info("Watcher stopped.")

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


def cmd_config_show(args):
    """Show the current configuration."""
    result = dispatch(args.state, "get_config")

    def render(data):
        print(f"Instances directory: {data['instances_dir']}")
        print(f"Game directory:      {data['game_dir'] or '(not set)'}")

    _report(args, result, render)


def cmd_config_set_instances_dir(args):
    """Change where instances are stored."""
    path = str(Path(args.path).expanduser().resolve())
    result = dispatch(args.state, "set_instances_directory", path=path)
    _report(args, result, lambda _: print(f"Instances directory set to {path}"))


def cmd_config_set_game_dir(args):
    """Change the game directory."""
    path = str(Path(args.path).expanduser().resolve())
    result = dispatch(args.state, "set_game_directory", path=path)
    _report(args, result, lambda _: print(f"Game directory set to {path}"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="instance-catalog",
        description="Manage mod manager instances",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", "-c", help="Config file path (default: $INSTANCE_CATALOG_CONFIG or ~/.config)")
    parser.add_argument("--instances-dir", help="Override the instances directory for this run")
    parser.add_argument("--json", action="store_true", help="Print command results as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- Instance subcommands ---

    create_parser = subparsers.add_parser("create", help="Create an instance")
    create_parser.add_argument("name", help="Display name")
    create_parser.add_argument("--image", "-i", help="Cover image to copy into the instance")
    create_parser.set_defaults(func=cmd_create)

    delete_parser = subparsers.add_parser("delete", help="Delete an instance")
    delete_parser.add_argument("id", help="Instance ID")
    delete_parser.set_defaults(func=cmd_delete)

    info_parser = subparsers.add_parser("info", help="Show an instance")
    info_parser.add_argument("id", help="Instance ID")
    info_parser.set_defaults(func=cmd_info)

    list_parser = subparsers.add_parser("list", help="List instances")
    list_parser.set_defaults(func=cmd_list)

    refresh_parser = subparsers.add_parser("refresh", help="Reload the cached index from disk")
    refresh_parser.set_defaults(func=cmd_refresh)

    watch_parser = subparsers.add_parser("watch", help="Watch the index file for changes")
    watch_parser.add_argument("--interval", type=float, default=2.0, help="Poll interval in seconds")
    watch_parser.set_defaults(func=cmd_watch)

    # --- Config subcommands ---

    config_parser = subparsers.add_parser("config", help="Show or change configuration")
    config_sub = config_parser.add_subparsers(dest="config_command", required=True)

    show_parser = config_sub.add_parser("show", help="Show configuration")
    show_parser.set_defaults(func=cmd_config_show)

    set_instances_parser = config_sub.add_parser("set-instances-dir", help="Set the instances directory")
    set_instances_parser.add_argument("path")
    set_instances_parser.set_defaults(func=cmd_config_set_instances_dir)

    set_game_parser = config_sub.add_parser("set-game-dir", help="Set the game directory")
    set_game_parser.add_argument("path")
    set_game_parser.set_defaults(func=cmd_config_set_game_dir)

    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    process = "watch" if args.command == "watch" else "cli"
    setup_process_logging(
        process,
        log_dir=LOG_DIR if args.command == "watch" else None,
        level=logging.DEBUG if args.verbose else logging.WARNING if process == "cli" else logging.INFO,
    )

    config_path = Path(args.config or os.environ.get("INSTANCE_CATALOG_CONFIG") or CONFIG_FILE).expanduser()
    instances_dir = args.instances_dir or os.environ.get("INSTANCES_DIR")

    try:
        args.state = AppState.bootstrap(
            config_path=config_path,
            instances_dir=Path(instances_dir).expanduser() if instances_dir else None,
        )
    except InstanceError as e:
        error = classify_exception(e)
        print(f"Startup failed [{error.category}]: {error.text}")
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
