"""Command layer — exposes catalog operations to the surrounding application.

Every command takes JSON-friendly arguments and returns a CommandResult:
either ok with JSON-ready data, or a classified failure. Exceptions never
escape dispatch().
"""

import inspect
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from . import manager
from .errors import ErrorInfo, InvalidInputError, classify_exception
from .logging_config import get_logger
from .state import AppState

logger = get_logger(__name__)


@dataclass
class CommandResult:
    ok: bool
    data: Any = None
    error: ErrorInfo | None = None

    def to_dict(self) -> dict:
        if self.ok:
            return {"ok": True, "data": self.data}
        return {"ok": False, "error": self.error.to_dict() if self.error else None}


def _parse_id(value: str | uuid.UUID) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError as e:
        raise InvalidInputError(f"Not a valid instance ID: {value!r}") from e


def _parse_path(value: str | Path, what: str) -> Path:
    if not isinstance(value, (str, Path)) or not str(value):
        raise InvalidInputError(f"Not a valid {what} path: {value!r}")
    return Path(value)


# --- Commands ---


def create_instance(state: AppState, instance_name: str, image_path: str | None = None) -> dict:
    image = _parse_path(image_path, "image") if image_path is not None else None
    info = manager.create_instance(state, instance_name, image)
    return info.to_dict()


def delete_instance(state: AppState, instance_id: str) -> None:
    manager.delete_instance(state, _parse_id(instance_id))


def get_instance_info(state: AppState, instance_id: str) -> dict:
    return manager.get_instance_info(state, _parse_id(instance_id)).to_dict()


def get_instances_index(state: AppState) -> dict:
    return manager.get_instances_index(state).to_dict()


def refresh_instances_index(state: AppState) -> None:
    manager.refresh_instances_index(state)


def get_config(state: AppState) -> dict:
    return state.config.snapshot().to_dict()


def set_instances_directory(state: AppState, path: str) -> None:
    state.config.set_instances_dir(_parse_path(path, "instances directory"))


def set_game_directory(state: AppState, path: str | None) -> None:
    # None or "" clears the game directory
    state.config.set_game_dir(_parse_path(path, "game directory") if path not in (None, "") else None)


COMMANDS: dict[str, Callable[..., Any]] = {
    "create_instance": create_instance,
    "delete_instance": delete_instance,
    "get_instance_info": get_instance_info,
    "get_instances_index": get_instances_index,
    "refresh_instances_index": refresh_instances_index,
    "get_config": get_config,
    "set_instances_directory": set_instances_directory,
    "set_game_directory": set_game_directory,
}


def dispatch(state: AppState, command: str, **kwargs: Any) -> CommandResult:
    """Run a named command and wrap its outcome."""
    func = COMMANDS.get(command)
    if func is None:
        error = classify_exception(InvalidInputError(f"Unknown command: {command}"))
        return CommandResult(ok=False, error=error)

    try:
        inspect.signature(func).bind(state, **kwargs)
    except TypeError as e:
        error = classify_exception(InvalidInputError(f"Bad arguments for {command}: {e}"))
        return CommandResult(ok=False, error=error)

    try:
        data = func(state, **kwargs)
    except Exception as e:
        error = classify_exception(e)
        logger.error("Command %s failed [%s]: %s", command, error.category, error.text)
        return CommandResult(ok=False, error=error)

    return CommandResult(ok=True, data=data)
