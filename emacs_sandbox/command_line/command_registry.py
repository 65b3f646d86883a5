"""Registry of slash commands for the interactive shell.

Handlers are plain functions taking the full command line and returning
True once the command has been handled.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

CommandHandler = Callable[[str], bool]


@dataclass
class CommandInfo:
    name: str
    description: str
    handler: CommandHandler
    usage: str = ""
    category: str = "sandbox"
    aliases: list[str] = field(default_factory=list)


_COMMANDS: dict[str, CommandInfo] = {}


def register_command(
    name: str,
    description: str,
    usage: str = "",
    category: str = "sandbox",
    aliases: Optional[list[str]] = None,
):
    """Decorator registering ``handler`` under ``/name`` and its aliases."""

    def decorator(handler: CommandHandler) -> CommandHandler:
        info = CommandInfo(
            name=name,
            description=description,
            handler=handler,
            usage=usage or f"/{name}",
            category=category,
            aliases=list(aliases or []),
        )
        for key in [name, *info.aliases]:
            _COMMANDS[key] = info
        return handler

    return decorator


def get_command(name: str) -> Optional[CommandInfo]:
    return _COMMANDS.get(name.lstrip("/").lower())


def get_registered_commands() -> list[CommandInfo]:
    """Unique commands in registration order."""
    seen = []
    for info in _COMMANDS.values():
        if info not in seen:
            seen.append(info)
    return seen


def dispatch(command: str) -> bool:
    """
    Run the handler for ``command``.

    Returns False when the line does not name a registered command.
    """
    tokens = command.strip().split()
    if not tokens:
        return False
    info = get_command(tokens[0])
    if info is None:
        return False
    return info.handler(command.strip())
