"""
User-facing output helpers.

All terminal output goes through a shared rich console so commands render
consistently and tests can swap the console or the confirmation hook.
"""

from rich.console import Console
from rich.prompt import Confirm

_console = Console(highlight=False)


def get_console() -> Console:
    return _console


def set_console(console: Console) -> None:
    """Replace the shared console (used by tests to capture output)."""
    global _console
    _console = console


def emit_info(message) -> None:
    _console.print(message)


def emit_success(message: str) -> None:
    _console.print(f"[bold green]{message}[/bold green]")


def emit_warning(message: str) -> None:
    _console.print(f"[yellow]{message}[/yellow]")


def emit_error(message: str) -> None:
    _console.print(f"[bold red]{message}[/bold red]")


def emit_transient(message: str) -> None:
    """Show a short-lived status line such as a cleanup notice."""
    _console.print(f"[dim]{message}[/dim]")


def confirm(question: str, default: bool = False) -> bool:
    """Ask a yes/no question before a destructive action."""
    return Confirm.ask(question, console=_console, default=default)
