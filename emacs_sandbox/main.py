"""CLI entrypoint (Typer + Rich).

`emacs-sandbox` without a subcommand opens the interactive shell, where the
last launched sandbox is remembered for /last and /persist. The other
subcommands run a single operation and exit.
"""

from __future__ import annotations

import logging
from typing import Optional

import typer
from rich.prompt import Prompt

from emacs_sandbox.command_line import sandbox_commands
from emacs_sandbox.command_line.command_registry import dispatch
from emacs_sandbox.config import get_verbose_logging
from emacs_sandbox.errors import SandboxError
from emacs_sandbox.messaging import emit_error, emit_info, get_console

app = typer.Typer(help="Isolated Emacs configuration sandboxes.")

EXIT_COMMANDS = {"/quit", "/exit", "quit", "exit"}


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def run_shell() -> None:
    """Read slash commands until /quit or end of input."""
    emit_info("[bold]emacs-sandbox[/bold] - type /help for commands, /quit to leave")
    _shell_loop()
    # Restarts queued by /last must not be dropped when the shell exits
    sandbox_commands.finish_pending(wait=True)


def _shell_loop() -> None:
    while True:
        sandbox_commands.finish_pending()
        try:
            line = Prompt.ask("[bold cyan]sandbox>[/bold cyan]", console=get_console())
        except (EOFError, KeyboardInterrupt):
            emit_info("")
            break

        line = line.strip()
        if not line:
            continue
        if line.lower() in EXIT_COMMANDS:
            break
        if not line.startswith("/"):
            line = "/" + line
        if not dispatch(line):
            emit_error(f"Unknown command: {line.split()[0]}")
            emit_info("Use `/help` to see available commands")


def _run_once(operation, *args, **kwargs):
    try:
        return operation(*args, **kwargs)
    except SandboxError as e:
        emit_error(str(e))
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output."),
):
    configure_logging(verbose or get_verbose_logging())
    if ctx.invoked_subcommand is None:
        run_shell()


@app.command()
def shell():
    """Start the interactive sandbox shell."""
    run_shell()


@app.command()
def checkout(
    name: Optional[str] = typer.Argument(None, help="Sandbox name or repository URL."),
    local: bool = typer.Option(False, "--local", help="Only launch existing sandboxes."),
):
    """Launch a sandbox, creating it from the catalog or a URL if needed."""
    if not _run_once(sandbox_commands.checkout_sandbox, name, local_only=local):
        raise typer.Exit(code=1)


@app.command("list")
def list_command():
    """Show local sandboxes and catalog entries."""
    _run_once(sandbox_commands.list_sandboxes)


@app.command("sync-links")
def sync_links():
    """Create missing inherited links in every sandbox."""
    _run_once(sandbox_commands.sync_all_links)


@app.command()
def unpersist():
    """Remove the launchers written by the shell's /persist."""
    _run_once(sandbox_commands.unpersist_sandbox)


@app.command()
def delete(name: str = typer.Argument(..., help="Sandbox to delete.")):
    """Delete a local sandbox."""
    _run_once(sandbox_commands.delete_sandbox, name)


if __name__ == "__main__":
    app()
