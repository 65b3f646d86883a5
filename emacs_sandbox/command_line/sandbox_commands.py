"""Command handlers for sandbox management.

This module contains @register_command decorated handlers for the
interactive shell, plus the operations behind them, which the one-shot
CLI commands call directly.
"""

from pathlib import Path
from typing import Optional

from rich.markdown import Markdown
from rich.table import Table

from emacs_sandbox.command_line.command_registry import (
    get_registered_commands,
    register_command,
)
from emacs_sandbox.errors import SandboxError
from emacs_sandbox.messaging import (
    confirm,
    emit_error,
    emit_info,
    emit_success,
    emit_warning,
)
from emacs_sandbox.sandbox.manager import SandboxManager
from emacs_sandbox.sandbox.session import session_label

# Shared by every command so the last launch is remembered between them
_MANAGER: Optional[SandboxManager] = None

# Seconds /last waits for a killed editor before leaving the restart queued
RELAUNCH_WAIT = 10


def get_manager() -> SandboxManager:
    """Get or create the process-wide sandbox manager."""
    global _MANAGER
    if _MANAGER is None:
        _MANAGER = SandboxManager()
    return _MANAGER


def set_manager(manager: Optional[SandboxManager]) -> None:
    global _MANAGER
    _MANAGER = manager


# --- operations ---


def checkout_sandbox(name: Optional[str] = None, local_only: bool = False) -> bool:
    """
    Launch a sandbox, creating it first if needed.

    Without a name the user picks one interactively. A name that is a
    repository reference creates a sandbox from it. Returns False when the
    user made no usable choice.
    """
    manager = get_manager()
    spec = None
    if name is None:
        selection = manager.selector.select()
        if selection.is_empty:
            emit_warning("No sandbox selected")
            return False
        name, spec = selection.name, selection.spec
    else:
        selection = manager.selector.resolve(name)
        if not selection.is_empty:
            name, spec = selection.name, selection.spec

    manager.launcher.checkout(name, spec=spec, local_only=local_only)
    emit_success(f"Launched sandbox {name} ({manager.resolver.directory_for(name)})")
    return True


def start_last_sandbox() -> None:
    manager = get_manager()
    name, _ = manager.state.require()
    was_running = manager.registry.is_alive(session_label(name))

    future = manager.launcher.start_last(confirm=confirm)
    if future is not None:
        emit_info(f"Stopping sandbox {name}...")
        if not manager.launcher.run_pending(timeout=RELAUNCH_WAIT):
            emit_warning(f"Sandbox {name} is still shutting down; it restarts once it exits")
    elif was_running:
        emit_warning(f"Sandbox {name} left running")
    else:
        emit_success(f"Launched sandbox {name}")


def finish_pending(wait: bool = False) -> int:
    """
    Carry out restarts queued by /last whose editors have exited. With
    ``wait`` set, block until every queued editor is gone.
    """
    if _MANAGER is None or not _MANAGER.launcher.has_pending():
        return 0
    if wait:
        emit_info("Waiting for stopped sandboxes to exit so they can restart...")
        return _MANAGER.launcher.run_pending(timeout=None)
    return _MANAGER.launcher.run_pending()


def persist_last_sandbox() -> list[Path]:
    written = get_manager().persistence.persist(confirm=confirm)
    if not written:
        emit_warning("Nothing written")
    for path in written:
        emit_success(f"Wrote {path}")
    return written


def unpersist_sandbox() -> list[Path]:
    manager = get_manager()
    removed = manager.persistence.unpersist(confirm=confirm)
    if not removed:
        emit_info(f"No sandbox launchers removed from {manager.persistence.script_dir}")
    for path in removed:
        emit_success(f"Removed {path}")
    return removed


def sync_all_links() -> list[str]:
    manager = get_manager()
    names = manager.synchronizer.sync_all(manager.resolver)
    emit_success(f"Refreshed inherited links in {len(names)} sandbox(es)")
    return names


def delete_sandbox(name: str) -> bool:
    manager = get_manager()
    path = manager.resolver.directory_for(name)
    if not confirm(f"Delete sandbox {name} and everything under {path}?"):
        emit_warning(f"Kept sandbox {name}")
        return False
    manager.initializer.delete(name)
    emit_success(f"Deleted sandbox {name}")
    return True


def list_sandboxes() -> Table:
    manager = get_manager()
    local = manager.resolver.list_local_sandboxes()
    candidates = manager.selector.catalog_candidates(local)

    table = Table(title="Sandboxes", show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("State")
    table.add_column("Repository", style="dim")
    for name in local:
        running = manager.registry.is_alive(session_label(name))
        table.add_row(name, "running" if running else "local", "")
    for name, entry in candidates.items():
        table.add_row(name, "catalog", entry.repo)
    emit_info(table)
    return table


# --- slash commands ---


@register_command(
    name="checkout",
    description="Pick a sandbox (or repository URL) and launch it, creating it if needed",
    usage="/checkout [name|url] [--local]",
    aliases=["co"],
)
def handle_checkout_command(command: str) -> bool:
    tokens = command.split()[1:]
    local_only = "--local" in tokens
    args = [t for t in tokens if t != "--local"]
    try:
        checkout_sandbox(args[0] if args else None, local_only=local_only)
    except SandboxError as e:
        emit_error(f"Failed to launch sandbox: {e}")
    return True


@register_command(
    name="last",
    description="Launch the last sandbox again, offering to kill it if still running",
    aliases=["restart"],
)
def handle_last_command(command: str) -> bool:
    try:
        start_last_sandbox()
    except SandboxError as e:
        emit_error(str(e))
    return True


@register_command(
    name="persist",
    description="Write launchers that always start the editor in the last sandbox",
)
def handle_persist_command(command: str) -> bool:
    try:
        persist_last_sandbox()
    except SandboxError as e:
        emit_error(f"Failed to persist sandbox: {e}")
    return True


@register_command(
    name="unpersist",
    description="Remove the launchers written by /persist",
)
def handle_unpersist_command(command: str) -> bool:
    try:
        unpersist_sandbox()
    except OSError as e:
        emit_error(f"Failed to remove launchers: {e}")
    return True


@register_command(
    name="sync-links",
    description="Create missing inherited links in every sandbox",
    aliases=["sync"],
)
def handle_sync_links_command(command: str) -> bool:
    try:
        sync_all_links()
    except OSError as e:
        emit_error(f"Failed to refresh links: {e}")
    return True


@register_command(
    name="list",
    description="Show local sandboxes and catalog entries",
    aliases=["ls"],
)
def handle_list_command(command: str) -> bool:
    try:
        list_sandboxes()
    except SandboxError as e:
        emit_error(str(e))
    return True


@register_command(
    name="delete",
    description="Delete a local sandbox",
    usage="/delete <name>",
    aliases=["rm"],
)
def handle_delete_command(command: str) -> bool:
    tokens = command.split()
    if len(tokens) < 2:
        emit_error("Usage: /delete <name>")
        return True
    try:
        delete_sandbox(tokens[1])
    except (SandboxError, OSError) as e:
        emit_error(f"Failed to delete sandbox: {e}")
    return True


@register_command(
    name="status",
    description="Show configuration and the last launched sandbox",
)
def handle_status_command(command: str) -> bool:
    status = get_manager().get_status()
    status_text = f"""
# Sandbox Status

**Sandbox root:** {status['sandbox_root']}
**Script directory:** {status['script_dir']}
**Editor:** {status['editor']}
**Picker:** {status['picker']}
**Display available:** {"Yes" if status['display_available'] else "No"}

**Local sandboxes:** {len(status['local_sandboxes'])}
**Catalog entries:** {status['catalog_size']}
**Last sandbox:** {status['last_sandbox'] or "none"}
"""
    if status["inherited_paths"]:
        status_text += "\n**Inherited paths:**\n"
        for path in status["inherited_paths"]:
            status_text += f"  - {path}\n"

    emit_info(Markdown(status_text))
    return True


@register_command(
    name="help",
    description="List available commands",
    aliases=["?"],
)
def handle_help_command(command: str) -> bool:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Command")
    table.add_column("Description")
    for info in get_registered_commands():
        table.add_row(info.usage, info.description)
    table.add_row("/quit", "Leave the shell")
    emit_info(table)
    return True
