"""
Launching editor sessions inside sandboxes.
"""

import logging
import os
import subprocess
import threading
import time
from concurrent import futures
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence, Union

from emacs_sandbox.errors import (
    ConfigurationError,
    DisplayUnavailableError,
    SandboxError,
    StateError,
)
from emacs_sandbox.messaging import confirm as ask_confirmation
from emacs_sandbox.messaging import emit_error, emit_info

from .base import CatalogEntry, SandboxSpec, get_current_platform
from .initializer import SandboxInitializer
from .resolver import SandboxResolver

logger = logging.getLogger(__name__)


def session_label(name: str) -> str:
    """Deterministic key under which a sandbox's editor process is tracked."""
    return f"emacs-sandbox:{name}"


class SessionState:
    """The most recently launched sandbox. Unset until the first launch."""

    def __init__(self):
        self.name: Optional[str] = None
        self.home: Optional[Path] = None

    @property
    def is_set(self) -> bool:
        return self.name is not None

    def record(self, name: str, home: Union[str, Path]) -> None:
        self.name = name
        self.home = Path(home)

    def require(self) -> tuple[str, Path]:
        """Return ``(name, home)`` or raise if nothing was launched yet."""
        if not self.is_set:
            raise StateError("Nothing run yet")
        return self.name, self.home


class ProcessRegistry:
    """Editor processes spawned by this session, keyed by label."""

    def __init__(self):
        self._processes: dict[str, subprocess.Popen] = {}

    def register(self, label: str, proc: subprocess.Popen) -> None:
        self._processes[label] = proc

    def get(self, label: str) -> Optional[subprocess.Popen]:
        return self._processes.get(label)

    def is_alive(self, label: str) -> bool:
        proc = self._processes.get(label)
        return proc is not None and proc.poll() is None

    def terminate(self, label: str) -> Future:
        """
        Ask the process to exit.

        Returns a future resolved with the exit status once the process is
        gone. A watcher thread blocks on the process; nothing polls.
        """
        future: Future = Future()
        proc = self._processes.get(label)
        if proc is None or proc.poll() is not None:
            future.set_result(proc.returncode if proc is not None else None)
            return future

        proc.terminate()
        logger.info(f"Sent terminate to {label} (pid {proc.pid})")

        def _wait_for_exit():
            try:
                future.set_result(proc.wait())
            except Exception as e:
                future.set_exception(e)

        threading.Thread(target=_wait_for_exit, name=f"wait-{label}", daemon=True).start()
        return future


class SessionLauncher:
    """Starts the editor with its home directory pointed at a sandbox."""

    def __init__(
        self,
        editor: str,
        resolver: SandboxResolver,
        initializer: SandboxInitializer,
        catalog: Sequence[CatalogEntry] = (),
        state: Optional[SessionState] = None,
        registry: Optional[ProcessRegistry] = None,
        home_env_var: str = "HOME",
        spawner: Callable[..., subprocess.Popen] = subprocess.Popen,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Args:
            editor: Editor executable to spawn
            resolver: Maps sandbox names to directories
            initializer: Creates sandboxes that do not exist yet
            catalog: Known repositories, looked up by sandbox name
            state: Shared record of the last launch (new one if None)
            registry: Tracks spawned processes (new one if None)
            home_env_var: Environment variable holding the home directory
            spawner: ``subprocess.Popen`` compatible callable
            environ: Base environment for children (defaults to os.environ)
        """
        self.editor = editor
        self.resolver = resolver
        self.initializer = initializer
        self.catalog = list(catalog)
        self.state = state if state is not None else SessionState()
        self.registry = registry if registry is not None else ProcessRegistry()
        self.home_env_var = home_env_var
        self.spawner = spawner
        self.environ = environ if environ is not None else os.environ
        # (name, home, termination future) for relaunches not yet carried out
        self._pending: list[tuple[str, Path, Future]] = []

    def has_display(self) -> bool:
        """Whether a second graphical editor can be opened."""
        if get_current_platform() in ("macos", "windows"):
            return True
        return bool(self.environ.get("DISPLAY") or self.environ.get("WAYLAND_DISPLAY"))

    def _require_display(self) -> None:
        if not self.has_display():
            raise DisplayUnavailableError(
                "Sandboxes run in a separate graphical editor, "
                "but neither DISPLAY nor WAYLAND_DISPLAY is set"
            )

    def launch(self, name: str, home: Union[str, Path]) -> subprocess.Popen:
        """Spawn the editor for sandbox ``name`` without waiting for it."""
        self._require_display()

        env = dict(self.environ)
        env[self.home_env_var] = str(home)
        try:
            proc = self.spawner(
                [self.editor],
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except FileNotFoundError:
            raise ConfigurationError(f"Editor executable not found: {self.editor}") from None

        self.registry.register(session_label(name), proc)
        self.state.record(name, home)
        logger.info(f"Launched {self.editor} for sandbox {name} (pid {proc.pid})")
        return proc

    def _relaunch_after(self, name: str, home: Path, future: Future) -> None:
        if future.exception() is not None:
            emit_error(f"Could not stop sandbox {name}: {future.exception()}")
            return
        try:
            self.launch(name, home)
            emit_info(f"Restarted sandbox {name}")
        except SandboxError as e:
            emit_error(str(e))

    def start_last(self, confirm: Callable[[str], bool] = ask_confirmation) -> Optional[Future]:
        """
        Launch the most recent sandbox again.

        When its editor is still running the user may kill it. The restart is
        then queued and the termination future returned; run_pending carries
        it out once the process has exited. Returns None when nothing is
        pending.
        """
        name, home = self.state.require()
        label = session_label(name)

        if not self.registry.is_alive(label):
            self.launch(name, home)
            return None

        if not confirm(f"Sandbox {name} is still running. Kill it and restart?"):
            return None

        future = self.registry.terminate(label)
        self._pending.append((name, Path(home), future))
        return future

    def has_pending(self) -> bool:
        return bool(self._pending)

    def run_pending(self, timeout: Optional[float] = 0) -> int:
        """
        Relaunch the sandboxes whose editors have exited since start_last.

        Runs on the calling thread. Waits up to ``timeout`` seconds in total
        for editors that are still shutting down (None waits for all of
        them). Returns how many queued restarts were handled.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        handled = 0
        for entry in list(self._pending):
            name, home, future = entry
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            try:
                future.exception(timeout=remaining)
            except futures.TimeoutError:
                continue
            self._pending.remove(entry)
            self._relaunch_after(name, home, future)
            handled += 1
        return handled

    def find_catalog_entry(self, name: str) -> Optional[CatalogEntry]:
        for entry in self.catalog:
            if entry.sandbox_name == name:
                return entry
        return None

    def checkout(
        self,
        name: str,
        spec: Optional[SandboxSpec] = None,
        local_only: bool = False,
    ) -> subprocess.Popen:
        """
        Launch sandbox ``name``, creating it first when needed.

        An existing sandbox always wins over ``spec``. Otherwise the sandbox
        is created from ``spec`` or, failing that, from the catalog entry
        with the same name.
        """
        self.resolver.validate_name(name)
        if self.resolver.exists(name):
            return self.launch(name, self.resolver.directory_for(name))

        if local_only:
            raise ConfigurationError(f"Sandbox {name} does not exist locally")

        if spec is None:
            entry = self.find_catalog_entry(name)
            if entry is None:
                raise ConfigurationError(f"Sandbox {name} is not configured")
            spec = entry.to_spec()

        self._require_display()
        sandbox_path = self.initializer.initialize(
            name, spec.repo, recursive=spec.recursive, depth=spec.depth
        )
        return self.launch(name, sandbox_path)
