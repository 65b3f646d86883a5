"""
Creation and removal of sandboxes.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Callable, Optional, Union

from emacs_sandbox.errors import ConfigurationError, SubprocessFailure
from emacs_sandbox.messaging import emit_transient

from .base import CONFIG_TREE_DIRNAME
from .matcher import normalize_reference
from .resolver import SandboxResolver
from .symlinks import SymlinkSynchronizer

logger = logging.getLogger(__name__)


class SandboxInitializer:
    """Clones a configuration repository into a fresh sandbox."""

    def __init__(
        self,
        resolver: SandboxResolver,
        synchronizer: SymlinkSynchronizer,
        git: str = "git",
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        """
        Args:
            resolver: Maps sandbox names to directories
            synchronizer: Links inherited paths into the new sandbox
            git: Git executable
            runner: ``subprocess.run`` compatible callable (replaced in tests)
        """
        self.resolver = resolver
        self.synchronizer = synchronizer
        self.git = git
        self.runner = runner

    def build_clone_command(
        self,
        reference: str,
        destination: Union[str, Path],
        recursive: bool = True,
        depth: Optional[Union[int, str]] = 1,
    ) -> list[str]:
        command = [self.git, "clone"]
        if recursive:
            command.append("--recursive")
        if depth is not None:
            command.extend(["--depth", str(depth)])
        command.extend([normalize_reference(reference), str(destination)])
        return command

    def _clone(self, command: list[str]) -> None:
        logger.info(f"Running: {' '.join(command)}")
        try:
            result = self.runner(command, capture_output=True, text=True, check=False)
        except FileNotFoundError as e:
            raise SubprocessFailure(f"Cannot run {self.git}: {e}") from e

        if result.returncode != 0:
            message = (result.stderr or "").strip() or (
                f"git clone exited with status {result.returncode}"
            )
            raise SubprocessFailure(message, returncode=result.returncode)

    def initialize(
        self,
        name: str,
        reference: str,
        recursive: bool = True,
        depth: Optional[Union[int, str]] = 1,
    ) -> Path:
        """
        Create sandbox ``name`` from ``reference`` and return its path.

        On any failure, including an interrupt, the sandbox directory is
        removed before the error is re-raised, so a failed attempt can simply
        be retried.
        """
        self.resolver.validate_name(name)
        if not reference or not reference.strip():
            raise ConfigurationError(f"No repository reference given for {name}")

        sandbox_path = self.resolver.directory_for(name)
        if sandbox_path.exists() and any(sandbox_path.iterdir()):
            raise ConfigurationError(f"Sandbox {name} already exists at {sandbox_path}")

        try:
            sandbox_path.mkdir(parents=True, exist_ok=True)
            self._clone(
                self.build_clone_command(
                    reference,
                    sandbox_path / CONFIG_TREE_DIRNAME,
                    recursive=recursive,
                    depth=depth,
                )
            )
            self.synchronizer.sync(sandbox_path)
        except BaseException:
            emit_transient(f"Cleaning up {sandbox_path}...")
            shutil.rmtree(sandbox_path, ignore_errors=True)
            raise

        logger.info(f"Initialized sandbox {name} at {sandbox_path}")
        return sandbox_path

    def delete(self, name: str) -> Path:
        """Remove an existing sandbox. Callers confirm with the user first."""
        self.resolver.validate_name(name)
        sandbox_path = self.resolver.directory_for(name)
        if not sandbox_path.is_dir():
            raise ConfigurationError(f"Sandbox {name} does not exist locally")
        shutil.rmtree(sandbox_path)
        logger.info(f"Deleted sandbox {name}")
        return sandbox_path
