"""
Mapping between sandbox names and their directories.
"""

import os
from pathlib import Path
from typing import Union

from emacs_sandbox.errors import ConfigurationError


class SandboxResolver:
    """Locates sandboxes: each one is a direct child of the sandbox root."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def directory_for(self, name: str) -> Path:
        """Path of the sandbox called ``name``. Pure path join, no I/O."""
        return self.root / name

    def list_local_sandboxes(self) -> list[str]:
        """
        Names of existing sandboxes, skipping dot entries.

        Order follows the directory listing; it is not sorted.
        """
        try:
            entries = os.listdir(self.root)
        except FileNotFoundError:
            return []
        return [entry for entry in entries if not entry.startswith(".")]

    def exists(self, name: str) -> bool:
        return self.directory_for(name).is_dir()

    @staticmethod
    def validate_name(name: str) -> str:
        """Reject names that would not map to a single child directory."""
        if not name or not name.strip():
            raise ConfigurationError("Sandbox name must not be empty")
        if name in (".", "..") or os.sep in name or (os.altsep and os.altsep in name):
            raise ConfigurationError(f"Invalid sandbox name: {name!r}")
        return name
