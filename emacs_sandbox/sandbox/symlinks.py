"""
Links from the real home directory into sandboxes.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Union

logger = logging.getLogger(__name__)


class SymlinkSynchronizer:
    """
    Shares selected files of the real home (credentials, caches) with
    sandboxes by symlinking them at the same relative location.
    """

    def __init__(self, real_home: Union[str, Path], inherited_paths: Iterable[str]):
        self.real_home = Path(real_home)
        self.inherited_paths = list(inherited_paths)

    def sync(self, sandbox_path: Union[str, Path]) -> None:
        """
        Create the missing links in ``sandbox_path``.

        An entry is skipped when its source is absent from the real home or
        when anything already sits at the target, including a dangling link.
        """
        sandbox_path = Path(sandbox_path)
        for relpath in self.inherited_paths:
            source = self.real_home / relpath
            target = sandbox_path / relpath

            if os.path.lexists(target) or not source.exists():
                logger.debug(f"Skipping inherited path {relpath}")
                continue

            target.parent.mkdir(parents=True, exist_ok=True)
            os.symlink(source, target)
            logger.info(f"Linked {target} -> {source}")

    def sync_all(self, resolver) -> list[str]:
        """Refresh links in every local sandbox; returns the names visited."""
        names = resolver.list_local_sandboxes()
        for name in names:
            self.sync(resolver.directory_for(name))
        return names
