"""
Wires the sandbox components together from the loaded settings.
"""

import logging
from typing import Optional

from emacs_sandbox.config import Settings, load_settings
from emacs_sandbox.pickers import get_picker

from .initializer import SandboxInitializer
from .persistence import PersistenceGenerator
from .resolver import SandboxResolver
from .selection import SandboxSelector
from .session import ProcessRegistry, SessionLauncher, SessionState
from .symlinks import SymlinkSynchronizer

logger = logging.getLogger(__name__)


class SandboxManager:
    """One set of sandbox components sharing a session state."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        state: Optional[SessionState] = None,
        registry: Optional[ProcessRegistry] = None,
    ):
        """
        Args:
            settings: Resolved configuration (loaded from disk if None)
            state: Session state shared by launcher and persistence
            registry: Process registry for launched editors
        """
        self.settings = settings or load_settings()
        self.state = state or SessionState()
        self.registry = registry or ProcessRegistry()

        self.resolver = SandboxResolver(self.settings.sandbox_root)
        self.synchronizer = SymlinkSynchronizer(
            self.settings.real_home, self.settings.inherited_paths
        )
        self.initializer = SandboxInitializer(self.resolver, self.synchronizer)
        self.launcher = SessionLauncher(
            editor=self.settings.editor,
            resolver=self.resolver,
            initializer=self.initializer,
            catalog=self.settings.catalog,
            state=self.state,
            registry=self.registry,
            home_env_var=self.settings.home_env_var,
        )
        self.persistence = PersistenceGenerator(
            script_dir=self.settings.script_dir,
            editor=self.settings.editor,
            real_home=self.settings.real_home,
            state=self.state,
            home_env_var=self.settings.home_env_var,
        )
        self._selector: Optional[SandboxSelector] = None

    def _get_selector(self) -> SandboxSelector:
        """Get or create the selector; the picker is only built when needed."""
        if self._selector is None:
            picker = get_picker(self.settings.picker)
            logger.info(f"Using picker: {picker.__class__.__name__}")
            self._selector = SandboxSelector(
                self.resolver,
                self.settings.catalog,
                picker,
                default_depth=self.settings.default_depth,
            )
        return self._selector

    @property
    def selector(self) -> SandboxSelector:
        return self._get_selector()

    def get_status(self) -> dict:
        """Summary of the configuration and the current session."""
        return {
            "sandbox_root": str(self.resolver.root),
            "script_dir": self.settings.script_dir,
            "editor": self.settings.editor,
            "picker": self.settings.picker,
            "local_sandboxes": self.resolver.list_local_sandboxes(),
            "catalog_size": len(self.settings.catalog),
            "inherited_paths": list(self.settings.inherited_paths),
            "last_sandbox": self.state.name,
            "last_home": str(self.state.home) if self.state.home else None,
            "display_available": self.launcher.has_display(),
        }
