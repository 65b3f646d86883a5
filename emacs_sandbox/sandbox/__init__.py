"""
Sandbox management: isolated editor configurations under a common root.
"""

from .base import CatalogEntry, SandboxSpec, Selection, SelectionOrigin
from .initializer import SandboxInitializer
from .matcher import derive_sandbox_name, is_git_reference, normalize_reference
from .persistence import PersistenceGenerator
from .resolver import SandboxResolver
from .selection import SandboxSelector
from .session import ProcessRegistry, SessionLauncher, SessionState
from .symlinks import SymlinkSynchronizer

__all__ = [
    "CatalogEntry",
    "SandboxSpec",
    "Selection",
    "SelectionOrigin",
    "SandboxInitializer",
    "derive_sandbox_name",
    "is_git_reference",
    "normalize_reference",
    "PersistenceGenerator",
    "SandboxResolver",
    "SandboxSelector",
    "ProcessRegistry",
    "SessionLauncher",
    "SessionState",
    "SymlinkSynchronizer",
]
