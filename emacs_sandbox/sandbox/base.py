"""
Data models shared by the sandbox components.
"""

import platform
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, field_validator

from .matcher import derive_sandbox_name

CONFIG_TREE_DIRNAME = ".emacs.d"


class SandboxSpec(BaseModel):
    """How to create a sandbox: which repository and how to clone it."""

    repo: str
    recursive: bool = True
    # A number or a literal token handed to ``git clone --depth`` unchanged
    depth: Optional[Union[int, str]] = 1

    @field_validator("repo")
    @classmethod
    def _repo_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("repository reference must not be empty")
        return value

    @field_validator("depth")
    @classmethod
    def _depth_positive(cls, value):
        if isinstance(value, int) and value < 1:
            raise ValueError("clone depth must be a positive integer")
        return value


class CatalogEntry(SandboxSpec):
    """A known configuration repository offered for new sandboxes."""

    name: Optional[str] = None

    @property
    def sandbox_name(self) -> Optional[str]:
        """Explicit name, or one derived from the repository reference."""
        return self.name or derive_sandbox_name(self.repo)

    def to_spec(self) -> SandboxSpec:
        return SandboxSpec(repo=self.repo, recursive=self.recursive, depth=self.depth)


class SelectionOrigin(str, Enum):
    EXISTING_LOCAL = "existing-local"
    CATALOG_SPEC = "catalog-spec"
    RAW_URL_SPEC = "raw-url-spec"
    NONE = "none"


@dataclass(frozen=True)
class Selection:
    """Outcome of asking the user which sandbox to use."""

    name: Optional[str]
    origin: SelectionOrigin
    spec: Optional[SandboxSpec] = None

    @property
    def is_empty(self) -> bool:
        return self.origin is SelectionOrigin.NONE


NO_SELECTION = Selection(name=None, origin=SelectionOrigin.NONE)


def get_current_platform() -> str:
    """Get the current platform name."""
    system = platform.system().lower()
    if system == "darwin":
        return "macos"
    return system
