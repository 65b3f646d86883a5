"""
Interactive choice of the sandbox to launch.
"""

import logging
from typing import Optional, Sequence, Union

from emacs_sandbox.pickers import Picker

from .base import NO_SELECTION, CatalogEntry, SandboxSpec, Selection, SelectionOrigin
from .matcher import derive_sandbox_name, is_git_reference
from .resolver import SandboxResolver

logger = logging.getLogger(__name__)


class SandboxSelector:
    """
    Offers local sandboxes and not-yet-created catalog entries through a
    picker, and also accepts a repository URL typed by the user.
    """

    def __init__(
        self,
        resolver: SandboxResolver,
        catalog: Sequence[CatalogEntry],
        picker: Picker,
        default_depth: Optional[Union[int, str]] = 1,
    ):
        self.resolver = resolver
        self.catalog = list(catalog)
        self.picker = picker
        self.default_depth = default_depth

    def catalog_candidates(self, local: Sequence[str]) -> dict[str, CatalogEntry]:
        """Catalog entries keyed by sandbox name, minus those already local."""
        candidates = {}
        for entry in self.catalog:
            name = entry.sandbox_name
            if name and name not in local and name not in candidates:
                candidates[name] = entry
        return candidates

    def resolve_choice(
        self,
        choice: Optional[str],
        local: Sequence[str],
        candidates: dict[str, CatalogEntry],
    ) -> Selection:
        if not choice:
            return NO_SELECTION
        if choice in local:
            return Selection(name=choice, origin=SelectionOrigin.EXISTING_LOCAL)
        if choice in candidates:
            return Selection(
                name=choice,
                origin=SelectionOrigin.CATALOG_SPEC,
                spec=candidates[choice].to_spec(),
            )
        if is_git_reference(choice):
            name = derive_sandbox_name(choice)
            if name:
                return Selection(
                    name=name,
                    origin=SelectionOrigin.RAW_URL_SPEC,
                    spec=SandboxSpec(repo=choice, depth=self.default_depth),
                )
        logger.info(f"Ignoring unrecognized sandbox choice {choice!r}")
        return NO_SELECTION

    def select(self, prompt: str = "Sandbox") -> Selection:
        local = self.resolver.list_local_sandboxes()
        candidates = self.catalog_candidates(local)
        choice = self.picker.pick(
            prompt,
            local,
            {name: entry.repo for name, entry in candidates.items()},
        )
        return self.resolve_choice(choice, local, candidates)

    def resolve(self, choice: Optional[str]) -> Selection:
        """Interpret text the user typed without showing the picker."""
        local = self.resolver.list_local_sandboxes()
        return self.resolve_choice(choice, local, self.catalog_candidates(local))
