"""
Base interface for interactive sandbox pickers.
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional, Sequence


class Picker(ABC):
    """Abstract base class for the sandbox selection UI."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the picker can run on this system."""
        pass

    @abstractmethod
    def get_name(self) -> str:
        """Name used to select this picker in the configuration."""
        pass

    @abstractmethod
    def pick(
        self,
        prompt: str,
        local: Sequence[str],
        catalog: Mapping[str, str],
    ) -> Optional[str]:
        """
        Let the user choose a sandbox.

        Args:
            prompt: Question shown to the user
            local: Names of sandboxes that already exist
            catalog: Catalog sandbox names mapped to their repository reference

        Returns:
            A chosen name, free text typed by the user, or None on cancel
        """
        pass
