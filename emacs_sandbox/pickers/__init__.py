"""
Registry of sandbox pickers, selected by name from the configuration.
"""

from emacs_sandbox.errors import ConfigurationError

from .base import Picker
from .fzf_picker import FzfPicker
from .prompt_picker import PromptPicker

PICKERS = {picker().get_name(): picker for picker in (PromptPicker, FzfPicker)}


def get_picker(name: str) -> Picker:
    """
    Get the picker configured under ``name``.

    Raises:
        ConfigurationError: if no picker is registered under that name
    """
    try:
        return PICKERS[name]()
    except KeyError:
        known = ", ".join(sorted(PICKERS))
        raise ConfigurationError(f"Unknown picker {name!r} (choose from {known})") from None


__all__ = ["PICKERS", "Picker", "get_picker", "FzfPicker", "PromptPicker"]
