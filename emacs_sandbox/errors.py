"""
Error types raised by sandbox operations.
"""

from typing import Optional


class SandboxError(Exception):
    """Base class for every failure reported to the user."""


class ConfigurationError(SandboxError):
    """A sandbox, catalog entry or setting is missing or invalid."""


class DisplayUnavailableError(SandboxError):
    """No graphical display is available to host a second editor."""


class SubprocessFailure(SandboxError):
    """An external command (git) exited with a non-zero status."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class StateError(SandboxError):
    """An operation needs a previous launch but none happened yet."""
