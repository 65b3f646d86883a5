"""Isolated Emacs configuration sandboxes."""

__version__ = "0.1.0"
