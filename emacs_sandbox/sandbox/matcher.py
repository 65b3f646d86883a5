"""
Recognition and normalization of repository references.

A reference is tried, in order, as a GitHub ``owner/repo`` shorthand, as a
GitHub SSH/HTTPS URL, and finally as any generic git location (scheme URL,
scp-like address or local repository).
"""

import os
import re
from typing import Optional

PROVIDER_HOST = "github.com"

_PROVIDER_PATH_RE = re.compile(r"^[a-z0-9][-a-z0-9]+/[-a-z0-9_.]+[a-z0-9]$", re.IGNORECASE)
_PROVIDER_SSH_RE = re.compile(
    r"^git@" + re.escape(PROVIDER_HOST) + r":(?P<path>[^/\s]+/[^/\s]+?)\.git$"
)
_PROVIDER_HTTPS_RE = re.compile(
    r"^https://" + re.escape(PROVIDER_HOST) + r"/(?P<path>[^/\s]+/[^/\s]+?)(?:\.git)?/?$"
)

# The scheme alternation is grouped so only these schemes are accepted.
_SCHEME_URL_RE = re.compile(r"^(?:ssh|rsync|git|https?|file)://\S+\.git/?$")
_SCP_LIKE_RE = re.compile(r"^(?:[\w.-]+@)?[\w.-]+:(?!//)\S+\.git/?$")


def match_provider_path(reference: str) -> Optional[str]:
    """
    Return the canonical ``owner/repo`` path of a GitHub reference.

    Accepts the bare shorthand as well as the SSH and HTTPS clone URLs.
    Returns None for anything that is not a GitHub reference.
    """
    reference = reference.strip()
    if _PROVIDER_PATH_RE.match(reference):
        return reference
    for pattern in (_PROVIDER_SSH_RE, _PROVIDER_HTTPS_RE):
        match = pattern.match(reference)
        if match:
            return match.group("path")
    return None


def provider_url(path: str) -> str:
    """HTTPS clone URL for an ``owner/repo`` path."""
    return f"https://{PROVIDER_HOST}/{path}.git"


def _is_local_repository(reference: str) -> bool:
    path = os.path.expanduser(reference)
    if reference.rstrip("/").endswith(".git") and os.path.isdir(path):
        return True
    return os.path.isdir(os.path.join(path, ".git"))


def is_generic_git_reference(reference: str) -> bool:
    reference = reference.strip()
    if not reference:
        return False
    if _SCHEME_URL_RE.match(reference) or _SCP_LIKE_RE.match(reference):
        return True
    return _is_local_repository(reference)


def is_git_reference(reference: str) -> bool:
    """True when ``reference`` can be handed to ``git clone``."""
    return match_provider_path(reference) is not None or is_generic_git_reference(
        reference
    )


def normalize_reference(reference: str) -> str:
    """
    Expand a GitHub shorthand to its clone URL and a local repository path
    to its user-expanded form; leave anything else alone.
    """
    reference = reference.strip()
    if _PROVIDER_PATH_RE.match(reference):
        return provider_url(reference)
    if _is_local_repository(reference):
        return os.path.expanduser(reference)
    return reference


def derive_sandbox_name(reference: str) -> Optional[str]:
    """
    Pick a sandbox name for a repository reference.

    GitHub references are named after their owner (``bbatsov/prelude`` gives
    ``bbatsov``), not after the repository. Other git references use the last
    path component without a ``.git`` suffix.
    """
    path = match_provider_path(reference)
    if path is not None:
        return path.split("/", 1)[0]
    if not is_generic_git_reference(reference):
        return None
    tail = re.split(r"[/:]", reference.strip().rstrip("/"))[-1]
    if tail.endswith(".git"):
        tail = tail[: -len(".git")]
    return tail or None
