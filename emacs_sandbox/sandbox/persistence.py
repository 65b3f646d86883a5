"""
Wrapper scripts that make a sandbox the editor's permanent home.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Union

from emacs_sandbox.errors import ConfigurationError
from emacs_sandbox.messaging import confirm as ask_confirmation

from .session import SessionState

logger = logging.getLogger(__name__)

NOPLAY_SUFFIX = "-noplay"
SCRIPT_MODE = 0o755


def sh_quote(value: str) -> str:
    """Single-quote ``value`` for /bin/sh, always adding the quotes."""
    return "'" + value.replace("'", "'\"'\"'") + "'"


class PersistenceGenerator:
    """
    Writes two launchers named after the editor: one that always starts it
    in the last used sandbox and a ``-noplay`` one that always starts it with
    the real home directory.
    """

    def __init__(
        self,
        script_dir: Union[str, Path],
        editor: str,
        real_home: Union[str, Path],
        state: SessionState,
        home_env_var: str = "HOME",
    ):
        self.script_dir = Path(script_dir)
        self.editor = editor
        self.real_home = Path(real_home)
        self.state = state
        self.home_env_var = home_env_var

    def script_paths(self) -> tuple[Path, Path]:
        """Paths of the sandbox launcher and the real-home launcher."""
        base = os.path.basename(self.editor.rstrip(os.sep)) or "emacs"
        return self.script_dir / base, self.script_dir / f"{base}{NOPLAY_SUFFIX}"

    def render(self, home: Union[str, Path]) -> str:
        return (
            "#!/bin/sh\n"
            f"{self.home_env_var}={sh_quote(str(home))} "
            f'exec {sh_quote(self.editor)} "$@"\n'
        )

    def _check_editor_outside_script_dir(self) -> None:
        """The launchers must not exec a binary that lives beside them."""
        resolved = shutil.which(self.editor) or self.editor
        editor_dir = os.path.dirname(os.path.realpath(resolved))
        if editor_dir == os.path.realpath(self.script_dir):
            raise ConfigurationError(
                f"Editor {resolved} is inside the script directory {self.script_dir}; "
                "set 'editor' to the real emacs binary"
            )

    def _write_script(self, path: Path, home: Path) -> None:
        path.write_text(self.render(home))
        os.chmod(path, SCRIPT_MODE)
        logger.info(f"Wrote {path} (home {home})")

    def persist(self, confirm: Callable[[str], bool] = ask_confirmation) -> list[Path]:
        """
        Make the last launched sandbox the default.

        Returns the scripts written, or an empty list if the user declined.
        """
        _, home = self.state.require()
        self._check_editor_outside_script_dir()
        if not confirm(f"Always start the editor with home {home}?"):
            return []

        play, noplay = self.script_paths()
        self.script_dir.mkdir(parents=True, exist_ok=True)
        self._write_script(play, home)
        self._write_script(noplay, self.real_home)
        return [play, noplay]

    def unpersist(self, confirm: Callable[[str], bool] = ask_confirmation) -> list[Path]:
        """Delete the launchers that exist; returns the paths removed."""
        if not confirm(f"Remove the sandbox launchers from {self.script_dir}?"):
            return []

        removed = []
        for path in self.script_paths():
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            removed.append(path)
            logger.info(f"Removed {path}")
        return removed
