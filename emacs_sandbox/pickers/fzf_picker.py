"""
Picker backed by the external fzf fuzzy finder.
"""

import logging
import shutil
import subprocess
from typing import Callable, Mapping, Optional, Sequence

from emacs_sandbox.errors import ConfigurationError

from .base import Picker

logger = logging.getLogger(__name__)

# fzf exits with 1 when nothing matched the query and 130 on cancel
_FZF_NO_MATCH = 1


class FzfPicker(Picker):
    """Fuzzy selection through fzf; unmatched queries count as free text."""

    def __init__(self, runner: Callable[..., subprocess.CompletedProcess] = subprocess.run):
        self.runner = runner

    def is_available(self) -> bool:
        return shutil.which("fzf") is not None

    def get_name(self) -> str:
        return "fzf"

    def pick(
        self,
        prompt: str,
        local: Sequence[str],
        catalog: Mapping[str, str],
    ) -> Optional[str]:
        if not self.is_available():
            raise ConfigurationError("Picker 'fzf' needs the fzf binary on PATH")

        lines = [f"{name}\tlocal" for name in local]
        lines += [f"{name}\t{reference}" for name, reference in catalog.items()]
        command = [
            "fzf",
            "--print-query",
            "--delimiter=\t",
            f"--prompt={prompt} ",
            "--header=sandbox / source",
        ]
        logger.debug(f"Running: {' '.join(command)}")
        result = self.runner(
            command,
            input="\n".join(lines),
            stdout=subprocess.PIPE,
            text=True,
            check=False,
        )

        output = result.stdout.splitlines()
        if result.returncode == 0 and len(output) >= 2 and output[1]:
            return output[1].split("\t", 1)[0]
        if result.returncode == _FZF_NO_MATCH and output and output[0].strip():
            return output[0].strip()
        return None
