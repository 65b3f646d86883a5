"""
Numbered-menu picker rendered with rich.
"""

from typing import Mapping, Optional, Sequence

from rich.prompt import Prompt
from rich.table import Table

from emacs_sandbox.messaging import get_console

from .base import Picker


class PromptPicker(Picker):
    """Shows local and catalog sandboxes as a numbered table."""

    def is_available(self) -> bool:
        return True

    def get_name(self) -> str:
        return "prompt"

    def _build_table(self, local: Sequence[str], catalog: Mapping[str, str]) -> Table:
        table = Table(show_header=True, header_style="bold")
        table.add_column("#", justify="right")
        table.add_column("Sandbox")
        table.add_column("Source", style="dim")
        index = 1
        for name in local:
            table.add_row(str(index), name, "local")
            index += 1
        for name, reference in catalog.items():
            table.add_row(str(index), name, reference)
            index += 1
        return table

    def pick(
        self,
        prompt: str,
        local: Sequence[str],
        catalog: Mapping[str, str],
    ) -> Optional[str]:
        console = get_console()
        choices = list(local) + list(catalog)
        if choices:
            console.print(self._build_table(local, catalog))

        answer = Prompt.ask(
            f"{prompt} [dim](number, name or repository URL)[/dim]",
            console=console,
            default="",
            show_default=False,
        ).strip()

        if not answer:
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(choices):
            return choices[int(answer) - 1]
        return answer
