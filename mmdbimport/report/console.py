# mmdbimport/report/console.py

from __future__ import annotations

from typing import Optional

import typer


class Reporter:
    """
    Styles and prints user-facing output.

    Passed to whatever needs to print so colouring can be switched off
    (tests, --json, pipes) without touching module state.
    """

    def __init__(self, color: Optional[bool] = None):
        # None lets typer decide from the terminal
        self.color = color

    def _style(self, text: object, fg: str, bold: bool = False) -> str:
        if self.color is False:
            return str(text)
        return typer.style(str(text), fg=fg, bold=bold)

    def success(self, text: object) -> str:
        return self._style(text, typer.colors.GREEN)

    def error(self, text: object) -> str:
        return self._style(text, typer.colors.RED)

    def warn(self, text: object) -> str:
        return self._style(text, typer.colors.YELLOW)

    def info(self, text: object) -> str:
        return self._style(text, typer.colors.CYAN)

    def echo(self, message: str = "", err: bool = False) -> None:
        typer.echo(message, err=err, color=self.color)

    def fail(self, message: str) -> None:
        self.echo(self.error(message), err=True)
