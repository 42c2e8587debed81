"""Terminal output and line prompts."""

from __future__ import annotations

from typing import Protocol

import click
import typer


class ConsoleIO(Protocol):
    def echo(self, text: str = "") -> None: ...

    def clear(self) -> None: ...

    def prompt_text(self, label: str, *, default: str | None = None, hide_input: bool = False) -> str: ...

    def prompt_int(self, label: str) -> int: ...


class TyperConsole:
    def echo(self, text: str = "") -> None:
        typer.echo(text)

    def clear(self) -> None:
        click.clear()

    def prompt_text(self, label: str, *, default: str | None = None, hide_input: bool = False) -> str:
        return typer.prompt(label, default=default, hide_input=hide_input, show_default=not hide_input)

    def prompt_int(self, label: str) -> int:
        return typer.prompt(label, type=int)
