"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from playdeploy.core.errors import error_code_for_kind
from playdeploy.core.result import Err, Result
from playdeploy.output.console import Style

if TYPE_CHECKING:
    from playdeploy.cli.context import CLIContext


T = TypeVar("T")
E = TypeVar("E")


def exit_on_error[T, E](result: Result[T, E], ctx: CLIContext) -> None:
    """Exit with the code of the error kind if result is Err, otherwise return.

    Expects error objects to have 'kind', 'message' and optional 'hint'
    attributes.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        kind: str = getattr(error, "kind", "")
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        exit_with_code(int(error_code_for_kind(kind)))


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
