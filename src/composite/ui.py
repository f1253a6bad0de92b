# src/composite/ui.py

from typing import Any, Callable, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from composite.core.composite import Composite
from composite.core.options import HandlerKind, wrap

# --- Global Console ---
# The rich log handler and the display helpers share this console.
console = Console()
default_console = console


def _callable_name(func: Callable[..., Any]) -> str:
    return escape(getattr(func, "__qualname__", None) or repr(func))


def _describe_requires(requires: Any) -> str:
    if callable(requires):
        return f"[italic]dynamic[/italic] ({_callable_name(requires)})"
    return escape(", ".join(map(str, wrap(requires))))


def _kind_label(kind: HandlerKind, second_argument: str) -> str:
    if kind is HandlerKind.BINARY:
        return f"query, {second_argument}"
    return "query"


def display_composite(composite: Composite, console: Optional[Console] = None) -> None:
    """Prints the params and dependencies registered on a composite using rich tables."""
    out = console if console is not None else default_console

    params_table = Table(title="Params", box=None, padding=(0, 1))
    params_table.add_column("Path", style="cyan", no_wrap=True)
    params_table.add_column("Handler", style="green")
    params_table.add_column("Requires", style="yellow")
    params_table.add_column("Details", style="white")

    for definition in composite.param_definitions:
        options = definition.options
        details = []
        if options.ignore is not None:
            details.append(f"ignore={_callable_name(options.ignore)}")
        if options.on_ignore is not None:
            details.append(f"on_ignore={_callable_name(options.on_ignore)}")
        if options.ignore_requires is not None:
            details.append(f"ignore_requires={_describe_requires(options.ignore_requires)}")

        params_table.add_row(
            escape(".".join(map(str, definition.path))),
            f"{_callable_name(definition.handler)}({_kind_label(definition.kind, 'value')})",
            _describe_requires(options.requires),
            " ".join(details),
        )

    deps_table = Table(title="Dependencies", box=None, padding=(0, 1))
    deps_table.add_column("Name", style="magenta", no_wrap=True)
    deps_table.add_column("Loader", style="green")
    deps_table.add_column("Requires", style="yellow")

    for name, definition in composite.dep_definitions.items():
        deps_table.add_row(
            escape(str(name)),
            f"{_callable_name(definition.loader)}({_kind_label(definition.kind, 'params')})",
            _describe_requires(definition.options.requires),
        )

    out.print(params_table)
    out.print(deps_table)
    if composite.required_deps:
        out.print(f"[bold]Always loaded[/bold]: {escape(', '.join(map(str, composite.required_deps)))}")
    if composite.strict:
        out.print("[dim]strict mode: unknown params are rejected[/dim]")
    out.print()
