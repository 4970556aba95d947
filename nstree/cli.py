from __future__ import annotations

import os
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from . import __version__
from .nsdiff import WILDCARD, known_types, normalize_filters
from .proc import default_proc_root, gather_processes, is_linux
from .render import render_tree
from .tree import TreeCycleError, build_tree, propagate_keep

app = typer.Typer(
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    help="nstree: show the process tree like pstree, with namespaces that differ from the parent's.",
)
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"nstree {__version__}")
        raise typer.Exit()


def warn_unknown_filters(filters: list[str]) -> None:
    known = set(known_types())
    for f in filters:
        if f != WILDCARD and f not in known:
            err_console.print(f"[yellow]Note:[/yellow] unknown namespace type '{escape(f)}' will never match")


@app.command()
def main(
    show_threads: bool = typer.Option(False, "--show-threads", "-t", help="Include threads in the tree."),
    filters: list[str] | None = typer.Option(
        None,
        "--filter",
        "-f",
        help="Only show branches leading to processes whose TYPE namespace differs from the parent's. "
        "Repeat or comma-separate; '*' matches any type.",
        metavar="TYPE",
    ),
    proc_root: Path | None = typer.Option(
        None, "--proc-root", help="procfs mount point (default: $NSTREE_PROC_ROOT or /proc)."
    ),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit."
    ),
) -> None:
    """Visualize the process tree and where namespaces change along it."""
    if proc_root is None and not os.environ.get("NSTREE_PROC_ROOT") and not is_linux():
        err_console.print("[red]Error:[/red] namespaces are a Linux feature; use --proc-root to read a captured tree.")
        raise typer.Exit(code=1)

    active = normalize_filters(filters)
    warn_unknown_filters(active)

    root_dir = proc_root or default_proc_root()
    try:
        table = gather_processes(root_dir, include_threads=show_threads)
    except OSError as e:
        err_console.print(f"[red]Error:[/red] cannot read {escape(str(root_dir))}: {escape(str(e))}")
        raise typer.Exit(code=1)

    with table:
        build_tree(table)

        lines: list[str] = []
        root = table.root()
        if root is not None:
            try:
                if active:
                    propagate_keep(root, active)
                lines = render_tree(root)
            except TreeCycleError as e:
                err_console.print(f"[red]Error:[/red] {escape(str(e))}")
                raise typer.Exit(code=1)

        for line in lines:
            typer.echo(line)

        if table.any_unreadable():
            err_console.print(
                "[yellow]Warning:[/yellow] namespaces of processes marked with * could not be read; "
                "try running as root.",
                soft_wrap=True,
            )


if __name__ == "__main__":
    app()
