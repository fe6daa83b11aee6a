"""
CLI entry point for bud.

Commands:
    init        Create a repository in the working directory
    add         Stage the current content of files
    commit      Record staged files as a new commit
    log         Show the commit chain, newest first
    show-diff   Show per-file line changes of a commit against its parent
    cat-file    Print the raw bytes of a stored object
    status      List staged entries

The CLI only parses arguments and formats output; all behavior lives
in ``bud.repository``.
"""

import logging
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.text import Text

from bud import __version__
from bud.config import RepoConfig
from bud.diff import FileDiff
from bud.errors import AlreadyInitialized, BudError
from bud.repository import Repository

app = typer.Typer(
    name="bud",
    help="A minimal local version-control engine.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(highlight=False, soft_wrap=True)
err_console = Console(stderr=True, highlight=False, soft_wrap=True)

HUNK_STYLES = {
    "added": ("++", "green"),
    "removed": ("--", "red"),
    "unchanged": ("  ", "dim"),
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]bud[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    directory: Annotated[
        str,
        typer.Option("--dir", "-C", help="Working directory holding the repository."),
    ] = ".",
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Enable debug logging.")
    ] = False,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """bud - snapshot files, commit them, and inspect history."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )
    ctx.obj = directory


def _open(ctx: typer.Context) -> Repository:
    return Repository.open(ctx.obj or ".")


def _fail(error: BudError) -> NoReturn:
    err_console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(code=1)


@app.command()
def init(
    ctx: typer.Context,
    objects: Annotated[
        str,
        typer.Option("--objects", help="Object backend: 'files' or 'disk'."),
    ] = "files",
) -> None:
    """Create a repository (existing state is never touched)."""
    try:
        config = RepoConfig(objects=objects)  # type: ignore[arg-type]
    except ValueError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    try:
        repo = Repository.init(ctx.obj or ".", config=config)
    except AlreadyInitialized as e:
        console.print(Text(f"Already a bud repository: {e.path}", style="yellow"))
        return
    except BudError as e:
        _fail(e)
    with repo:
        console.print(f"Initialized empty bud repository in {repo.repo_dir}")


@app.command()
def add(
    ctx: typer.Context,
    paths: Annotated[list[str], typer.Argument(help="Files to stage.")],
) -> None:
    """Stage the current content of each path."""
    try:
        with _open(ctx) as repo:
            for path in paths:
                entry = repo.add(path)
                console.print(Text(f"added {entry.path}"))
    except BudError as e:
        _fail(e)


@app.command()
def commit(
    ctx: typer.Context,
    message: Annotated[str, typer.Argument(help="Commit message.")],
) -> None:
    """Record the staged files as a new commit."""
    try:
        with _open(ctx) as repo:
            _, digest = repo.commit(message)
    except BudError as e:
        _fail(e)
    console.print(f"commit created [bold]{digest}[/bold]")


@app.command()
def log(
    ctx: typer.Context,
    start: Annotated[
        Optional[str], typer.Argument(help="Commit to start from (default HEAD).")
    ] = None,
) -> None:
    """Show digest, date and message of each commit, newest first."""
    try:
        with _open(ctx) as repo:
            for digest, entry in repo.log(start):
                console.print(f"[yellow]commit {digest}[/yellow]")
                console.print(f"Date:   {entry.timestamp}")
                console.print()
                console.print(Text("    " + entry.message))
                console.print()
    except BudError as e:
        _fail(e)


def _print_file_diff(file_diff: FileDiff) -> None:
    header = f"File: {file_diff.path}"
    if file_diff.is_new:
        header += " (new)"
    console.print(Text(header, style="bold"))
    for hunk in file_diff.hunks:
        prefix, style = HUNK_STYLES[hunk.kind]
        for line in hunk.text.splitlines():
            console.print(Text(prefix + line, style=style))
    console.print()


@app.command("show-diff")
def show_diff(
    ctx: typer.Context,
    digest: Annotated[str, typer.Argument(help="Commit digest.")],
) -> None:
    """Show per-file changes of a commit against its parent."""
    try:
        with _open(ctx) as repo:
            diffs = repo.show_diff(digest)
    except BudError as e:
        _fail(e)
    for file_diff in diffs:
        _print_file_diff(file_diff)


@app.command("cat-file")
def cat_file(
    ctx: typer.Context,
    digest: Annotated[str, typer.Argument(help="Object digest.")],
) -> None:
    """Write the raw bytes of an object to stdout."""
    try:
        with _open(ctx) as repo:
            content = repo.cat(digest)
    except BudError as e:
        _fail(e)
    typer.echo(content, nl=False)


@app.command()
def status(ctx: typer.Context) -> None:
    """List staged entries in the order they will be committed."""
    try:
        with _open(ctx) as repo:
            entries = repo.status()
    except BudError as e:
        _fail(e)
    if not entries:
        console.print("nothing staged")
        return
    for entry in entries:
        console.print(Text(f"staged {entry.digest[:10]} {entry.path}"))
