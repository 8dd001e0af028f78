"""Main CLI entry point for SnapVCS."""

import logging
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from snapvcs.constants import EXIT_USER_ERROR, ROOT_ENV_VAR
from snapvcs.core import Repository
from snapvcs.errors import (
    RepositoryExistsError,
    RepositoryNotFoundError,
    SnapVCSError,
    ValidationError,
)

console = Console()
err_console = Console(stderr=True)
app = typer.Typer(
    name="snapvcs",
    help="Minimal content-addressed version control",
    add_completion=False,
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(message: str) -> NoReturn:
    console.print(
        f"[bold red]Error:[/bold red] {escape(message)}", style="red", soft_wrap=True
    )
    raise typer.Exit(EXIT_USER_ERROR)


def _not_a_repository(repo: Repository) -> NoReturn:
    console.print(
        "[bold red]Error:[/bold red] Not a SnapVCS repository",
        style="red",
    )
    console.print(
        f"  No repository found at {repo.root}",
        style="dim",
    )
    console.print(
        "\nRun [bold]snapvcs init[/bold] to initialize a repository",
        style="yellow",
    )
    raise typer.Exit(EXIT_USER_ERROR)


@app.callback()
def cli(
    ctx: typer.Context,
    repo: Optional[Path] = typer.Option(
        None,
        "--repo",
        envvar=ROOT_ENV_VAR,
        help="Repository root (default: ./.snapvcs)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
) -> None:
    """Minimal content-addressed version control."""
    _setup_logging(verbose)
    ctx.obj = Repository(repo) if repo is not None else Repository.discover()


@app.command()
def version() -> None:
    """Show SnapVCS version."""
    from snapvcs import __version__
    typer.echo(f"SnapVCS version {__version__}")


@app.command()
def init(ctx: typer.Context) -> None:
    """Initialize a SnapVCS repository."""
    repo: Repository = ctx.obj

    try:
        root = repo.init()
    except RepositoryExistsError:
        console.print(
            "[bold red]Error:[/bold red] SnapVCS repository already exists",
            style="red",
        )
        console.print(f"  Repository found at: {repo.root}", style="dim")
        raise typer.Exit(EXIT_USER_ERROR)
    except SnapVCSError as e:
        _fail(str(e))

    console.print(
        f"Initialized empty SnapVCS repository in {root}",
        markup=False,
        soft_wrap=True,
    )


@app.command()
def add(
    ctx: typer.Context,
    files: Optional[List[Path]] = typer.Argument(None, help="Files to add"),
) -> None:
    """Store file contents in the object store."""
    repo: Repository = ctx.obj

    if not files:
        console.print("Nothing specified, nothing added.")
        return

    try:
        added = repo.add_files(files)
    except RepositoryNotFoundError:
        _not_a_repository(repo)
    except SnapVCSError as e:
        _fail(str(e))

    for path, blob_hash in added:
        console.print(
            f"  [green]+[/green] {escape(str(path))}  [dim]-> {blob_hash}[/dim]",
            soft_wrap=True,
        )


@app.command()
def commit(
    ctx: typer.Context,
    words: Optional[List[str]] = typer.Argument(None, help="Commit message words"),
    message: Optional[str] = typer.Option(
        None,
        "--message",
        "-m",
        help="Commit message (alternative to positional words)",
    ),
) -> None:
    """Snapshot every stored object as a commit."""
    repo: Repository = ctx.obj

    text = message if message is not None else " ".join(words or [])

    try:
        commit_id = repo.commit(text)
    except RepositoryNotFoundError:
        _not_a_repository(repo)
    except ValidationError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}", style="red")
        console.print(
            "  Usage: [bold]snapvcs commit <message words>[/bold]",
            style="yellow",
        )
        raise typer.Exit(EXIT_USER_ERROR)
    except SnapVCSError as e:
        _fail(str(e))

    console.print(
        f"Created commit {repo.commit_chain.commits_dir / commit_id}",
        markup=False,
        soft_wrap=True,
    )


def _show_log(repo: Repository) -> None:
    try:
        bodies = repo.log()
    except RepositoryNotFoundError:
        _not_a_repository(repo)
    except SnapVCSError as e:
        _fail(str(e))

    if not bodies:
        console.print("[dim]No commits yet[/dim]")
        return

    for body in bodies:
        # Undecodable message bytes are shown as replacement characters
        body = body.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
        console.print()
        console.print(body, markup=False, highlight=False, soft_wrap=True)
        console.print()


@app.command()
def log(ctx: typer.Context) -> None:
    """Show commit history, most recent first."""
    _show_log(ctx.obj)


@app.command()
def push(ctx: typer.Context) -> None:
    """Show commit history (no remote transport)."""
    _show_log(ctx.obj)


@app.command()
def pull(ctx: typer.Context) -> None:
    """Show commit history (no remote transport)."""
    _show_log(ctx.obj)


@app.command()
def remote(ctx: typer.Context) -> None:
    """Show commit history (no remote transport)."""
    _show_log(ctx.obj)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
