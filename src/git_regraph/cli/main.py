"""Command line interface for git-regraph."""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import click
from git import Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from git_regraph.core.object_store import GitObjectStore
from git_regraph.core.regraph import Regrapher
from git_regraph.errors import NoChangeError, RegraphError
from git_regraph.models import AllLocalRefs, CommitEdit, ExplicitRefs, Signature
from git_regraph.models.result import RegraphResult

console = Console()
err_console = Console(stderr=True)


@click.command()
@click.version_option(package_name="git-regraph")
@click.option(
    "-C",
    "repo_path",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Run as if started in this directory",
)
@click.option("-v", "--verbose", is_flag=True, help="Log what is being rewritten")
@click.option(
    "--update-all-local-refs",
    is_flag=True,
    help="Update all commits reachable from any non-remote ref, and update "
    "the non-remote refs to point to the updated commits.",
)
@click.option(
    "--update-ref",
    "update_ref",
    multiple=True,
    metavar="REF",
    help="Update all commits reachable from this ref, and update this ref "
    "to point to these updated commits.",
)
@click.option("--keep-parents", is_flag=True, help="Leave the parents of COMMIT unchanged")
@click.option("--clear-parents", is_flag=True, help="Remove all parents of COMMIT")
@click.option(
    "--parent",
    "parents",
    multiple=True,
    metavar="PARENT",
    help="Specify a parent for COMMIT",
)
@click.option("--keep-message", is_flag=True, help="Leave the message of COMMIT unchanged")
@click.option(
    "--message",
    "-m",
    "messages",
    multiple=True,
    help="Add a paragraph to the message of COMMIT",
)
@click.option(
    "--file",
    "-F",
    "message_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Take the message of COMMIT from FILE",
)
@click.option("--keep-tree", is_flag=True, help="Leave the tree of COMMIT unchanged")
@click.option("--tree", metavar="TREE", help="Use an existing tree for COMMIT")
@click.option("--keep-author", is_flag=True, help="Leave the author of COMMIT unchanged")
@click.option(
    "--author",
    nargs=2,
    metavar="NAME EMAIL",
    help="Change the author of COMMIT, setting the author time to now",
)
@click.option(
    "--keep-committer", is_flag=True, help="Leave the committer of COMMIT unchanged"
)
@click.option(
    "--committer",
    nargs=2,
    metavar="NAME EMAIL",
    help="Change the committer of COMMIT, setting the commit time to now",
)
@click.argument("commit")
def main(
    repo_path: str,
    verbose: bool,
    update_all_local_refs: bool,
    update_ref: Tuple[str, ...],
    keep_parents: bool,
    clear_parents: bool,
    parents: Tuple[str, ...],
    keep_message: bool,
    messages: Tuple[str, ...],
    message_file: Optional[str],
    keep_tree: bool,
    tree: Optional[str],
    keep_author: bool,
    author: Optional[Tuple[str, str]],
    keep_committer: bool,
    committer: Optional[Tuple[str, str]],
    commit: str,
):
    """Edit COMMIT and rebuild every commit that depends on it.

    For each part of COMMIT (parents, message, tree, author, committer) say
    explicitly whether to keep it or what to replace it with.
    """
    _require_one(
        "refs to update",
        {"--update-all-local-refs": update_all_local_refs, "--update-ref": update_ref},
    )
    _require_one(
        "parents",
        {"--keep-parents": keep_parents, "--clear-parents": clear_parents, "--parent": parents},
    )
    _require_one(
        "message",
        {"--keep-message": keep_message, "--message": messages, "--file": message_file},
    )
    _require_one("tree", {"--keep-tree": keep_tree, "--tree": tree})
    _require_one("author", {"--keep-author": keep_author, "--author": author})
    _require_one("committer", {"--keep-committer": keep_committer, "--committer": committer})

    _configure_logging(verbose)

    try:
        repo = Repo(repo_path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        console.print("[red]Error: Not a git repository[/red]")
        raise click.Abort() from e

    if update_all_local_refs:
        refs_to_update = AllLocalRefs()
    else:
        refs_to_update = ExplicitRefs(names=list(update_ref))

    try:
        store = GitObjectStore(repo)
        commit_id = store.resolve_commit(commit)

        edit = CommitEdit()
        if clear_parents:
            edit.edit_parents([])
        elif parents:
            edit.edit_parents([store.resolve_commit(parent) for parent in parents])

        if messages:
            edit.edit_message("\n\n".join(messages))
        elif message_file:
            edit.edit_message(Path(message_file).read_text(encoding="utf-8"))

        if tree:
            edit.edit_tree(store.resolve_tree(tree))
        if author:
            edit.edit_author(Signature.now(*author))
        if committer:
            edit.edit_committer(Signature.now(*committer))

        result = Regrapher(repo).regraph(refs_to_update, commit_id, edit)
    except NoChangeError as e:
        console.print(f"[yellow]Nothing to do: {e}[/yellow]")
        raise click.Abort() from e
    except RegraphError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort() from e
    except (GitCommandError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort() from e

    _print_result(result)


def _require_one(group: str, choices: Dict[str, object]) -> None:
    given = [option for option, value in choices.items() if value]
    if len(given) != 1:
        raise click.UsageError(
            f"Specify exactly one of {', '.join(choices)} for the {group}"
            + (f" (got {', '.join(given)})" if given else "")
        )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _print_result(result: RegraphResult) -> None:
    console.print(
        f"[green]✅ Edited {result.original_id[:12]} -> {result.new_id[:12]}, "
        f"rebuilt {result.descendant_count} descendant commit(s)[/green]"
    )
    if result.notes_error:
        console.print(f"[yellow]Warning: notes were not copied: {escape(result.notes_error)}[/yellow]")

    if not result.updated_refs:
        console.print("[yellow]No references pointed at rewritten commits[/yellow]")
        return

    table = Table(title="Updated references")
    table.add_column("Reference", style="cyan")
    table.add_column("Old", style="dim")
    table.add_column("New", style="green")
    for update in result.updated_refs:
        table.add_row(update.name, update.old_target[:12], update.new_target[:12])
    console.print(table)


if __name__ == "__main__":
    main()
