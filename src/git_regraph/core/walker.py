"""Reachability walk over the commit graph."""

from typing import Iterable, Iterator

from git import Repo
from git.exc import GitCommandError

from git_regraph.errors import StoreFailureError


def walk(repo: Repo, starts: Iterable[str], hidden: Iterable[str] = ()) -> Iterator[str]:
    """Yield ids of commits reachable from ``starts``, parents before children.

    Commits in ``hidden`` and all of their ancestors are excluded, the same
    way ``git rev-list A ^B`` excludes them. Each id is yielded once. The
    sequence is single pass; walk again for a fresh one.
    """
    start_ids = sorted(set(starts))
    if not start_ids:
        return
    revs = start_ids + [f"^{commit_id}" for commit_id in sorted(set(hidden))]

    try:
        for commit in repo.iter_commits(revs, topo_order=True, reverse=True):
            yield commit.hexsha
    except GitCommandError as e:
        raise StoreFailureError("walk history from", " ".join(start_ids), str(e)) from e
