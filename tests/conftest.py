"""Shared fixtures: real temporary git repositories with labelled commits."""

import tempfile
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pytest
from git import Actor, Repo
from git.objects import Commit
from gitdb import IStream
from gitdb.util import bin_to_hex

BASE_TIME = 1_600_000_000


@pytest.fixture
def temp_repo():
    """Create an empty git repository with a configured identity."""
    with tempfile.TemporaryDirectory() as temp_dir:
        repo = Repo.init(temp_dir)
        with repo.config_writer() as config:
            config.set_value("user", "name", "Test User")
            config.set_value("user", "email", "test@example.com")
        yield repo
        repo.close()


def build_graph(
    repo: Repo,
    graph: Sequence[Tuple[str, int, Sequence[str]]],
    branches: Sequence[Tuple[str, str]] = (),
) -> Dict[str, str]:
    """Create one commit per ``(label, time, parent labels)`` entry.

    Each commit adds a file named after its label and rewrites a shared
    file, so every commit has a distinct tree. The label is the message,
    and author/committer names are derived from it. Returns label -> id.
    """
    work_dir = Path(repo.working_tree_dir)
    label_to_id: Dict[str, str] = {}

    for label, time_sec, parents in graph:
        assert label not in label_to_id, "No duplicate commit labels"

        (work_dir / label).write_text("")
        (work_dir / "shared").write_text(f"{label}\n")
        repo.index.add([label, "shared"])
        tree = repo.index.write_tree()

        date = f"{BASE_TIME + time_sec} +0000"
        commit = Commit.create_from_tree(
            repo,
            tree,
            label,
            parent_commits=[repo.commit(label_to_id[parent]) for parent in parents],
            head=False,
            author=Actor(f"{label}-author", f"{label}-email"),
            committer=Actor(f"{label}-committer", f"{label}-email"),
            author_date=date,
            commit_date=date,
        )
        label_to_id[label] = commit.hexsha

    for branch_name, target in branches:
        repo.create_head(branch_name, label_to_id[target])

    return label_to_id


def write_raw_commit(
    repo: Repo,
    tree_id: str,
    parent_ids: List[str],
    message: bytes,
    identity: bytes = b"Raw <raw-email>",
    extra_headers: Sequence[bytes] = (),
) -> str:
    """Store a commit object byte for byte, bypassing any encoding."""
    header = [f"tree {tree_id}".encode("ascii")]
    header += [f"parent {parent_id}".encode("ascii") for parent_id in parent_ids]
    date = f"{BASE_TIME + 100} +0000".encode("ascii")
    header += [b"author %s %s" % (identity, date), b"committer %s %s" % (identity, date)]
    header += list(extra_headers)
    data = b"\n".join(header) + b"\n\n" + message
    istream = repo.odb.store(IStream("commit", len(data), BytesIO(data)))
    return bin_to_hex(istream.binsha).decode("ascii")


def commits_reachable_from(repo: Repo, rev: str) -> Dict[str, Commit]:
    """Map commit message (the label) to commit for everything reachable."""
    return {commit.message: commit for commit in repo.iter_commits(rev)}


@pytest.fixture
def squash_repo(temp_repo):
    """A(root), B(root), C(B), D(A, C), E(D) with ``main`` at E."""
    labels = build_graph(
        temp_repo,
        [
            ("A", 0, []),  # Main root
            ("B", 1, []),  # Subtree root
            ("C", 2, ["B"]),  # More than one commit in the subtree
            ("D", 3, ["A", "C"]),  # Subtree merged into main
            ("E", 4, ["D"]),  # Commit after the merge
        ],
        [("main", "E")],
    )
    return temp_repo, labels
