"""Carry git notes over from rewritten commits to their replacements."""

import logging
import os
import tempfile
from typing import Dict, List

from git import Repo
from git.exc import GitCommandError

from git_regraph.errors import StoreFailureError

logger = logging.getLogger(__name__)

REWRITE_COMMAND = "regraph"


def rewrite_refs(repo: Repo) -> List[str]:
    """Notes refs that ``git notes copy --for-rewrite`` would copy into.

    Mirrors git: ``GIT_NOTES_REWRITE_REF`` overrides ``notes.rewriteRef``,
    and ``notes.rewrite.regraph = false`` turns copying off.
    """
    if _config(repo, "--type=bool", "--get", f"notes.rewrite.{REWRITE_COMMAND}") == "false":
        return []
    env_refs = os.environ.get("GIT_NOTES_REWRITE_REF")
    if env_refs is not None:
        return [ref for ref in env_refs.split(":") if ref]
    configured = _config(repo, "--get-all", "notes.rewriteRef")
    return configured.splitlines() if configured else []


def copy_notes(repo: Repo, remap: Dict[str, str]) -> bool:
    """Copy notes for every ``old -> new`` pair in ``remap``.

    Uses ``git notes copy --for-rewrite``, so which notes refs are copied
    follows ``notes.rewriteRef``, ``notes.rewriteMode``,
    ``notes.rewrite.regraph`` and ``GIT_NOTES_REWRITE_REF``. Commits without
    a note are skipped. Returns False when no notes ref is set up for
    copying, in which case git is not run.
    """
    refs = rewrite_refs(repo)
    if not remap or not refs:
        logger.debug("No notes to copy (rewrite refs: %s)", refs)
        return False

    lines = "".join(f"{old} {new}\n" for old, new in remap.items())
    with tempfile.TemporaryFile() as pairs:
        pairs.write(lines.encode("ascii"))
        pairs.seek(0)
        try:
            repo.git.notes("copy", "--stdin", f"--for-rewrite={REWRITE_COMMAND}", istream=pairs)
        except GitCommandError as e:
            raise StoreFailureError("copy notes for", f"{len(remap)} rewritten commits", str(e)) from e

    logger.debug("Copied notes in %s for %d rewritten commits", refs, len(remap))
    return True


def _config(repo: Repo, *args: str) -> str:
    try:
        return repo.git.config(*args)
    except GitCommandError as e:
        # Exit status 1 means the key is not set
        if e.status == 1:
            return ""
        raise StoreFailureError("read notes config", args[-1], str(e)) from e
