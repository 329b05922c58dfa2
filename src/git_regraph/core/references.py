"""Reference lookup and atomic retargeting with reflog entries."""

import logging
from typing import Dict, List, Optional

from git import Repo, SymbolicReference
from git.exc import GitCommandError
from gitdb.exc import ODBError

from git_regraph.errors import NotFoundError, StaleReferenceError, StoreFailureError
from git_regraph.models.refs import RefUpdate, ResolvedRef

logger = logging.getLogger(__name__)

# The order git uses to expand a short ref name (see git-rev-parse(1))
DWIM_PATTERNS = [
    "{}",
    "refs/{}",
    "refs/tags/{}",
    "refs/heads/{}",
    "refs/remotes/{}",
    "refs/remotes/{}/HEAD",
]


class GitReferenceStore:
    """Reads and updates the references of one repository."""

    def __init__(self, repo: Repo):
        self.repo = repo

    def list_references(self) -> List[ResolvedRef]:
        """Every reference under ``refs/``, dereferenced to direct refs."""
        resolved = []
        seen = set()
        try:
            for reference in self.repo.references:
                ref = self._to_resolved(reference)
                if ref is not None and ref.name not in seen:
                    seen.add(ref.name)
                    resolved.append(ref)
        except (GitCommandError, OSError) as e:
            raise StoreFailureError("list references in", str(self.repo.git_dir), str(e)) from e
        return resolved

    def lookup(self, name: str) -> ResolvedRef:
        """Find a reference by full or abbreviated name."""
        for pattern in DWIM_PATTERNS:
            path = pattern.format(name)
            try:
                reference = SymbolicReference.from_path(self.repo, path)
            except ValueError:
                continue
            if not reference.is_valid():
                continue
            ref = self._to_resolved(reference)
            if ref is not None:
                return ref
        raise NotFoundError("reference", name)

    def resolve(self, name: str) -> str:
        """Target id of a reference after following symbolic indirection."""
        return self.lookup(name).target

    def current_target(self, ref: ResolvedRef) -> str:
        """Re-read the live target of an already resolved reference."""
        try:
            return ref.reference.object.hexsha
        except (ODBError, ValueError) as e:
            raise NotFoundError("reference", ref.name) from e
        except (GitCommandError, OSError) as e:
            raise StoreFailureError("read reference", ref.name, str(e)) from e

    def set_target(self, ref: ResolvedRef, new_target: str, audit_message: str) -> None:
        """Point ``ref`` at ``new_target`` and append a reflog entry."""
        try:
            ref.reference.set_object(self.repo.commit(new_target), logmsg=audit_message)
        except (GitCommandError, ODBError, ValueError, OSError) as e:
            raise StoreFailureError("update", ref.name, str(e)) from e

    def _to_resolved(self, reference: SymbolicReference) -> Optional[ResolvedRef]:
        try:
            direct = _dereference(reference)
            obj = direct.object
        except ValueError:
            # Dangling symbolic ref, e.g. an unborn branch
            logger.debug("Skipping reference %s without a target", reference.path)
            return None
        return ResolvedRef(
            name=direct.path,
            target=obj.hexsha,
            commit=_peel_to_commit(obj),
            reference=direct,
        )


def _dereference(reference: SymbolicReference) -> SymbolicReference:
    while not reference.is_detached:
        reference = reference.ref
    return reference


def _peel_to_commit(obj) -> Optional[str]:
    while obj.type == "tag":
        obj = obj.object
    if obj.type == "commit":
        return obj.hexsha
    return None


def update_refs(
    ref_store: GitReferenceStore,
    refs: List[ResolvedRef],
    remap: Dict[str, str],
    audit_message: str,
) -> List[RefUpdate]:
    """Retarget every ref whose target was rewritten.

    All refs that are about to move are checked first; if any of them no
    longer points where it did when it was resolved, nothing is written.
    """
    pending = [ref for ref in refs if ref.target in remap]

    for ref in pending:
        live = ref_store.current_target(ref)
        if live != ref.target:
            raise StaleReferenceError(ref.name, ref.target, live)

    updates = []
    for ref in pending:
        new_target = remap[ref.target]
        try:
            ref_store.set_target(ref, new_target, audit_message)
        except StoreFailureError:
            if updates:
                logger.error(
                    "Updating %s failed after these refs were already moved: %s",
                    ref.name,
                    ", ".join(update.name for update in updates),
                )
            raise
        logger.info("Updated %s: %s -> %s", ref.name, ref.target, new_target)
        updates.append(RefUpdate(name=ref.name, old_target=ref.target, new_target=new_target))
    return updates
