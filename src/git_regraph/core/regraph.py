"""Edit one commit and rebuild every descendant that depends on it."""

import logging
from typing import Dict, List, Optional, Union

from git import Repo

from git_regraph.config import RegraphConfig
from git_regraph.core.notes import copy_notes
from git_regraph.core.object_store import GitObjectStore
from git_regraph.core.references import GitReferenceStore, update_refs
from git_regraph.core.walker import walk
from git_regraph.errors import (
    InvalidMessageEncodingError,
    NoChangeError,
    StoreFailureError,
)
from git_regraph.models.edit import CommitEdit
from git_regraph.models.refs import AllLocalRefs, ExplicitRefs, ResolvedRef
from git_regraph.models.result import RegraphResult

logger = logging.getLogger(__name__)

RefSelection = Union[AllLocalRefs, ExplicitRefs]


class Regrapher:
    """Rewrites the history of one repository around a single edited commit.

    A run is single pass and assumes nothing else updates the selected refs
    while it is in progress. New objects are only ever added; the only
    mutation is moving refs, and that happens last.
    """

    def __init__(self, repo: Repo, config: Optional[RegraphConfig] = None):
        self.repo = repo
        self.config = config if config is not None else RegraphConfig.from_repo(repo)
        self.objects = GitObjectStore(repo)
        self.refs = GitReferenceStore(repo)

    def regraph(
        self,
        refs_to_update: RefSelection,
        commit_to_edit: str,
        edit: CommitEdit,
    ) -> RegraphResult:
        """Apply ``edit`` to ``commit_to_edit`` and propagate it.

        Every commit reachable from ``refs_to_update`` that descends from the
        edited commit is rebuilt with remapped parents, then the refs that
        pointed at rewritten commits are moved. Raises a
        :class:`~git_regraph.errors.RegraphError` on failure, in which case
        no ref has been moved. A failure to copy notes happens after the refs
        moved, so it is logged and recorded in the result's ``notes_error``.
        """
        resolved_refs = refs_to_update.resolve(self.refs)

        original = self.objects.read_commit(commit_to_edit)
        new_id = edit.resolve(self.objects, original)
        if new_id == original.id:
            raise NoChangeError(original.id)
        if original.signed:
            logger.warning("Dropping the signature of edited commit %s", original.id)

        old_to_new: Dict[str, str] = {original.id: new_id}

        old_commit_ids = self._discover_old_commits(resolved_refs, original.id)
        logger.debug("Commits we need to visit: %s", old_commit_ids)

        self._update_affected_commits(old_commit_ids, old_to_new)
        logger.debug(
            "The following old commits have now been updated to the "
            "corresponding new commits: %s",
            old_to_new,
        )

        updated_refs = update_refs(
            self.refs,
            resolved_refs,
            old_to_new,
            self.config.audit_message(original.id, new_id),
        )

        notes_copied = False
        notes_error = None
        if self.config.rewrite_notes:
            # The refs have already moved; a failure is reported on the result
            try:
                notes_copied = copy_notes(self.repo, old_to_new)
            except StoreFailureError as e:
                logger.warning("Refs were updated but notes were not copied: %s", e)
                notes_error = str(e)

        return RegraphResult(
            original_id=original.id,
            new_id=new_id,
            rewritten=old_to_new,
            updated_refs=updated_refs,
            notes_copied=notes_copied,
            notes_error=notes_error,
        )

    def _discover_old_commits(
        self, resolved_refs: List[ResolvedRef], edited_commit_id: str
    ) -> List[str]:
        # Collected up front so no object is written while git is still walking
        starts = [ref.commit for ref in resolved_refs if ref.commit is not None]
        return list(walk(self.repo, starts, hidden=[edited_commit_id]))

    def _update_affected_commits(
        self, old_commit_ids: List[str], old_to_new: Dict[str, str]
    ) -> None:
        for old_id in old_commit_ids:
            commit = self.objects.read_commit(old_id)

            if not any(pid in old_to_new for pid in commit.parent_ids):
                continue

            if not commit.has_valid_message:
                raise InvalidMessageEncodingError(commit.id)
            if commit.signed:
                logger.warning("Dropping the signature of rewritten commit %s", old_id)

            parent_ids = [old_to_new.get(pid, pid) for pid in commit.parent_ids]
            new_id = self.objects.create_commit(
                parent_ids=parent_ids,
                tree_id=commit.tree_id,
                message=commit.message,
                author=commit.author,
                committer=commit.committer,
                encoding=commit.encoding,
            )
            old_to_new[old_id] = new_id
