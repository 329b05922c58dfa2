"""Commit edit descriptor."""

from typing import List, Optional

from git_regraph.errors import InvalidMessageEncodingError
from git_regraph.models.commit import DEFAULT_ENCODING, CommitData, Signature


class CommitEdit:
    """Describes which fields of one commit change and what they become.

    Every field starts as "keep the original value". Each ``edit_*`` method
    may be called at most once per field; calling it twice is a programming
    error. The methods return the edit itself so calls can be chained::

        edit = CommitEdit().edit_parents([]).edit_message("Squashed history")
    """

    def __init__(self):
        self._parents: Optional[List[str]] = None
        self._message: Optional[str] = None
        self._tree: Optional[str] = None
        self._author: Optional[Signature] = None
        self._committer: Optional[Signature] = None

    def edit_parents(self, parent_ids: List[str]) -> "CommitEdit":
        assert self._parents is None, "Overwriting previous intent to modify parents"
        self._parents = list(parent_ids)
        return self

    def edit_message(self, message: str) -> "CommitEdit":
        assert self._message is None, "Overwriting previous intent to modify message"
        self._message = message
        return self

    def edit_tree(self, tree_id: str) -> "CommitEdit":
        assert self._tree is None, "Overwriting previous intent to modify tree"
        self._tree = tree_id
        return self

    def edit_author(self, author: Signature) -> "CommitEdit":
        assert self._author is None, "Overwriting previous intent to modify author"
        self._author = author
        return self

    def edit_committer(self, committer: Signature) -> "CommitEdit":
        assert (
            self._committer is None
        ), "Overwriting previous intent to modify committer"
        self._committer = committer
        return self

    @property
    def is_empty(self) -> bool:
        """True when no field is overridden."""
        return all(
            value is None
            for value in (
                self._parents,
                self._message,
                self._tree,
                self._author,
                self._committer,
            )
        )

    def resolve(self, store, original: CommitData) -> str:
        """Materialize the edited version of ``original`` and return its id.

        ``store`` is a :class:`~git_regraph.core.object_store.GitObjectStore`.
        When the overrides leave every field as it was, the original id is
        returned without writing anything.
        """
        encoding = original.encoding
        if self._message is not None:
            message = self._message
            encoding = DEFAULT_ENCODING
        elif original.has_valid_message:
            message = original.message
        else:
            raise InvalidMessageEncodingError(original.id)

        parent_ids = self._parents if self._parents is not None else original.parent_ids
        tree_id = self._tree if self._tree is not None else original.tree_id
        author = self._author if self._author is not None else original.author
        committer = (
            self._committer if self._committer is not None else original.committer
        )

        unchanged = (
            list(parent_ids) == list(original.parent_ids)
            and message == original.message
            and tree_id == original.tree_id
            and author == original.author
            and committer == original.committer
        )
        if unchanged:
            return original.id

        return store.create_commit(
            parent_ids=parent_ids,
            tree_id=tree_id,
            message=message,
            author=author,
            committer=committer,
            encoding=encoding,
        )
