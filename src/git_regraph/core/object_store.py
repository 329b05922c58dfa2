"""Content-addressed commit storage on top of GitPython's object database."""

import logging
from io import BytesIO
from typing import List

from git import Repo
from git.exc import GitCommandError
from git.objects import Commit
from git.objects.util import altz_to_utctz_str, parse_actor_and_date
from gitdb import IStream
from gitdb.exc import ODBError
from gitdb.util import bin_to_hex

from git_regraph.errors import (
    InvalidMessageEncodingError,
    NotFoundError,
    StoreFailureError,
)
from git_regraph.models.commit import DEFAULT_ENCODING, CommitData, Signature

logger = logging.getLogger(__name__)


class GitObjectStore:
    """Reads and writes commit objects of one repository.

    Objects are never modified: writing the same logical content twice
    yields the same id, and the second write is a no-op.
    """

    def __init__(self, repo: Repo):
        self.repo = repo

    def create_commit(
        self,
        parent_ids: List[str],
        tree_id: str,
        message: str,
        author: Signature,
        committer: Signature,
        encoding: str = DEFAULT_ENCODING,
    ) -> str:
        """Write a commit with exactly these fields and return its id.

        Author and committer names and emails read by :meth:`read_commit`
        are written back byte for byte, even when they are not valid in
        ``encoding``.
        """
        try:
            data = _serialize_commit(
                parent_ids, tree_id, message, author, committer, encoding
            )
        except (UnicodeEncodeError, LookupError) as e:
            raise StoreFailureError("encode commit on tree", tree_id, str(e)) from e

        try:
            istream = self.repo.odb.store(IStream(Commit.type, len(data), BytesIO(data)))
        except (GitCommandError, ODBError, OSError) as e:
            raise StoreFailureError("write commit on tree", tree_id, str(e)) from e

        new_id = bin_to_hex(istream.binsha).decode("ascii")
        logger.debug("Wrote commit %s with parents %s", new_id, parent_ids)
        return new_id

    def read_commit(self, commit_id: str) -> CommitData:
        """Read a commit's fields. Raises NotFoundError if it does not exist."""
        try:
            commit = self.repo.commit(commit_id)
            raw = self.repo.odb.stream(commit.binsha).read()
            encoding = commit.encoding or DEFAULT_ENCODING
            # The message is everything after the first blank line of the raw object
            headers, _, body = raw.partition(b"\n\n")
            return CommitData(
                id=commit.hexsha,
                parent_ids=[parent.hexsha for parent in commit.parents],
                tree_id=commit.tree.hexsha,
                message=_decode_message(body, encoding),
                author=_header_signature(headers, b"author", encoding),
                committer=_header_signature(headers, b"committer", encoding),
                encoding=encoding,
                signed=bool(getattr(commit, "gpgsig", None)),
            )
        except LookupError as e:
            # GitPython could not even load the declared encoding
            raise InvalidMessageEncodingError(commit_id) from e
        except (ODBError, ValueError) as e:
            raise NotFoundError("commit", commit_id) from e
        except (GitCommandError, OSError) as e:
            raise StoreFailureError("read commit", commit_id, str(e)) from e

    def resolve_commit(self, revspec: str) -> str:
        """Turn a commit-ish revision specifier into a commit id."""
        try:
            return self.repo.commit(revspec).hexsha
        except (ODBError, ValueError) as e:
            raise NotFoundError("commit", revspec) from e
        except (GitCommandError, OSError) as e:
            raise StoreFailureError("resolve commit", revspec, str(e)) from e

    def resolve_tree(self, revspec: str) -> str:
        """Turn a tree-ish revision specifier into a tree id.

        A commit (or a tag of one) resolves to the commit's tree.
        """
        try:
            obj = self.repo.rev_parse(revspec)
            while obj.type == "tag":
                obj = obj.object
            if obj.type == "commit":
                obj = obj.tree
        except (ODBError, ValueError) as e:
            raise NotFoundError("tree", revspec) from e
        except (GitCommandError, OSError) as e:
            raise StoreFailureError("resolve tree", revspec, str(e)) from e

        if obj.type != "tree":
            raise NotFoundError("tree", revspec)
        return obj.hexsha


def _header_signature(headers: bytes, field: bytes, encoding: str) -> Signature:
    prefix = field + b" "
    line = next((h for h in headers.split(b"\n") if h.startswith(prefix)), prefix)
    try:
        actor, timestamp, tz_offset = parse_actor_and_date(line.decode(encoding))
        return Signature(
            name=actor.name or "",
            email=actor.email or "",
            timestamp=timestamp,
            tz_offset=tz_offset,
        )
    except UnicodeDecodeError:
        pass

    # Not valid in the commit's encoding: keep the exact bytes for rewriting
    actor, timestamp, tz_offset = parse_actor_and_date(
        line.decode(encoding, "surrogateescape")
    )
    name = (actor.name or "").encode(encoding, "surrogateescape")
    email = (actor.email or "").encode(encoding, "surrogateescape")
    return Signature(
        name=name.decode(encoding, "replace"),
        email=email.decode(encoding, "replace"),
        timestamp=timestamp,
        tz_offset=tz_offset,
        raw_identity=b"%s <%s>" % (name, email),
    )


def _signature_line(field: str, signature: Signature, encoding: str) -> bytes:
    identity = signature.raw_identity
    if identity is None:
        identity = f"{signature.name} <{signature.email}>".encode(encoding)
    date = f"{signature.timestamp} {altz_to_utctz_str(signature.tz_offset)}"
    return b"%s %s %s" % (field.encode("ascii"), identity, date.encode("ascii"))


def _serialize_commit(
    parent_ids: List[str],
    tree_id: str,
    message: str,
    author: Signature,
    committer: Signature,
    encoding: str,
) -> bytes:
    lines = [f"tree {tree_id}".encode("ascii")]
    lines += [f"parent {pid}".encode("ascii") for pid in parent_ids]
    lines.append(_signature_line("author", author, encoding))
    lines.append(_signature_line("committer", committer, encoding))
    if encoding != DEFAULT_ENCODING:
        lines.append(f"encoding {encoding}".encode("ascii"))
    return b"\n".join(lines) + b"\n\n" + message.encode(encoding)


def _decode_message(body: bytes, encoding: str):
    try:
        return body.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        return None
