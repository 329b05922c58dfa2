"""Errors raised while regraphing a repository."""

from typing import Optional


class RegraphError(Exception):
    """Base class for every failure of a regraph run."""


class NoChangeError(RegraphError):
    """The edit reproduced the original commit exactly."""

    def __init__(self, commit: str):
        self.commit = commit
        super().__init__(
            f"The specified edit does not actually change commit {commit}."
        )


class InvalidMessageEncodingError(RegraphError):
    """A commit's message cannot be decoded, so it cannot be re-applied."""

    def __init__(self, commit: str):
        self.commit = commit
        super().__init__(
            f"Commit {commit} does not have a valid message in its declared "
            "encoding and could not be re-applied."
        )


class NotFoundError(RegraphError):
    """A commit, tree, revision or reference does not exist."""

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"No such {kind}: {name}")


class StoreFailureError(RegraphError):
    """The object database or the reference store reported an error."""

    def __init__(self, operation: str, target: str, detail: Optional[str] = None):
        self.operation = operation
        self.target = target
        message = f"Failed to {operation} {target}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class StaleReferenceError(StoreFailureError):
    """A reference moved between being resolved and being updated."""

    def __init__(self, ref: str, expected: str, actual: str):
        self.ref = ref
        self.expected = expected
        self.actual = actual
        super().__init__(
            "update",
            ref,
            f"expected it at {expected} but it now points to {actual}",
        )
