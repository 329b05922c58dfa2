"""Data models for git-regraph."""

from .commit import CommitData, Signature
from .edit import CommitEdit
from .refs import AllLocalRefs, ExplicitRefs, RefUpdate, ResolvedRef
from .result import RegraphResult

__all__ = [
    "AllLocalRefs",
    "CommitData",
    "CommitEdit",
    "ExplicitRefs",
    "RefUpdate",
    "RegraphResult",
    "ResolvedRef",
    "Signature",
]
