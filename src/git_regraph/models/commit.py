"""Commit and signature models."""

import time
from typing import List, Optional

from pydantic import BaseModel

DEFAULT_ENCODING = "UTF-8"


class Signature(BaseModel):
    """Identity and timestamp of an author or committer."""

    name: str
    email: str
    timestamp: int
    tz_offset: int = 0  # Seconds west of UTC, as GitPython stores it
    # Exact "name <email>" bytes, set only when they do not decode in the
    # commit's encoding
    raw_identity: Optional[bytes] = None

    model_config = {"frozen": True}

    @classmethod
    def now(cls, name: str, email: str) -> "Signature":
        """Create a signature stamped with the current local time."""
        local = time.localtime()
        offset = time.altzone if local.tm_isdst > 0 else time.timezone
        return cls(name=name, email=email, timestamp=int(time.time()), tz_offset=offset)


class CommitData(BaseModel):
    """The logical fields of a commit object as read from the store."""

    id: str
    parent_ids: List[str] = []
    tree_id: str
    message: Optional[str] = None  # None when the raw bytes do not decode
    author: Signature
    committer: Signature
    encoding: str = DEFAULT_ENCODING
    signed: bool = False

    model_config = {"frozen": True}

    @property
    def has_valid_message(self) -> bool:
        return self.message is not None
