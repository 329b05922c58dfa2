"""Outcome of a regraph run."""

from typing import Dict, List, Optional

from pydantic import BaseModel

from git_regraph.models.refs import RefUpdate


class RegraphResult(BaseModel):
    """What a successful regraph changed."""

    original_id: str
    new_id: str
    rewritten: Dict[str, str]
    updated_refs: List[RefUpdate] = []
    notes_copied: bool = False  # True only when a notes ref was set up for copying
    notes_error: Optional[str] = None  # Set when copying notes failed after the refs moved

    @property
    def descendant_count(self) -> int:
        """Number of descendants rebuilt, not counting the edited commit."""
        return len(self.rewritten) - 1
