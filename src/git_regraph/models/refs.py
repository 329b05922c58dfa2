"""Reference models and the choice of which refs a regraph updates."""

from typing import Any, List, Optional

from pydantic import BaseModel

REMOTE_PREFIX = "refs/remotes/"


class ResolvedRef(BaseModel):
    """A direct reference and the target it had when it was resolved."""

    name: str  # Path of the direct ref after following symbolic indirection
    target: str
    commit: Optional[str] = None  # Target peeled through tags; None if not a commit
    reference: Any = None  # The GitPython reference used to write it back

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @property
    def is_remote(self) -> bool:
        return self.name.startswith(REMOTE_PREFIX)


class RefUpdate(BaseModel):
    """One retargeted reference."""

    name: str
    old_target: str
    new_target: str


class AllLocalRefs(BaseModel):
    """Update every reference that is not a remote-tracking ref."""

    def resolve(self, ref_store) -> List[ResolvedRef]:
        return [ref for ref in ref_store.list_references() if not ref.is_remote]


class ExplicitRefs(BaseModel):
    """Update exactly the named references."""

    names: List[str]

    def resolve(self, ref_store) -> List[ResolvedRef]:
        resolved = []
        seen = set()
        for name in self.names:
            ref = ref_store.lookup(name)
            if ref.name not in seen:
                seen.add(ref.name)
                resolved.append(ref)
        return resolved
