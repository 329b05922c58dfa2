"""Regraph engine and its adapters over GitPython."""

from .object_store import GitObjectStore
from .references import GitReferenceStore, update_refs
from .regraph import Regrapher
from .walker import walk

__all__ = ["GitObjectStore", "GitReferenceStore", "Regrapher", "update_refs", "walk"]
