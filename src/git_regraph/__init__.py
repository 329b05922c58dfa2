"""git-regraph - edit a commit and rebuild everything that depends on it."""

__version__ = "0.1.0"
