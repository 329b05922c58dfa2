"""Configuration read from the repository's git config."""

from typing import Optional

from git import Repo
from git.exc import GitCommandError
from pydantic import BaseModel

# git config key -> RegraphConfig field
CONFIG_KEYS = {
    "regraph.rewriteNotes": "rewrite_notes",
    "regraph.reflogPrefix": "reflog_prefix",
}

# Read through git's own boolean parsing, so "yes", "on", "1" and a key
# with no value all work the way they do for git
BOOL_KEYS = {"regraph.rewriteNotes"}


class RegraphConfig(BaseModel):
    """Settings for a regraph run."""

    rewrite_notes: bool = True
    reflog_prefix: str = "regraph"

    @classmethod
    def from_repo(cls, repo: Repo) -> "RegraphConfig":
        """Load settings, falling back to defaults for unset keys."""
        values = {}
        for key, field in CONFIG_KEYS.items():
            value = _get_config_value(repo, key)
            if value is not None:
                values[field] = value
        return cls(**values)

    def audit_message(self, old_id: str, new_id: str) -> str:
        return f"{self.reflog_prefix}: update after editing commit {old_id} -> {new_id}"


def _get_config_value(repo: Repo, key: str) -> Optional[str]:
    args = ["--type=bool", "--get", key] if key in BOOL_KEYS else ["--get", key]
    try:
        return repo.git.config(*args)
    except GitCommandError as e:
        # Exit status 1 means the key is not set
        if e.status == 1:
            return None
        if key in BOOL_KEYS:
            raise ValueError(f"{key} is not a boolean: {e.stderr.strip()}") from e
        raise
