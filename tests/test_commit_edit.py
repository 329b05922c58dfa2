"""Tests for the CommitEdit descriptor."""

from unittest.mock import Mock

import pytest

from git_regraph.errors import InvalidMessageEncodingError
from git_regraph.models import CommitData, CommitEdit, Signature

AUTHOR = Signature(name="Ada", email="ada@example.com", timestamp=1_600_000_000)
COMMITTER = Signature(name="Bob", email="bob@example.com", timestamp=1_600_000_500, tz_offset=3600)


def make_commit(**overrides):
    fields = dict(
        id="c" * 40,
        parent_ids=["a" * 40, "b" * 40],
        tree_id="t" * 40,
        message="Original message\n",
        author=AUTHOR,
        committer=COMMITTER,
        encoding="ISO-8859-1",
    )
    fields.update(overrides)
    return CommitData(**fields)


@pytest.mark.parametrize(
    "setter, value",
    [
        ("edit_parents", []),
        ("edit_message", "msg"),
        ("edit_tree", "f" * 40),
        ("edit_author", AUTHOR),
        ("edit_committer", COMMITTER),
    ],
)
def test_each_field_can_only_be_set_once(setter, value):
    edit = CommitEdit()
    getattr(edit, setter)(value)

    with pytest.raises(AssertionError):
        getattr(edit, setter)(value)


def test_new_edit_is_empty():
    assert CommitEdit().is_empty
    assert not CommitEdit().edit_message("x").is_empty
    assert not CommitEdit().edit_parents([]).is_empty


def test_unchanged_edit_does_not_write():
    store = Mock()
    original = make_commit()

    assert CommitEdit().resolve(store, original) == original.id
    assert CommitEdit().edit_author(AUTHOR).resolve(store, original) == original.id
    store.create_commit.assert_not_called()


def test_overrides_are_substituted():
    store = Mock()
    store.create_commit.return_value = "n" * 40
    original = make_commit()

    new_id = (
        CommitEdit()
        .edit_parents([])
        .edit_committer(AUTHOR)
        .resolve(store, original)
    )

    assert new_id == "n" * 40
    store.create_commit.assert_called_once_with(
        parent_ids=[],
        tree_id=original.tree_id,
        message=original.message,
        author=AUTHOR,
        committer=AUTHOR,
        encoding="ISO-8859-1",
    )


def test_new_message_is_written_as_utf8():
    store = Mock()
    original = make_commit()

    CommitEdit().edit_message("Ünïcode message").resolve(store, original)

    kwargs = store.create_commit.call_args.kwargs
    assert kwargs["message"] == "Ünïcode message"
    assert kwargs["encoding"] == "UTF-8"
    assert kwargs["parent_ids"] == original.parent_ids


def test_kept_undecodable_message_is_rejected():
    store = Mock()
    original = make_commit(message=None)

    with pytest.raises(InvalidMessageEncodingError) as exc_info:
        CommitEdit().edit_tree("f" * 40).resolve(store, original)

    assert exc_info.value.commit == original.id
    store.create_commit.assert_not_called()


def test_replacing_undecodable_message_is_allowed():
    store = Mock()
    store.create_commit.return_value = "n" * 40
    original = make_commit(message=None)

    assert CommitEdit().edit_message("Fixed").resolve(store, original) == "n" * 40


def test_signature_now_uses_current_time():
    signature = Signature.now("Ada", "ada@example.com")

    assert signature.name == "Ada"
    assert signature.timestamp > 1_600_000_000
    assert -14 * 3600 <= signature.tz_offset <= 14 * 3600
