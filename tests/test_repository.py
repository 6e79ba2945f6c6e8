import pytest

from saypi.entities import ListArgs
from saypi.errors import (
    CursorNotFound,
    HasDependents,
    NotFound,
    ProtectedEntity,
    ValidationIssue,
)
from saypi.services.builtins import BUILTIN_MOODS

USER = "u"
OTHER_USER = "someone-else"


def _names(page):
    return [item.public_id for item in page.items]


def _add_line(repository, conversation_id, mood_name="default", user=USER, text="hello"):
    return repository.insert_line(
        user,
        conversation_id,
        animal="default",
        think=False,
        mood_name=mood_name,
        text=text,
    )


# =============================================================================
# Moods
# =============================================================================

def test_list_moods_dynamic_then_static(repository):
    for name in ("foo", "bar", "baz"):
        repository.set_mood(USER, name, " f", "oo")

    page = repository.list_moods(USER, ListArgs(limit=100))

    assert _names(page) == ["foo", "bar", "baz"] + [mood.name for mood in BUILTIN_MOODS]
    assert [mood.user_defined for mood in page.items[:3]] == [True, True, True]
    assert page.has_more is False


def test_list_moods_crosses_tiers_both_ways(repository):
    for name in ("foo", "bar", "baz"):
        repository.set_mood(USER, name, " f", "oo")

    page = repository.list_moods(USER, ListArgs(after="baz", limit=2))
    assert _names(page) == ["default", "borg"]
    assert page.has_more is True

    page = repository.list_moods(USER, ListArgs(before="borg", limit=2))
    assert _names(page) == ["default", "baz"]
    assert page.has_more is True


def test_list_moods_is_scoped_to_owner(repository):
    repository.set_mood(OTHER_USER, "private", "^^", "  ")

    page = repository.list_moods(USER, ListArgs(limit=100))
    assert "private" not in _names(page)

    with pytest.raises(CursorNotFound):
        repository.list_moods(USER, ListArgs(after="private"))


@pytest.mark.parametrize("args", [ListArgs(after="nope"), ListArgs(before="nope")])
def test_list_moods_unknown_cursor(repository, args):
    with pytest.raises(CursorNotFound):
        repository.list_moods(USER, args)


def test_get_builtin_mood_any_case(repository):
    mood = repository.get_mood(USER, "BoRg")
    assert mood.name == "borg"
    assert mood.eyes == "=="
    assert mood.user_defined is False


def test_get_missing_mood(repository):
    with pytest.raises(NotFound):
        repository.get_mood(USER, "nope")


def test_set_mood_creates_then_updates_in_place(repository):
    created = repository.set_mood(USER, "Happy", "^^", "  ")
    updated = repository.set_mood(USER, "happy", "**", "U ")

    assert updated.seq_id == created.seq_id
    assert updated.name == "Happy"
    assert (updated.eyes, updated.tongue) == ("**", "U ")

    fetched = repository.get_mood(USER, "HAPPY")
    assert (fetched.name, fetched.eyes, fetched.tongue, fetched.user_defined) == ("Happy", "**", "U ", True)


def test_same_mood_name_for_different_owners(repository):
    mine = repository.set_mood(USER, "happy", "^^", "  ")
    theirs = repository.set_mood(OTHER_USER, "happy", "--", "  ")
    assert mine.seq_id != theirs.seq_id
    assert repository.get_mood(USER, "happy").eyes == "^^"


@pytest.mark.parametrize("name", ["borg", "BORG", "Dead", "default"])
def test_builtin_moods_are_protected(repository, name):
    with pytest.raises(ProtectedEntity) as excinfo:
        repository.set_mood(USER, name, "^^", "  ")
    assert excinfo.value.action == "update"

    with pytest.raises(ProtectedEntity) as excinfo:
        repository.delete_mood(USER, name)
    assert excinfo.value.action == "delete"

    assert repository.get_mood(USER, name).user_defined is False


def test_delete_mood(repository):
    repository.set_mood(USER, "happy", "^^", "  ")
    repository.delete_mood(USER, "HAPPY")

    with pytest.raises(NotFound):
        repository.get_mood(USER, "happy")
    with pytest.raises(NotFound):
        repository.delete_mood(USER, "happy")


def test_delete_mood_blocked_until_lines_removed(repository):
    repository.set_mood(USER, "happy", "^^", "  ")
    conversation = repository.new_conversation(USER, "chat")
    lines = [_add_line(repository, conversation.public_id, mood_name="happy") for _ in range(3)]

    with pytest.raises(HasDependents) as excinfo:
        repository.delete_mood(USER, "happy")
    assert excinfo.value.count == 3

    for line in lines[:2]:
        repository.delete_line(USER, conversation.public_id, line.public_id)
    with pytest.raises(HasDependents) as excinfo:
        repository.delete_mood(USER, "happy")
    assert excinfo.value.count == 1

    repository.delete_line(USER, conversation.public_id, lines[2].public_id)
    repository.delete_mood(USER, "happy")


def test_line_reflects_live_mood_attributes(repository):
    repository.set_mood(USER, "happy", "^^", "  ")
    conversation = repository.new_conversation(USER, "chat")
    line = _add_line(repository, conversation.public_id, mood_name="happy")

    repository.set_mood(USER, "happy", "$$", "U ")

    fetched = repository.get_line(USER, conversation.public_id, line.public_id)
    assert (fetched.eyes, fetched.tongue) == ("$$", "U ")


# =============================================================================
# Conversations
# =============================================================================

def test_list_conversations(repository):
    created = [repository.new_conversation(USER, heading) for heading in ("foo", "bar", "baz")]
    ids = [conversation.public_id for conversation in created]

    page = repository.list_conversations(USER, ListArgs(limit=5))
    assert _names(page) == ids
    assert page.has_more is False

    page = repository.list_conversations(USER, ListArgs(limit=2))
    assert _names(page) == ids[:2]
    assert page.has_more is True

    page = repository.list_conversations(USER, ListArgs(after=ids[0], limit=1))
    assert _names(page) == ids[1:2]
    assert page.has_more is True

    page = repository.list_conversations(USER, ListArgs(before=ids[2], limit=2))
    assert _names(page) == [ids[1], ids[0]]
    assert page.has_more is False

    page = repository.list_conversations(USER, ListArgs(after=ids[2], limit=0))
    assert page.items == []
    assert page.has_more is False


def test_new_conversation_ids(repository):
    conversation = repository.new_conversation(USER, "heading")
    assert conversation.public_id.startswith("cv_")
    assert conversation.heading == "heading"


def test_get_conversation_with_lines_in_order(repository):
    conversation = repository.new_conversation(USER, "chat")
    first = _add_line(repository, conversation.public_id, text="one")
    second = _add_line(repository, conversation.public_id, mood_name="dead", text="two")

    fetched = repository.get_conversation(USER, conversation.public_id)

    assert [line.public_id for line in fetched.lines] == [first.public_id, second.public_id]
    assert fetched.lines[1].mood_name == "dead"
    assert (fetched.lines[1].eyes, fetched.lines[1].tongue) == ("xx", "U ")


def test_conversation_is_scoped_to_owner(repository):
    conversation = repository.new_conversation(USER, "chat")

    with pytest.raises(NotFound):
        repository.get_conversation(OTHER_USER, conversation.public_id)
    with pytest.raises(NotFound):
        repository.delete_conversation(OTHER_USER, conversation.public_id)
    with pytest.raises(NotFound):
        _add_line(repository, conversation.public_id, user=OTHER_USER)


def test_delete_conversation_cascades_to_lines(repository):
    repository.set_mood(USER, "happy", "^^", "  ")
    conversation = repository.new_conversation(USER, "chat")
    line = _add_line(repository, conversation.public_id, mood_name="happy")

    repository.delete_conversation(USER, conversation.public_id)

    with pytest.raises(NotFound):
        repository.get_conversation(USER, conversation.public_id)
    with pytest.raises(NotFound):
        repository.get_line(USER, conversation.public_id, line.public_id)
    with pytest.raises(NotFound):
        repository.delete_conversation(USER, conversation.public_id)

    # The mood is no longer referenced.
    repository.delete_mood(USER, "happy")


# =============================================================================
# Lines
# =============================================================================

def test_insert_line_with_unknown_mood(repository):
    conversation = repository.new_conversation(USER, "chat")
    with pytest.raises(ValidationIssue) as excinfo:
        _add_line(repository, conversation.public_id, mood_name="nope")
    assert excinfo.value.field == "mood"


def test_insert_line_into_missing_conversation(repository):
    with pytest.raises(NotFound):
        _add_line(repository, "cv_missing")


def test_insert_line_stores_canonical_mood_name(repository):
    conversation = repository.new_conversation(USER, "chat")
    line = _add_line(repository, conversation.public_id, mood_name="BORG")
    assert line.public_id.startswith("ln_")
    assert line.mood_name == "borg"
    assert line.eyes == "=="


def test_get_and_delete_line(repository):
    conversation = repository.new_conversation(USER, "chat")
    line = _add_line(repository, conversation.public_id, text="hi there")

    fetched = repository.get_line(USER, conversation.public_id, line.public_id)
    assert fetched.text == "hi there"
    assert fetched.animal == "default"

    other = repository.new_conversation(USER, "other")
    with pytest.raises(NotFound):
        repository.get_line(USER, other.public_id, line.public_id)
    with pytest.raises(NotFound):
        repository.delete_line(USER, other.public_id, line.public_id)
    with pytest.raises(NotFound):
        repository.delete_line(OTHER_USER, conversation.public_id, line.public_id)

    repository.delete_line(USER, conversation.public_id, line.public_id)
    with pytest.raises(NotFound):
        repository.get_line(USER, conversation.public_id, line.public_id)


def test_ping(repository):
    repository.ping()


def test_insert_line_when_mood_vanishes_after_lookup(repository, monkeypatch):
    stale = repository.set_mood(USER, "happy", "^^", "  ")
    conversation = repository.new_conversation(USER, "chat")
    repository.delete_mood(USER, "happy")

    # The lookup still sees the mood; the insert hits the foreign key.
    monkeypatch.setattr(repository, "_find_mood", lambda db, user_id, name: stale)

    with pytest.raises(ValidationIssue) as excinfo:
        _add_line(repository, conversation.public_id, mood_name="happy")
    assert excinfo.value.field == "mood"

    fetched = repository.get_conversation(USER, conversation.public_id)
    assert fetched.lines == ()
