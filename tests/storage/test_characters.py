"""Tests for local character storage."""

from storydesk import storage
from storydesk.models import NewCharacter


def test_create_character():
    character = storage.create_character(
        NewCharacter(name="Dark Lord Malachar", role="Antagonist", age=500)
    )
    assert character.slug == "dark-lord-malachar"
    assert character.status == "alive"
    assert character.affiliations == []
    assert character.featured is False


def test_characters_sorted_by_name_case_insensitive():
    for name in ("mary", "John", "Dark Lord Malachar"):
        storage.create_character(NewCharacter(name=name))
    assert [c.name for c in storage.get_all_characters()] == [
        "Dark Lord Malachar",
        "John",
        "mary",
    ]


def test_update_character_featured_flag():
    storage.create_character(NewCharacter(name="John"))
    updated = storage.update_character("john", {"featured": True})
    assert updated.featured is True
    assert storage.get_character_by_slug("john").featured is True


def test_update_character_lists():
    storage.create_character(NewCharacter(name="John"))
    updated = storage.update_character(
        "john", {"relationships": ["Mary - Love Interest"], "status": "missing"}
    )
    assert updated.relationships == ["Mary - Love Interest"]
    assert updated.status == "missing"


def test_empty_update_changes_nothing():
    created = storage.create_character(NewCharacter(name="John"))
    assert storage.update_character("john", {}) == created


def test_update_missing_character():
    assert storage.update_character("nobody", {"role": "x"}) is None


def test_delete_character():
    storage.create_character(NewCharacter(name="John"))
    storage.create_character(NewCharacter(name="Mary"))
    assert storage.delete_character("john") is True
    assert [c.slug for c in storage.get_all_characters()] == ["mary"]


def test_delete_missing_character():
    assert storage.delete_character("nobody") is False
