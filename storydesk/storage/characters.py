"""Character file storage for the single local story."""

from typing import Any

from storydesk.models import Character, NewCharacter

from .core import now, read_list, slugify, write_list

_UPDATABLE = {
    "name", "role", "age", "status", "location", "affiliations",
    "relationships", "first_appearance", "description", "backstory",
    "images", "featured",
}


def _load() -> list[Character]:
    return [Character.model_validate(c) for c in read_list("characters")]


def _save(characters: list[Character]) -> None:
    write_list("characters", [c.model_dump(mode="json") for c in characters])


def get_all_characters() -> list[Character]:
    """All characters, ordered by name."""
    return sorted(_load(), key=lambda c: c.name.casefold())


def get_character_by_slug(slug: str) -> Character | None:
    for character in _load():
        if character.slug == slug:
            return character
    return None


def create_character(new: NewCharacter) -> Character:
    timestamp = now()
    character = Character(
        **new.model_dump(),
        slug=slugify(new.name),
        created_at=timestamp,
        updated_at=timestamp,
    )
    characters = _load()
    characters.append(character)
    _save(characters)
    return character


def update_character(slug: str, fields: dict[str, Any]) -> Character | None:
    """Apply the present fields to a character. Returns None if not found."""
    characters = _load()
    for i, character in enumerate(characters):
        if character.slug != slug:
            continue
        changes = {k: v for k, v in fields.items() if k in _UPDATABLE}
        if not changes:
            return character
        data = character.model_dump()
        data.update(changes)
        data["updated_at"] = now()
        characters[i] = Character.model_validate(data)
        _save(characters)
        return characters[i]
    return None


def delete_character(slug: str) -> bool:
    characters = _load()
    remaining = [c for c in characters if c.slug != slug]
    if len(remaining) == len(characters):
        return False
    _save(remaining)
    return True
