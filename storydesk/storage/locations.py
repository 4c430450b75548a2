"""Location file storage for the single local story."""

from typing import Any

from storydesk.models import Location, NewLocation

from .core import now, read_list, slugify, write_list

_UPDATABLE = {
    "name", "type", "description", "significance", "parent_location",
    "climate", "population", "connected_chapters", "connected_characters",
    "images", "featured",
}


def _load() -> list[Location]:
    return [Location.model_validate(loc) for loc in read_list("locations")]


def _save(locations: list[Location]) -> None:
    write_list("locations", [loc.model_dump(mode="json") for loc in locations])


def get_all_locations() -> list[Location]:
    """All locations, ordered by name."""
    return sorted(_load(), key=lambda loc: loc.name.casefold())


def get_location_by_slug(slug: str) -> Location | None:
    for location in _load():
        if location.slug == slug:
            return location
    return None


def create_location(new: NewLocation) -> Location:
    timestamp = now()
    location = Location(
        **new.model_dump(),
        slug=slugify(new.name),
        created_at=timestamp,
        updated_at=timestamp,
    )
    locations = _load()
    locations.append(location)
    _save(locations)
    return location


def update_location(slug: str, fields: dict[str, Any]) -> Location | None:
    """Apply the present fields to a location. Returns None if not found."""
    locations = _load()
    for i, location in enumerate(locations):
        if location.slug != slug:
            continue
        changes = {k: v for k, v in fields.items() if k in _UPDATABLE}
        if not changes:
            return location
        data = location.model_dump()
        data.update(changes)
        data["updated_at"] = now()
        locations[i] = Location.model_validate(data)
        _save(locations)
        return locations[i]
    return None


def delete_location(slug: str) -> bool:
    locations = _load()
    remaining = [loc for loc in locations if loc.slug != slug]
    if len(remaining) == len(locations):
        return False
    _save(remaining)
    return True
