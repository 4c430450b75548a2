"""Chapter file storage for the single local story."""

from typing import Any

from storydesk.models import Chapter, NewChapter

from .core import now, read_list, slugify, write_list

_UPDATABLE = {
    "title", "chapter_number", "status", "word_count", "pov", "location",
    "timeline", "summary", "content", "featured",
}


def _load() -> list[Chapter]:
    return [Chapter.model_validate(c) for c in read_list("chapters")]


def _save(chapters: list[Chapter]) -> None:
    write_list("chapters", [c.model_dump(mode="json") for c in chapters])


def get_all_chapters() -> list[Chapter]:
    """All chapters, ordered by chapter number."""
    return sorted(_load(), key=lambda c: c.chapter_number)


def get_chapter_by_slug(slug: str) -> Chapter | None:
    for chapter in _load():
        if chapter.slug == slug:
            return chapter
    return None


def create_chapter(new: NewChapter) -> Chapter:
    timestamp = now()
    chapter = Chapter(
        **new.model_dump(),
        slug=slugify(new.title),
        created_at=timestamp,
        updated_at=timestamp,
    )
    chapters = _load()
    chapters.append(chapter)
    _save(chapters)
    return chapter


def update_chapter(slug: str, fields: dict[str, Any]) -> Chapter | None:
    """Apply the present fields to a chapter. Returns None if not found."""
    chapters = _load()
    for i, chapter in enumerate(chapters):
        if chapter.slug != slug:
            continue
        changes = {k: v for k, v in fields.items() if k in _UPDATABLE}
        if not changes:
            return chapter
        data = chapter.model_dump()
        data.update(changes)
        data["updated_at"] = now()
        chapters[i] = Chapter.model_validate(data)
        _save(chapters)
        return chapters[i]
    return None


def delete_chapter(slug: str) -> bool:
    chapters = _load()
    remaining = [c for c in chapters if c.slug != slug]
    if len(remaining) == len(chapters):
        return False
    _save(remaining)
    return True
