"""Chapter CRUD endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from storydesk.data_layer import DataLayerState
from storydesk.models import NewChapter
from storydesk.storage import count_words

from .deps import data_layer_state, story_scope
from .models import CreateChapter, UpdateChapter

router = APIRouter()


@router.get("/chapters")
async def list_chapters(
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """List chapters in chapter-number order."""
    return await state.data_layer.get_all_chapters(story_id)


@router.post("/chapters", status_code=201)
async def create_chapter(
    body: CreateChapter,
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """Create a chapter. Word count is derived from content unless given."""
    fields = body.model_dump()
    if fields["word_count"] is None:
        fields["word_count"] = count_words(body.content)
    try:
        chapter = await state.data_layer.create_chapter(NewChapter(**fields), story_id)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not chapter:
        raise HTTPException(502, "Could not save chapter")
    return chapter


@router.get("/chapters/{slug}")
async def get_chapter(
    slug: str,
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """Get a single chapter by slug."""
    chapter = await state.data_layer.get_chapter(slug, story_id)
    if not chapter:
        raise HTTPException(404, "Chapter not found")
    return chapter


@router.patch("/chapters/{slug}")
async def update_chapter(
    slug: str,
    body: UpdateChapter,
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """Update the fields present in the body."""
    fields = body.changes()
    if "content" in fields and "word_count" not in fields:
        fields["word_count"] = count_words(fields["content"] or "")
    chapter = await state.data_layer.update_chapter(slug, fields, story_id)
    if not chapter:
        raise HTTPException(404, "Chapter not found")
    return chapter


@router.delete("/chapters/{slug}")
async def delete_chapter(
    slug: str,
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """Delete a chapter."""
    if not await state.data_layer.delete_chapter(slug, story_id):
        raise HTTPException(404, "Chapter not found")
    return {"ok": True}
