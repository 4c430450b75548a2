"""Character CRUD endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from storydesk.data_layer import DataLayerState
from storydesk.models import NewCharacter

from .deps import data_layer_state, story_scope
from .models import UpdateCharacter

router = APIRouter()


@router.get("/characters")
async def list_characters(
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """List characters by name."""
    return await state.data_layer.get_all_characters(story_id)


@router.post("/characters", status_code=201)
async def create_character(
    body: NewCharacter,
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """Create a character."""
    try:
        character = await state.data_layer.create_character(body, story_id)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not character:
        raise HTTPException(502, "Could not save character")
    return character


@router.get("/characters/{slug}")
async def get_character(
    slug: str,
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """Get a single character by slug."""
    character = await state.data_layer.get_character(slug, story_id)
    if not character:
        raise HTTPException(404, "Character not found")
    return character


@router.patch("/characters/{slug}")
async def update_character(
    slug: str,
    body: UpdateCharacter,
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """Update the fields present in the body (including the featured flag)."""
    fields = body.changes()
    character = await state.data_layer.update_character(slug, fields, story_id)
    if not character:
        raise HTTPException(404, "Character not found")
    return character


@router.delete("/characters/{slug}")
async def delete_character(
    slug: str,
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """Delete a character."""
    if not await state.data_layer.delete_character(slug, story_id):
        raise HTTPException(404, "Character not found")
    return {"ok": True}
