"""Scene endpoints, nested under their chapter (pro only)."""

from fastapi import APIRouter, Depends, HTTPException

from storydesk.data_layer import DataLayerState
from storydesk.models import NewScene

from .deps import data_layer_state, pro_only
from .models import ReorderScenes, UpdateScene

router = APIRouter()


@router.get("/chapters/{chapter_id}/scenes")
async def list_scenes(chapter_id: str, state: DataLayerState = Depends(data_layer_state)):
    """List a chapter's scenes in manual order."""
    return await state.data_layer.get_all_scenes(chapter_id)


@router.post("/chapters/{chapter_id}/scenes", status_code=201)
async def create_scene(
    chapter_id: str, body: NewScene, state: DataLayerState = Depends(data_layer_state)
):
    """Create a scene in a chapter."""
    pro_only(state, "Scenes")
    scene = await state.data_layer.create_scene(body, chapter_id)
    if not scene:
        raise HTTPException(502, "Could not save scene")
    return scene


@router.put("/chapters/{chapter_id}/scenes/reorder")
async def reorder_scenes(
    chapter_id: str, body: ReorderScenes, state: DataLayerState = Depends(data_layer_state)
):
    """Set the order of several scenes at once."""
    pro_only(state, "Scenes")
    if not await state.data_layer.reorder_scenes(chapter_id, body.orders):
        raise HTTPException(502, "Could not reorder scenes")
    return {"ok": True}


@router.get("/chapters/{chapter_id}/scenes/{slug}")
async def get_scene(
    chapter_id: str, slug: str, state: DataLayerState = Depends(data_layer_state)
):
    """Get a single scene by slug."""
    scene = await state.data_layer.get_scene(slug, chapter_id)
    if not scene:
        raise HTTPException(404, "Scene not found")
    return scene


@router.patch("/chapters/{chapter_id}/scenes/{slug}")
async def update_scene(
    chapter_id: str,
    slug: str,
    body: UpdateScene,
    state: DataLayerState = Depends(data_layer_state),
):
    """Update the fields present in the body."""
    fields = body.changes()
    scene = await state.data_layer.update_scene(slug, fields, chapter_id)
    if not scene:
        raise HTTPException(404, "Scene not found")
    return scene


@router.delete("/chapters/{chapter_id}/scenes/{slug}")
async def delete_scene(
    chapter_id: str, slug: str, state: DataLayerState = Depends(data_layer_state)
):
    """Delete a scene."""
    if not await state.data_layer.delete_scene(slug, chapter_id):
        raise HTTPException(404, "Scene not found")
    return {"ok": True}
