"""Location CRUD endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from storydesk.data_layer import DataLayerState
from storydesk.models import NewLocation

from .deps import data_layer_state, story_scope
from .models import UpdateLocation

router = APIRouter()


@router.get("/locations")
async def list_locations(
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """List locations by name."""
    return await state.data_layer.get_all_locations(story_id)


@router.post("/locations", status_code=201)
async def create_location(
    body: NewLocation,
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """Create a location."""
    try:
        location = await state.data_layer.create_location(body, story_id)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not location:
        raise HTTPException(502, "Could not save location")
    return location


@router.get("/locations/{slug}")
async def get_location(
    slug: str,
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """Get a single location by slug."""
    location = await state.data_layer.get_location(slug, story_id)
    if not location:
        raise HTTPException(404, "Location not found")
    return location


@router.patch("/locations/{slug}")
async def update_location(
    slug: str,
    body: UpdateLocation,
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """Update the fields present in the body."""
    fields = body.changes()
    location = await state.data_layer.update_location(slug, fields, story_id)
    if not location:
        raise HTTPException(404, "Location not found")
    return location


@router.delete("/locations/{slug}")
async def delete_location(
    slug: str,
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """Delete a location."""
    if not await state.data_layer.delete_location(slug, story_id):
        raise HTTPException(404, "Location not found")
    return {"ok": True}
