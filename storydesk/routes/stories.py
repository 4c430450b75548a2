"""Story CRUD, story stats, and the writing dashboard."""

import asyncio

from fastapi import APIRouter, Depends, HTTPException

from storydesk.data_layer import DataLayerState
from storydesk.models import NewStory

from .deps import data_layer_state, pro_only, story_scope
from .models import UpdateStory

router = APIRouter()


@router.get("/stories")
async def list_stories(state: DataLayerState = Depends(data_layer_state)):
    """List the user's stories, most recently updated first."""
    return await state.data_layer.get_all_stories()


@router.post("/stories", status_code=201)
async def create_story(body: NewStory, state: DataLayerState = Depends(data_layer_state)):
    """Create a story (pro only)."""
    pro_only(state, "Stories")
    story = await state.data_layer.create_story(body)
    if not story:
        raise HTTPException(502, "Could not save story")
    return story


@router.get("/stories/{story_id}")
async def get_story(story_id: str, state: DataLayerState = Depends(data_layer_state)):
    """Get a single story by id."""
    story = await state.data_layer.get_story(story_id)
    if not story:
        raise HTTPException(404, "Story not found")
    return story


@router.patch("/stories/{story_id}")
async def update_story(
    story_id: str, body: UpdateStory, state: DataLayerState = Depends(data_layer_state)
):
    """Update the fields present in the body."""
    story = await state.data_layer.update_story(story_id, body.changes())
    if not story:
        raise HTTPException(404, "Story not found")
    return story


@router.delete("/stories/{story_id}")
async def delete_story(story_id: str, state: DataLayerState = Depends(data_layer_state)):
    """Delete a story and everything in it."""
    if not await state.data_layer.delete_story(story_id):
        raise HTTPException(404, "Story not found")
    return {"ok": True}


@router.get("/stories/{story_id}/stats")
async def story_stats(story_id: str, state: DataLayerState = Depends(data_layer_state)):
    """Entity counts for one story."""
    stats = await state.data_layer.get_story_stats(story_id)
    if not stats:
        raise HTTPException(404, "Story not found")
    return stats


@router.get("/dashboard")
async def dashboard(
    story_id: str | None = Depends(story_scope),
    state: DataLayerState = Depends(data_layer_state),
):
    """Overview counts for the writing dashboard."""
    dl = state.data_layer
    chapters, characters, locations, scenes = await asyncio.gather(
        dl.get_all_chapters(story_id),
        dl.get_all_characters(story_id),
        dl.get_all_locations(story_id),
        dl.get_story_scenes(story_id),
    )
    return {
        "is_local": state.is_local,
        "is_pro": state.is_pro,
        "chapter_count": len(chapters),
        "character_count": len(characters),
        "location_count": len(locations),
        "scene_count": len(scenes),
        "total_words": sum(c.word_count for c in chapters),
        "draft_chapters": sum(1 for c in chapters if c.status == "draft"),
        "featured_characters": [c for c in characters if c.featured],
        "recent_chapters": sorted(
            chapters, key=lambda c: c.updated_at.isoformat() if c.updated_at else "", reverse=True
        )[:5],
    }
