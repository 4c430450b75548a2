"""Story image endpoints: listing, multipart upload, metadata, delete."""

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from storydesk.data_layer import DataLayerState
from storydesk.models import ImageType, NewImage

from .deps import data_layer_state, pro_only, resolve_story_id, story_scope
from .models import UpdateImage

router = APIRouter()


def _split_tags(tags: str) -> list[str]:
    return [t.strip() for t in tags.split(",") if t.strip()]


@router.get("/images")
async def list_images(
    story_id: str | None = Depends(story_scope),
    type: ImageType | None = None,
    tags: str | None = None,
    state: DataLayerState = Depends(data_layer_state),
):
    """List images, newest first. Filter by type or by comma-separated tags."""
    dl = state.data_layer
    if type:
        return await dl.get_images_by_type(type, story_id)
    if tags:
        return await dl.get_images_by_tags(_split_tags(tags), story_id)
    return await dl.get_all_images(story_id)


@router.post("/images", status_code=201)
async def upload_image(
    file: UploadFile = File(...),
    story_id: str | None = Form(None),
    alt: str = Form(""),
    type: ImageType = Form("reference"),
    tags: str = Form(""),
    state: DataLayerState = Depends(data_layer_state),
):
    """Upload an image file with its metadata (pro only)."""
    pro_only(state, "Image uploads")
    target = await resolve_story_id(state, story_id)
    if not target:
        raise HTTPException(400, "Story ID is required for cloud storage")
    content = await file.read()
    image = await state.data_layer.upload_image(
        content,
        file.filename or "upload",
        file.content_type or "application/octet-stream",
        target,
        NewImage(alt=alt, type=type, tags=_split_tags(tags)),
    )
    if not image:
        raise HTTPException(502, "Could not upload image")
    return image


@router.patch("/images/{image_id}")
async def update_image(
    image_id: str, body: UpdateImage, state: DataLayerState = Depends(data_layer_state)
):
    """Update alt text, type, tags, or connections."""
    image = await state.data_layer.update_image(image_id, body.changes())
    if not image:
        raise HTTPException(404, "Image not found")
    return image


@router.delete("/images/{image_id}")
async def delete_image(image_id: str, state: DataLayerState = Depends(data_layer_state)):
    """Delete an image and its stored file."""
    if not await state.data_layer.delete_image(image_id):
        raise HTTPException(404, "Image not found")
    return {"ok": True}
