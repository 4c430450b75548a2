"""Request dependencies: who is calling, and which data layer serves them.

The caller identifies with `Authorization: Bearer <session id>`. Without a
live session the caller is anonymous and gets the local data layer.
"""

import os

from fastapi import Depends, HTTPException, Request

from storydesk import cloud
from storydesk.data_layer import DataLayerState, resolve_data_layer
from storydesk.identity import IdentityClient, IdentityError
from storydesk.models import AuthUser


async def current_user(request: Request) -> AuthUser | None:
    identity: IdentityClient | None = request.app.state.identity
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if identity is None or scheme.lower() != "bearer" or not token:
        return None
    try:
        user_id = await identity.get_session_user_id(token)
        if user_id is None:
            return None
        return await identity.get_user(user_id)
    except IdentityError as e:
        raise HTTPException(502, str(e))


async def require_user(user: AuthUser | None = Depends(current_user)) -> AuthUser:
    if user is None:
        raise HTTPException(401, "Unauthorized")
    return user


def require_cloud() -> None:
    if not cloud.is_configured():
        raise HTTPException(500, "Cloud storage is not configured")


def require_identity(request: Request) -> IdentityClient:
    identity: IdentityClient | None = request.app.state.identity
    if identity is None:
        raise HTTPException(500, "Identity provider is not configured")
    return identity


async def data_layer_state(user: AuthUser | None = Depends(current_user)) -> DataLayerState:
    """Resolve the data layer for this request's user."""
    state = resolve_data_layer(user)
    if state.is_pro:
        require_cloud()
    return state


async def resolve_story_id(state: DataLayerState, story_id: str | None) -> str | None:
    """The story to work in: the one named, else the user's default.

    In cloud mode a named story must belong to the caller.
    """
    if story_id:
        if not state.is_local and await state.data_layer.get_story(story_id) is None:
            raise HTTPException(404, "Story not found")
        return story_id
    return await state.data_layer.default_story_id()


def pro_only(state: DataLayerState, what: str) -> None:
    """Reject operations the local data layer cannot perform."""
    if state.is_local:
        raise HTTPException(403, f"{what} require a pro subscription")


async def story_scope(
    story_id: str | None = None, state: DataLayerState = Depends(data_layer_state)
) -> str | None:
    """`?story_id=` query parameter, defaulting to the user's story."""
    return await resolve_story_id(state, story_id)


def admin_user_ids() -> set[str]:
    return {uid.strip() for uid in os.getenv("ADMIN_USER_IDS", "").split(",") if uid.strip()}


async def require_admin(user: AuthUser = Depends(require_user)) -> AuthUser:
    if user.id not in admin_user_ids():
        raise HTTPException(403, "Forbidden")
    return user
