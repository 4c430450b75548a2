"""FastAPI API endpoints under /api.

Endpoint groups: account (health, caller, admin plan edits and backfill),
stories and the dashboard, chapters, characters, locations, scenes (nested
under /api/chapters/{chapter_id}/), images, profiles, and the identity
webhook.
Content routes resolve the caller's data layer per request: anonymous and
free users hit the local store, pro users the cloud store.
"""

from fastapi import APIRouter

from .account import router as account_router
from .chapters import router as chapters_router
from .characters import router as characters_router
from .images import router as images_router
from .locations import router as locations_router
from .profile import router as profile_router
from .scenes import router as scenes_router
from .stories import router as stories_router
from .webhooks import router as webhooks_router

router = APIRouter()
router.include_router(account_router)
router.include_router(stories_router)
router.include_router(chapters_router)
router.include_router(characters_router)
router.include_router(locations_router)
router.include_router(scenes_router)
router.include_router(images_router)
router.include_router(profile_router)
router.include_router(webhooks_router)
