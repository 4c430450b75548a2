"""Data layer facade: one interface over the local and cloud stores.

Callers never branch on plan tier. resolve_data_layer() classifies the
signed-in user once per user load (in the HTTP app: once per request) and
hands back exactly one implementation:

    LocalDataLayer        free tier or anonymous; single implicit story,
                          JSON files, no story or scene support
    CloudDataLayer(uid)   pro tier; hosted database, every id checked
                          against the user's own stories

Every method returns the persisted entity (or list) on success and a falsy
sentinel on failure: None, False, or []. Persistence errors are logged by
the stores and never reach the caller.

In local mode story and scene operations are unavailable: they return
[] / None / False without touching anything. Local mode also cannot upload
images because it has no object store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, NamedTuple

from storydesk import cloud, storage
from storydesk.models import (
    AuthUser,
    Chapter,
    Character,
    ImageType,
    Location,
    NewChapter,
    NewCharacter,
    NewImage,
    NewLocation,
    NewScene,
    NewStory,
    Scene,
    SceneOrder,
    Story,
    StoryImage,
    StoryStats,
)
from storydesk.subscription import is_pro_user


class DataLayer(ABC):
    """Everything the app can do with content, regardless of where it lives."""

    # Stories

    @abstractmethod
    async def get_all_stories(self) -> list[Story]: ...

    @abstractmethod
    async def get_story(self, story_id: str) -> Story | None: ...

    @abstractmethod
    async def create_story(self, new: NewStory) -> Story | None: ...

    @abstractmethod
    async def update_story(self, story_id: str, fields: dict[str, Any]) -> Story | None: ...

    @abstractmethod
    async def delete_story(self, story_id: str) -> bool: ...

    @abstractmethod
    async def get_story_stats(self, story_id: str) -> StoryStats | None: ...

    @abstractmethod
    async def default_story_id(self) -> str | None:
        """Story to write into when the caller did not name one."""

    # Chapters

    @abstractmethod
    async def get_all_chapters(self, story_id: str | None = None) -> list[Chapter]: ...

    @abstractmethod
    async def get_chapter(self, slug: str, story_id: str | None = None) -> Chapter | None: ...

    @abstractmethod
    async def create_chapter(
        self, new: NewChapter, story_id: str | None = None
    ) -> Chapter | None: ...

    @abstractmethod
    async def update_chapter(
        self, slug: str, fields: dict[str, Any], story_id: str | None = None
    ) -> Chapter | None: ...

    @abstractmethod
    async def delete_chapter(self, slug: str, story_id: str | None = None) -> bool: ...

    # Characters

    @abstractmethod
    async def get_all_characters(self, story_id: str | None = None) -> list[Character]: ...

    @abstractmethod
    async def get_character(
        self, slug: str, story_id: str | None = None
    ) -> Character | None: ...

    @abstractmethod
    async def create_character(
        self, new: NewCharacter, story_id: str | None = None
    ) -> Character | None: ...

    @abstractmethod
    async def update_character(
        self, slug: str, fields: dict[str, Any], story_id: str | None = None
    ) -> Character | None: ...

    @abstractmethod
    async def delete_character(self, slug: str, story_id: str | None = None) -> bool: ...

    # Locations

    @abstractmethod
    async def get_all_locations(self, story_id: str | None = None) -> list[Location]: ...

    @abstractmethod
    async def get_location(self, slug: str, story_id: str | None = None) -> Location | None: ...

    @abstractmethod
    async def create_location(
        self, new: NewLocation, story_id: str | None = None
    ) -> Location | None: ...

    @abstractmethod
    async def update_location(
        self, slug: str, fields: dict[str, Any], story_id: str | None = None
    ) -> Location | None: ...

    @abstractmethod
    async def delete_location(self, slug: str, story_id: str | None = None) -> bool: ...

    # Scenes

    @abstractmethod
    async def get_all_scenes(self, chapter_id: str | None = None) -> list[Scene]: ...

    @abstractmethod
    async def get_story_scenes(self, story_id: str | None = None) -> list[Scene]:
        """Scenes of every chapter in a story."""

    @abstractmethod
    async def get_scene(self, slug: str, chapter_id: str | None = None) -> Scene | None: ...

    @abstractmethod
    async def create_scene(self, new: NewScene, chapter_id: str | None = None) -> Scene | None: ...

    @abstractmethod
    async def update_scene(
        self, slug: str, fields: dict[str, Any], chapter_id: str | None = None
    ) -> Scene | None: ...

    @abstractmethod
    async def delete_scene(self, slug: str, chapter_id: str | None = None) -> bool: ...

    @abstractmethod
    async def reorder_scenes(self, chapter_id: str, orders: list[SceneOrder]) -> bool: ...

    # Images

    @abstractmethod
    async def get_all_images(self, story_id: str | None = None) -> list[StoryImage]: ...

    @abstractmethod
    async def get_images_by_type(
        self, image_type: ImageType, story_id: str | None = None
    ) -> list[StoryImage]: ...

    @abstractmethod
    async def get_images_by_tags(
        self, tags: list[str], story_id: str | None = None
    ) -> list[StoryImage]: ...

    @abstractmethod
    async def upload_image(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        story_id: str,
        new: NewImage,
    ) -> StoryImage | None: ...

    @abstractmethod
    async def update_image(self, image_id: str, fields: dict[str, Any]) -> StoryImage | None: ...

    @abstractmethod
    async def delete_image(self, image_id: str) -> bool: ...


# ---------------------------------------------------------------------------
# LocalDataLayer: free tier, JSON files, one implicit story
# ---------------------------------------------------------------------------

class LocalDataLayer(DataLayer):
    """Local store adapter. Story ids are accepted and ignored."""

    async def get_all_stories(self) -> list[Story]:
        return []

    async def get_story(self, story_id: str) -> Story | None:
        return None

    async def create_story(self, new: NewStory) -> Story | None:
        return None

    async def update_story(self, story_id: str, fields: dict[str, Any]) -> Story | None:
        return None

    async def delete_story(self, story_id: str) -> bool:
        return False

    async def get_story_stats(self, story_id: str) -> StoryStats | None:
        return None

    async def default_story_id(self) -> str | None:
        return None

    async def get_all_chapters(self, story_id: str | None = None) -> list[Chapter]:
        return storage.get_all_chapters()

    async def get_chapter(self, slug: str, story_id: str | None = None) -> Chapter | None:
        return storage.get_chapter_by_slug(slug)

    async def create_chapter(self, new: NewChapter, story_id: str | None = None) -> Chapter | None:
        return storage.create_chapter(new)

    async def update_chapter(
        self, slug: str, fields: dict[str, Any], story_id: str | None = None
    ) -> Chapter | None:
        return storage.update_chapter(slug, fields)

    async def delete_chapter(self, slug: str, story_id: str | None = None) -> bool:
        return storage.delete_chapter(slug)

    async def get_all_characters(self, story_id: str | None = None) -> list[Character]:
        return storage.get_all_characters()

    async def get_character(self, slug: str, story_id: str | None = None) -> Character | None:
        return storage.get_character_by_slug(slug)

    async def create_character(
        self, new: NewCharacter, story_id: str | None = None
    ) -> Character | None:
        return storage.create_character(new)

    async def update_character(
        self, slug: str, fields: dict[str, Any], story_id: str | None = None
    ) -> Character | None:
        return storage.update_character(slug, fields)

    async def delete_character(self, slug: str, story_id: str | None = None) -> bool:
        return storage.delete_character(slug)

    async def get_all_locations(self, story_id: str | None = None) -> list[Location]:
        return storage.get_all_locations()

    async def get_location(self, slug: str, story_id: str | None = None) -> Location | None:
        return storage.get_location_by_slug(slug)

    async def create_location(
        self, new: NewLocation, story_id: str | None = None
    ) -> Location | None:
        return storage.create_location(new)

    async def update_location(
        self, slug: str, fields: dict[str, Any], story_id: str | None = None
    ) -> Location | None:
        return storage.update_location(slug, fields)

    async def delete_location(self, slug: str, story_id: str | None = None) -> bool:
        return storage.delete_location(slug)

    # Scenes are not supported locally.

    async def get_all_scenes(self, chapter_id: str | None = None) -> list[Scene]:
        return []

    async def get_story_scenes(self, story_id: str | None = None) -> list[Scene]:
        return []

    async def get_scene(self, slug: str, chapter_id: str | None = None) -> Scene | None:
        return None

    async def create_scene(self, new: NewScene, chapter_id: str | None = None) -> Scene | None:
        return None

    async def update_scene(
        self, slug: str, fields: dict[str, Any], chapter_id: str | None = None
    ) -> Scene | None:
        return None

    async def delete_scene(self, slug: str, chapter_id: str | None = None) -> bool:
        return False

    async def reorder_scenes(self, chapter_id: str, orders: list[SceneOrder]) -> bool:
        return False

    async def get_all_images(self, story_id: str | None = None) -> list[StoryImage]:
        return storage.get_all_images()

    async def get_images_by_type(
        self, image_type: ImageType, story_id: str | None = None
    ) -> list[StoryImage]:
        return storage.get_images_by_type(image_type)

    async def get_images_by_tags(
        self, tags: list[str], story_id: str | None = None
    ) -> list[StoryImage]:
        return storage.get_images_by_tags(tags)

    async def upload_image(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        story_id: str,
        new: NewImage,
    ) -> StoryImage | None:
        return None

    async def update_image(self, image_id: str, fields: dict[str, Any]) -> StoryImage | None:
        return storage.update_image(image_id, fields)

    async def delete_image(self, image_id: str) -> bool:
        return storage.delete_image(image_id)


# ---------------------------------------------------------------------------
# CloudDataLayer: pro tier, hosted database scoped by user
# ---------------------------------------------------------------------------

def _require(value: str | None, what: str) -> str:
    if not value:
        raise ValueError(f"{what} is required for cloud storage")
    return value


class CloudDataLayer(DataLayer):
    """Cloud store adapter bound to one user.

    The database key is shared by every user, so ownership is checked here:
    a story id must name one of this user's stories, a chapter id a chapter
    in one of them, and an image id an image in one of them. Anything else
    behaves as if it did not exist.
    """

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id

    async def _owns_story(self, story_id: str | None) -> bool:
        if not story_id:
            return False
        return await cloud.get_story_by_id(story_id, self.user_id) is not None

    async def _owns_chapter(self, chapter_id: str | None) -> bool:
        if not chapter_id:
            return False
        return await self._owns_story(await cloud.get_chapter_story_id(chapter_id))

    async def _owns_image(self, image_id: str) -> bool:
        return await self._owns_story(await cloud.get_image_story_id(image_id))

    async def get_all_stories(self) -> list[Story]:
        return await cloud.get_all_stories(self.user_id)

    async def get_story(self, story_id: str) -> Story | None:
        return await cloud.get_story_by_id(story_id, self.user_id)

    async def create_story(self, new: NewStory) -> Story | None:
        return await cloud.create_story(new, self.user_id)

    async def update_story(self, story_id: str, fields: dict[str, Any]) -> Story | None:
        return await cloud.update_story(story_id, fields, self.user_id)

    async def delete_story(self, story_id: str) -> bool:
        return await cloud.delete_story(story_id, self.user_id)

    async def get_story_stats(self, story_id: str) -> StoryStats | None:
        if not await self._owns_story(story_id):
            return None
        return await cloud.get_story_stats(story_id)

    async def default_story_id(self) -> str | None:
        return await cloud.get_or_create_story_id(self.user_id)

    async def get_all_chapters(self, story_id: str | None = None) -> list[Chapter]:
        if not await self._owns_story(story_id):
            return []
        return await cloud.get_all_chapters(story_id)

    async def get_chapter(self, slug: str, story_id: str | None = None) -> Chapter | None:
        if not await self._owns_story(story_id):
            return None
        return await cloud.get_chapter_by_slug(slug, story_id)

    async def create_chapter(self, new: NewChapter, story_id: str | None = None) -> Chapter | None:
        story_id = _require(story_id, "Story ID")
        if not await self._owns_story(story_id):
            return None
        return await cloud.create_chapter(new, story_id)

    async def update_chapter(
        self, slug: str, fields: dict[str, Any], story_id: str | None = None
    ) -> Chapter | None:
        if not await self._owns_story(story_id):
            return None
        return await cloud.update_chapter(slug, fields, story_id)

    async def delete_chapter(self, slug: str, story_id: str | None = None) -> bool:
        if not await self._owns_story(story_id):
            return False
        return await cloud.delete_chapter(slug, story_id)

    async def get_all_characters(self, story_id: str | None = None) -> list[Character]:
        if not await self._owns_story(story_id):
            return []
        return await cloud.get_all_characters(story_id)

    async def get_character(self, slug: str, story_id: str | None = None) -> Character | None:
        if not await self._owns_story(story_id):
            return None
        return await cloud.get_character_by_slug(slug, story_id)

    async def create_character(
        self, new: NewCharacter, story_id: str | None = None
    ) -> Character | None:
        story_id = _require(story_id, "Story ID")
        if not await self._owns_story(story_id):
            return None
        return await cloud.create_character(new, story_id, self.user_id)

    async def update_character(
        self, slug: str, fields: dict[str, Any], story_id: str | None = None
    ) -> Character | None:
        if not await self._owns_story(story_id):
            return None
        return await cloud.update_character(slug, fields, story_id)

    async def delete_character(self, slug: str, story_id: str | None = None) -> bool:
        if not await self._owns_story(story_id):
            return False
        return await cloud.delete_character(slug, story_id)

    async def get_all_locations(self, story_id: str | None = None) -> list[Location]:
        if not await self._owns_story(story_id):
            return []
        return await cloud.get_all_locations(story_id)

    async def get_location(self, slug: str, story_id: str | None = None) -> Location | None:
        if not await self._owns_story(story_id):
            return None
        return await cloud.get_location_by_slug(slug, story_id)

    async def create_location(
        self, new: NewLocation, story_id: str | None = None
    ) -> Location | None:
        story_id = _require(story_id, "Story ID")
        if not await self._owns_story(story_id):
            return None
        return await cloud.create_location(new, story_id, self.user_id)

    async def update_location(
        self, slug: str, fields: dict[str, Any], story_id: str | None = None
    ) -> Location | None:
        if not await self._owns_story(story_id):
            return None
        return await cloud.update_location(slug, fields, story_id)

    async def delete_location(self, slug: str, story_id: str | None = None) -> bool:
        if not await self._owns_story(story_id):
            return False
        return await cloud.delete_location(slug, story_id)

    async def get_all_scenes(self, chapter_id: str | None = None) -> list[Scene]:
        if not await self._owns_chapter(chapter_id):
            return []
        return await cloud.get_all_scenes(chapter_id)

    async def get_story_scenes(self, story_id: str | None = None) -> list[Scene]:
        if not await self._owns_story(story_id):
            return []
        chapters = await cloud.get_all_chapters(story_id)
        return await cloud.get_scenes_for_chapters([c.id for c in chapters if c.id])

    async def get_scene(self, slug: str, chapter_id: str | None = None) -> Scene | None:
        if not await self._owns_chapter(chapter_id):
            return None
        return await cloud.get_scene_by_slug(slug, chapter_id)

    async def create_scene(self, new: NewScene, chapter_id: str | None = None) -> Scene | None:
        chapter_id = _require(chapter_id, "Chapter ID")
        if not await self._owns_chapter(chapter_id):
            return None
        return await cloud.create_scene(new, chapter_id, self.user_id)

    async def update_scene(
        self, slug: str, fields: dict[str, Any], chapter_id: str | None = None
    ) -> Scene | None:
        if not await self._owns_chapter(chapter_id):
            return None
        return await cloud.update_scene(slug, fields, chapter_id)

    async def delete_scene(self, slug: str, chapter_id: str | None = None) -> bool:
        if not await self._owns_chapter(chapter_id):
            return False
        return await cloud.delete_scene(slug, chapter_id)

    async def reorder_scenes(self, chapter_id: str, orders: list[SceneOrder]) -> bool:
        if not await self._owns_chapter(chapter_id):
            return False
        return await cloud.reorder_scenes(chapter_id, orders)

    async def get_all_images(self, story_id: str | None = None) -> list[StoryImage]:
        if not await self._owns_story(story_id):
            return []
        return await cloud.get_all_images(story_id)

    async def get_images_by_type(
        self, image_type: ImageType, story_id: str | None = None
    ) -> list[StoryImage]:
        if not await self._owns_story(story_id):
            return []
        return await cloud.get_images_by_type(image_type, story_id)

    async def get_images_by_tags(
        self, tags: list[str], story_id: str | None = None
    ) -> list[StoryImage]:
        if not await self._owns_story(story_id):
            return []
        return await cloud.get_images_by_tags(tags, story_id)

    async def upload_image(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        story_id: str,
        new: NewImage,
    ) -> StoryImage | None:
        if not await self._owns_story(story_id):
            return None
        return await cloud.upload_image(content, filename, content_type, story_id, new)

    async def update_image(self, image_id: str, fields: dict[str, Any]) -> StoryImage | None:
        if not await self._owns_image(image_id):
            return None
        return await cloud.update_image_metadata(image_id, fields)

    async def delete_image(self, image_id: str) -> bool:
        if not await self._owns_image(image_id):
            return False
        return await cloud.delete_image(image_id)


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class DataLayerState(NamedTuple):
    data_layer: DataLayer
    is_local: bool
    is_pro: bool
    is_loading: bool


def resolve_data_layer(user: AuthUser | None, is_loaded: bool = True) -> DataLayerState:
    """Pick the store for this user. Call again whenever the user changes."""
    is_pro = is_pro_user(user)
    if is_pro and user is not None:
        data_layer: DataLayer = CloudDataLayer(user.id)
    else:
        data_layer = LocalDataLayer()
    return DataLayerState(
        data_layer=data_layer,
        is_local=not is_pro,
        is_pro=is_pro,
        is_loading=not is_loaded,
    )
