"""Core content models.

Both stores (local JSON files and the cloud database) return these types.
Pydantic is used for validation and serialisation at every data boundary.

Create payloads (New*) carry only client-supplied fields; slugs, ids and
timestamps are filled in by whichever store persists them. Updates are
plain field dicts, never models, so that "only present keys are written".
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

StoryStatus = Literal["planning", "writing", "editing", "complete"]
ChapterStatus = Literal["draft", "review", "complete", "published"]
CharacterStatus = Literal["alive", "deceased", "missing", "unknown"]
LocationType = Literal["city", "building", "landmark", "region", "other"]
ImageType = Literal["character", "location", "scene", "reference"]
SubscriptionTier = Literal["free", "pro"]
SubscriptionStatus = Literal["active", "cancelled", "past_due"]


# ---------------------------------------------------------------------------
# Stories
# ---------------------------------------------------------------------------

class NewStory(BaseModel):
    title: str
    author: str = ""
    genre: str = ""
    status: StoryStatus = "planning"
    word_count_goal: int | None = None
    current_word_count: int = 0
    description: str = ""
    featured: bool = False


class Story(NewStory):
    id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StoryStats(BaseModel):
    chapter_count: int = 0
    character_count: int = 0
    location_count: int = 0
    scene_count: int = 0
    image_count: int = 0


# ---------------------------------------------------------------------------
# Chapters
# ---------------------------------------------------------------------------

class NewChapter(BaseModel):
    title: str
    chapter_number: int = Field(ge=1)
    status: ChapterStatus = "draft"
    word_count: int = 0
    pov: str = ""
    location: str = ""
    timeline: str = ""
    summary: str = ""
    content: str = ""
    featured: bool = False


class Chapter(NewChapter):
    slug: str
    id: str | None = None  # only set by the cloud store
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Characters
# ---------------------------------------------------------------------------

class NewCharacter(BaseModel):
    name: str
    role: str = ""
    age: int | None = None
    status: CharacterStatus = "alive"
    location: str = ""
    affiliations: list[str] = Field(default_factory=list)
    relationships: list[str] = Field(default_factory=list)
    first_appearance: str = ""
    description: str = ""
    backstory: str = ""
    images: list[str] = Field(default_factory=list)
    featured: bool = False


class Character(NewCharacter):
    slug: str
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------

class NewLocation(BaseModel):
    name: str
    type: LocationType = "other"
    description: str = ""
    significance: str = ""
    parent_location: str = ""  # by name; not a foreign key
    climate: str = ""
    population: str = ""
    connected_chapters: list[str] = Field(default_factory=list)
    connected_characters: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    featured: bool = False


class Location(NewLocation):
    slug: str
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Scenes
# ---------------------------------------------------------------------------

class NewScene(BaseModel):
    title: str
    order: int = 0
    summary: str = ""
    content: str = ""
    characters: list[str] = Field(default_factory=list)
    location: str = ""
    timeline: str = ""
    featured: bool = False


class Scene(NewScene):
    id: str
    slug: str
    chapter_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SceneOrder(BaseModel):
    slug: str
    order: int


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

class ConnectedTo(BaseModel):
    """Entity slugs an image is linked to. Informational only."""

    characters: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    chapters: list[str] = Field(default_factory=list)
    scenes: list[str] = Field(default_factory=list)


class NewImage(BaseModel):
    alt: str = ""
    type: ImageType = "reference"
    connected_to: ConnectedTo = Field(default_factory=ConnectedTo)
    tags: list[str] = Field(default_factory=list)


class StoryImage(NewImage):
    id: str
    filename: str
    url: str
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

class AuthUser(BaseModel):
    """A signed-in user as reported by the identity provider."""

    id: str
    email: str = ""
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None
    public_metadata: dict[str, Any] = Field(default_factory=dict)


class Profile(BaseModel):
    id: str
    email: str = ""
    full_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    public_profile: bool = False
    subscription_tier: SubscriptionTier = "free"
    subscription_status: SubscriptionStatus = "active"
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PublicProfile(BaseModel):
    """An author profile with the content they chose to feature."""

    profile: Profile
    stories: list[Story] = Field(default_factory=list)
    characters: list[Character] = Field(default_factory=list)
    locations: list[Location] = Field(default_factory=list)
    scenes: list[Scene] = Field(default_factory=list)
