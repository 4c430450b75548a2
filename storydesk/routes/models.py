"""Pydantic request models for API endpoints.

Create bodies reuse the content models. Update bodies make every field
optional; handlers call changes() so only the keys the client actually
sent are written. An explicit null is dropped unless the field is listed
in `nullable`, the few the stored models allow to be empty.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, Field

from storydesk.models import (
    ChapterStatus,
    CharacterStatus,
    ConnectedTo,
    ImageType,
    LocationType,
    NewChapter,
    SceneOrder,
    StoryStatus,
    SubscriptionStatus,
    SubscriptionTier,
)


class CreateChapter(NewChapter):
    word_count: int | None = None  # derived from content when omitted


class UpdateBody(BaseModel):
    nullable: ClassVar[frozenset[str]] = frozenset()

    def changes(self) -> dict[str, Any]:
        return {
            key: value
            for key, value in self.model_dump(exclude_unset=True).items()
            if value is not None or key in self.nullable
        }


class UpdateStory(UpdateBody):
    nullable = frozenset({"word_count_goal"})

    title: str | None = None
    author: str | None = None
    genre: str | None = None
    status: StoryStatus | None = None
    word_count_goal: int | None = None
    current_word_count: int | None = None
    description: str | None = None
    featured: bool | None = None


class UpdateChapter(UpdateBody):
    title: str | None = None
    chapter_number: int | None = Field(default=None, ge=1)
    status: ChapterStatus | None = None
    word_count: int | None = None
    pov: str | None = None
    location: str | None = None
    timeline: str | None = None
    summary: str | None = None
    content: str | None = None
    featured: bool | None = None


class UpdateCharacter(UpdateBody):
    nullable = frozenset({"age"})

    name: str | None = None
    role: str | None = None
    age: int | None = None
    status: CharacterStatus | None = None
    location: str | None = None
    affiliations: list[str] | None = None
    relationships: list[str] | None = None
    first_appearance: str | None = None
    description: str | None = None
    backstory: str | None = None
    images: list[str] | None = None
    featured: bool | None = None


class UpdateLocation(UpdateBody):
    name: str | None = None
    type: LocationType | None = None
    description: str | None = None
    significance: str | None = None
    parent_location: str | None = None
    climate: str | None = None
    population: str | None = None
    connected_chapters: list[str] | None = None
    connected_characters: list[str] | None = None
    images: list[str] | None = None
    featured: bool | None = None


class UpdateScene(UpdateBody):
    title: str | None = None
    order: int | None = None
    summary: str | None = None
    content: str | None = None
    characters: list[str] | None = None
    location: str | None = None
    timeline: str | None = None
    featured: bool | None = None


class ReorderScenes(BaseModel):
    orders: list[SceneOrder]


class UpdateImage(UpdateBody):
    alt: str | None = None
    type: ImageType | None = None
    connected_to: ConnectedTo | None = None
    tags: list[str] | None = None


class UpdateProfile(UpdateBody):
    nullable = frozenset({"full_name", "avatar_url", "bio"})

    email: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    bio: str | None = None
    public_profile: bool | None = None


class UpdateSubscription(BaseModel):
    subscription: SubscriptionTier | None = None
    subscriptionStatus: SubscriptionStatus | None = None
    subscriptionTier: SubscriptionTier | None = None


class BulkUpdateMetadata(BaseModel):
    default_subscription: SubscriptionTier = "free"
    default_status: SubscriptionStatus = "active"
