"""Seed the local store with a sample story for development/testing."""

import shutil

from storydesk import storage
from storydesk.models import ConnectedTo, NewChapter, NewCharacter, NewImage, NewLocation

DEMO_CHAPTERS = [
    NewChapter(
        title="The Beginning",
        chapter_number=1,
        status="complete",
        word_count=2500,
        pov="John",
        location="Village Square",
        timeline="Day 1",
        summary="Our hero begins his journey in the small village where he grew up.",
        content="# The Beginning\n\nIt was a day like any other...",
    ),
    NewChapter(
        title="The Call to Adventure",
        chapter_number=2,
        status="review",
        word_count=3200,
        pov="John",
        location="Village Outskirts",
        timeline="Day 1 - Evening",
        summary="A mysterious stranger arrives with urgent news.",
        content="# The Call to Adventure\n\nAs the sun set...",
    ),
    NewChapter(
        title="The Discovery",
        chapter_number=3,
        pov="John",
        word_count=1800,
        location="Ancient Forest",
        timeline="Day 2",
        summary="Hidden secrets are revealed in the ancient forest.",
        content="# The Discovery\n\nThe forest was darker than expected...",
    ),
]

DEMO_CHARACTERS = [
    NewCharacter(
        name="John",
        role="Protagonist",
        age=25,
        location="Village Square",
        affiliations=["Village Guard", "Heroes Guild"],
        relationships=["Mary - Love Interest", "Elder - Mentor"],
        first_appearance="Chapter 1",
        description="A brave young man with a mysterious past.",
        backstory="Orphaned at a young age, raised by the village elder.",
        featured=True,
    ),
    NewCharacter(
        name="Mary",
        role="Supporting Character",
        age=23,
        location="Village Square",
        affiliations=["Village Healers"],
        relationships=["John - Love Interest", "Elder - Teacher"],
        first_appearance="Chapter 1",
        description="A skilled healer with a kind heart.",
        backstory="Daughter of the village healer, trained in ancient arts.",
    ),
    NewCharacter(
        name="Dark Lord Malachar",
        role="Antagonist",
        age=500,
        location="Dark Castle",
        affiliations=["Shadow Legion", "Dark Sorcerers"],
        relationships=["John - Enemy", "Shadow General - Lieutenant"],
        first_appearance="Chapter 5",
        description="An ancient evil seeking to conquer the realm.",
        backstory="Once a noble wizard, corrupted by dark magic centuries ago.",
    ),
]

DEMO_LOCATIONS = [
    NewLocation(
        name="Village Square",
        type="landmark",
        description="The heart of the small village where our story begins. "
        "A cobblestone square surrounded by shops and the old well.",
        significance="This is where John first meets the mysterious stranger.",
        connected_chapters=["the-beginning", "the-call-to-adventure"],
        connected_characters=["john", "mary"],
        climate="Temperate, mild seasons",
        population="Village center, ~50 people daily",
    ),
    NewLocation(
        name="Ancient Forest",
        type="region",
        description="A forest that has stood for thousands of years. "
        "The canopy blocks most sunlight.",
        significance="Contains ancient secrets and magical artifacts.",
        connected_chapters=["the-discovery"],
        connected_characters=["john"],
        climate="Cool and damp, perpetual twilight",
        population="Uninhabited by humans",
    ),
    NewLocation(
        name="Dark Castle",
        type="building",
        description="A fortress on a mountain peak, shrouded in storm clouds.",
        significance="The stronghold of the Dark Lord.",
        connected_characters=["dark-lord-malachar"],
        climate="Stormy and cold",
        population="Dark Lord and his minions",
    ),
]

# (filename, placeholder url, metadata)
DEMO_IMAGES = [
    (
        "john-portrait.jpg",
        "/placeholder.svg?height=400&width=400&text=John+Portrait",
        NewImage(
            alt="John - Hero Portrait",
            type="character",
            connected_to=ConnectedTo(characters=["john"], chapters=["the-beginning"]),
            tags=["portrait", "hero", "main character"],
        ),
    ),
    (
        "village-square.jpg",
        "/placeholder.svg?height=400&width=600&text=Village+Square",
        NewImage(
            alt="Village Square at Dawn",
            type="location",
            connected_to=ConnectedTo(locations=["village-square"]),
            tags=["village", "square", "dawn", "setting"],
        ),
    ),
    (
        "dark-lord.jpg",
        "/placeholder.svg?height=400&width=400&text=Dark+Lord",
        NewImage(
            alt="Dark Lord Malachar",
            type="character",
            connected_to=ConnectedTo(
                characters=["dark-lord-malachar"], locations=["dark-castle"]
            ),
            tags=["villain", "antagonist"],
        ),
    ),
]


def create_demo_data() -> None:
    """Wipe the local store and seed the sample story."""
    if storage.local_dir().exists():
        shutil.rmtree(storage.local_dir())
    storage.local_dir().mkdir(parents=True, exist_ok=True)

    for chapter in DEMO_CHAPTERS:
        storage.create_chapter(chapter)
    for character in DEMO_CHARACTERS:
        storage.create_character(character)
    for location in DEMO_LOCATIONS:
        storage.create_location(location)
    for filename, url, image in DEMO_IMAGES:
        storage.create_image(image, filename, url)
