"""Cloud content store: the hosted relational database and object storage.

Used in cloud mode (pro tier). Stories are scoped by owning user; chapters,
characters, locations and images by owning story; scenes by owning chapter.

Tables:
  profiles       one row per identity-provider user
  stories        user_id → many chapters, characters, locations, images
  chapters       story_id
  characters     story_id, user_id
  locations      story_id, user_id
  scenes         chapter_id, user_id; `order_index` drives manual ordering
  story_images   story_id; object lives in the `story-images` bucket

Every function catches PersistenceError, logs it, and returns a falsy
value (None / False / []). Nothing is retried and no two writes share a
transaction.
"""

# Re-export all public symbols so `from storydesk import cloud` keeps working.

from .client import PersistenceError, SupabaseClient  # noqa: F401

from .core import (  # noqa: F401
    IMAGE_BUCKET,
    client,
    init_cloud,
    is_configured,
)

from .stories import (  # noqa: F401
    create_story,
    delete_story,
    get_all_stories,
    get_or_create_story_id,
    get_stories_by_status,
    get_story_by_id,
    get_story_stats,
    update_story,
    update_word_count,
)

from .chapters import (  # noqa: F401
    create_chapter,
    delete_chapter,
    get_all_chapters,
    get_chapter_by_slug,
    get_chapter_story_id,
    update_chapter,
)

from .characters import (  # noqa: F401
    create_character,
    delete_character,
    get_all_characters,
    get_character_by_slug,
    update_character,
)

from .locations import (  # noqa: F401
    create_location,
    delete_location,
    get_all_locations,
    get_location_by_slug,
    update_location,
)

from .scenes import (  # noqa: F401
    create_scene,
    delete_scene,
    get_all_scenes,
    get_scene_by_slug,
    get_scenes_by_location,
    get_scenes_for_chapters,
    reorder_scenes,
    update_scene,
)

from .images import (  # noqa: F401
    delete_image,
    get_all_images,
    get_image_by_id,
    get_image_story_id,
    get_images_by_tags,
    get_images_by_type,
    get_images_for_character,
    get_images_for_location,
    update_image_metadata,
    upload_image,
)

from .profiles import (  # noqa: F401
    get_profile,
    get_public_profile,
    upsert_profile,
)
