"""Local content store: JSON files for the single implicit story.

Used in local mode (free tier). There is no user partitioning and no story
id: every function operates over the whole file, which is only safe because
local mode serves one user.

Data layout:
  data/
    local/
      chapters.json     Chapter list
      characters.json   Character list
      locations.json    Location list
      images.json       Story image metadata list

Slug rules: title/name → lowercase → whitespace runs to hyphen → strip
anything outside [a-z0-9-]. No collision detection.

Ordering: chapters by chapter_number, characters and locations by name,
images newest first.

Updates apply only the keys present in the field dict; an empty dict
returns the entity untouched. Deletes return False when nothing matched.
"""

# Re-export all public symbols so `from storydesk import storage` keeps working.

from .core import (  # noqa: F401
    count_words,
    data_dir,
    init_storage,
    local_dir,
    slugify,
)

from .chapters import (  # noqa: F401
    create_chapter,
    delete_chapter,
    get_all_chapters,
    get_chapter_by_slug,
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

from .images import (  # noqa: F401
    create_image,
    delete_image,
    get_all_images,
    get_image_by_id,
    get_images_by_tags,
    get_images_by_type,
    update_image,
)
