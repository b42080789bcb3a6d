"""
Use cases for the rundown composition engine.

Each module holds one operation. Every operation takes a database session plus
keyword arguments, checks the actor's rights through the access evaluator,
commits once on success and returns plain dictionaries.
"""

from .rundown_add import add_rundown
from .rundown_archive import archive_rundown, purge_rundown
from .rundown_export import export_rundown
from .rundown_list import list_rundowns
from .rundown_show import show_rundown
from .rundown_update import update_rundown
from .segment_add import add_segment
from .segment_delete import delete_segment
from .segment_duplicate import duplicate_segment
from .segment_list import list_segments
from .segment_reorder import reorder_segments
from .segment_update import update_segment
from .story_attach import attach_story
from .story_browse import browse_stories
from .story_list import list_story_links
from .story_remove import remove_story_link
from .story_update import update_story_link
from .talent_add import add_talent
from .talent_delete import delete_talent
from .talent_list import list_talent
from .talent_reorder import reorder_talent
from .talent_stats import talent_stats
from .talent_update import update_talent

__all__ = [
    "add_rundown",
    "add_segment",
    "add_talent",
    "archive_rundown",
    "attach_story",
    "browse_stories",
    "delete_segment",
    "delete_talent",
    "duplicate_segment",
    "export_rundown",
    "list_rundowns",
    "list_segments",
    "list_story_links",
    "list_talent",
    "purge_rundown",
    "remove_story_link",
    "reorder_segments",
    "reorder_talent",
    "show_rundown",
    "talent_stats",
    "update_rundown",
    "update_segment",
    "update_story_link",
    "update_talent",
]
