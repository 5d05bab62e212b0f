"""Terminal rendering of stream snapshots.

Public API: RichStreamRenderer, render_state
Internal: rich_render
"""

from linkstream.display.rich_render import RichStreamRenderer, render_state

__all__ = [
    "RichStreamRenderer",
    "render_state",
]
