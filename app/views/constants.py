"""
UI/view constants centralized for reuse across view modules.
"""

from __future__ import annotations

HINT_TEXT: str = "Drag up to delete, drag down for the next photo"
EMPTY_TEXT: str = "No more photos"

CARD_HEIGHT_PX: int = 400
STATUS_TIMEOUT_MS: int = 4000

BACKGROUND_STYLE: str = "background-color: black;"
TEXT_STYLE: str = "color: white; padding: 8px;"
