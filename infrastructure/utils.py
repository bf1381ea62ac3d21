"""Utilities for capture date extraction (EXIF and filesystem).

Best-effort helpers that never raise; callers should expect `None` when data
is not available.
"""

from __future__ import annotations

from datetime import datetime
import os
from typing import Any

from PIL import Image
from loguru import logger

# EXIF tag 36867 is DateTimeOriginal (Exif IFD), 306 is DateTime (IFD0)
EXIF_IFD = 0x8769
TAG_DATETIME_ORIGINAL = 36867
TAG_DATETIME = 306


def get_filesystem_creation_datetime(path: str) -> datetime | None:
    """Best-effort file creation time.

    Uses `st_birthtime` where the platform provides it and falls back to
    `os.path.getctime` (metadata change time on most Unix systems).
    """
    try:
        st = os.stat(path)
        ts = getattr(st, "st_birthtime", None) or os.path.getctime(path)
        return datetime.fromtimestamp(ts)
    except (OSError, ValueError) as ex:
        logger.debug("creation time failed for {}: {}", path, ex)
        return None


def parse_exif_datetime(value: Any) -> datetime | None:
    """Parse EXIF "YYYY:MM:DD HH:MM:SS" or an ISO-like timestamp.

    Offsets are converted to naive local time so parsed values compare with
    filesystem timestamps.
    """
    if not value:
        return None
    val_str = str(value).strip().rstrip("\x00")
    try:
        if len(val_str) >= 19 and val_str[4] == ":" and val_str[7] == ":":
            return datetime.strptime(val_str[:19], "%Y:%m:%d %H:%M:%S")
        parsed = datetime.fromisoformat(val_str.replace("/", "-"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def get_exif_datetime_original(path: str) -> datetime | None:
    """Extract EXIF DateTimeOriginal (or DateTime) via Pillow."""
    try:
        with Image.open(path) as im:
            exif = im.getexif()
            if not exif:
                return None
            val = exif.get_ifd(EXIF_IFD).get(TAG_DATETIME_ORIGINAL) or exif.get(TAG_DATETIME)
            return parse_exif_datetime(val)
    except (OSError, ValueError, TypeError) as ex:
        logger.debug("EXIF read failed for {}: {}", path, ex)
        return None


def get_capture_datetime(path: str) -> datetime | None:
    """EXIF capture time, falling back to the filesystem creation time."""
    return get_exif_datetime_original(path) or get_filesystem_creation_datetime(path)
