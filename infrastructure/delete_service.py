"""Deletion of photo files by moving them to the OS trash."""

from __future__ import annotations

from collections.abc import Iterable
import os

from loguru import logger
from send2trash import send2trash


class DeleteService:
    """Moves files to the trash and reports per-path results."""

    def delete_to_trash(self, paths: Iterable[str]) -> tuple[list[str], list[tuple[str, str]]]:
        """Send files to the trash.

        Returns:
            Tuple of (deleted paths, [(path, reason)] failures).
        """
        success: list[str] = []
        failed: list[tuple[str, str]] = []
        for p in paths:
            normalized_path = os.path.normpath(p)
            if not os.path.exists(normalized_path):
                logger.error("File does not exist: {}", normalized_path)
                failed.append((p, "File does not exist"))
                continue

            try:
                send2trash(normalized_path)
                success.append(p)
                continue
            except (UnicodeEncodeError, OSError) as ex:
                logger.warning("Failed to trash normalized path {}: {}", normalized_path, ex)
                first_error = ex

            # Non-ASCII paths sometimes only succeed in absolute form
            try:
                send2trash(os.path.abspath(p))
                success.append(p)
            except (UnicodeEncodeError, OSError) as ex:
                logger.error("All delete methods failed for {}: {} / {}", p, first_error, ex)
                failed.append((p, f"Delete failed: {first_error}, {ex}"))
        if success:
            logger.info("Moved {} files to trash ({} failed)", len(success), len(failed))
        return success, failed
