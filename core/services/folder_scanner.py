"""Folder import: walk a tree, create assets from image files, merge them.

Reading and asset creation run through the task runner; each created asset
is merged as a singleton on the owner thread. A failure for one file is
recorded and reported without stopping the rest of the scan.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

from loguru import logger

from core.errors import FolderAccessDenied
from core.models import Asset, ScanReport
from core.services.import_merger import ImportMerger
from core.services.interfaces import AssetSource, FolderSource, TaskRunner, TriageListener

IMAGE_EXTENSIONS = {
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".bmp",
    ".tif",
    ".tiff",
    ".webp",
    ".heic",
    ".heif",
}

ACCESS_DENIED_MESSAGE = "Unable to access the selected folder; check its permissions."


def has_image_extension(path: str) -> bool:
    return Path(path).suffix.lower() in IMAGE_EXTENSIONS


class _ScanJob:
    """Tracks outstanding files of one import and finalizes the report."""

    def __init__(
        self,
        report: ScanReport,
        release: Callable[[], None] | None,
        on_finished: Callable[[ScanReport], None] | None,
    ) -> None:
        self.report = report
        self._release = release
        self._on_finished = on_finished
        # The enumeration itself counts as one outstanding unit
        self._outstanding = 1

    def started(self) -> None:
        self._outstanding += 1

    def finished_one(self) -> None:
        self._outstanding -= 1
        if self._outstanding:
            return
        if self._release is not None:
            self._release()
        self.report.finished = True
        logger.info(
            "Folder import finished for {}: {} files, {} imported, {} failed",
            self.report.root,
            self.report.files_seen,
            len(self.report.imported_ids),
            len(self.report.failed),
        )
        if self._on_finished is not None:
            self._on_finished(self.report)


class FolderScanner:
    """Imports image files from a folder tree into the triage queue."""

    def __init__(
        self,
        folders: FolderSource,
        library: AssetSource,
        merger: ImportMerger,
        runner: TaskRunner,
        listener: TriageListener | None = None,
        is_image: Callable[[str], bool] = has_image_extension,
    ) -> None:
        self._folders = folders
        self._library = library
        self._merger = merger
        self._runner = runner
        self._listener = listener or TriageListener()
        self._is_image = is_image

    def scan(self, root: str) -> Iterator[str]:
        """Lazily yield image file paths under `root`; single pass."""
        for path in self._folders.enumerate(root):
            if self._is_image(path):
                yield path

    def import_folder(
        self, root: str, on_finished: Callable[[ScanReport], None] | None = None
    ) -> ScanReport:
        """Import every image under `root`.

        Raises:
            FolderAccessDenied: The root stays unreadable after trying scoped
                access; no file is processed.
        """
        release = self._ensure_access(root)
        job = _ScanJob(ScanReport(root=root), release, on_finished)
        logger.info("Folder import started: {}", root)
        try:
            for path in self.scan(root):
                job.report.files_seen += 1
                job.started()
                self._submit(job, path)
        finally:
            job.finished_one()
        return job.report

    def _ensure_access(self, root: str) -> Callable[[], None] | None:
        if self._folders.is_readable(root):
            return None
        acquired = self._folders.acquire_scoped_access(root)
        if acquired and self._folders.is_readable(root):
            logger.info("Scoped access acquired for {}", root)
            return lambda: self._folders.release_scoped_access(root)
        if acquired:
            self._folders.release_scoped_access(root)
        logger.error("Folder access denied: {}", root)
        self._listener.on_folder_access_denied(ACCESS_DENIED_MESSAGE)
        raise FolderAccessDenied(root, ACCESS_DENIED_MESSAGE)

    def _submit(self, job: _ScanJob, path: str) -> None:
        def work() -> Asset:
            return self._library.create(self._folders.read_file(path))

        def done(asset: Asset | None, error: BaseException | None) -> None:
            try:
                if error is not None or asset is None:
                    reason = str(error) if error is not None else "no asset created"
                    logger.error("Import failed for {}: {}", path, reason)
                    job.report.failed.append((path, reason))
                    self._listener.on_item_failed(path, reason)
                    return
                if self._merger.merge([asset]):
                    job.report.imported_ids.append(asset.asset_id)
            finally:
                job.finished_one()

        self._runner.submit(work, done)
