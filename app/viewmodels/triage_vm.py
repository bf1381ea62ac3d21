"""ViewModel wiring the triage pipeline to Qt signals."""

from __future__ import annotations

from PySide6.QtCore import QObject, Signal
from loguru import logger

from core.errors import FolderAccessDenied
from core.models import Asset, ClassificationResult, ScanReport, Transition
from core.services.album_importer import AlbumImporter
from core.services.asset_store import AssetStore
from core.services.classification_cache import ClassificationCache
from core.services.folder_scanner import FolderScanner
from core.services.import_merger import ImportMerger
from core.services.interfaces import (
    AssetSource,
    Classifier,
    FolderSource,
    TaskRunner,
    TriageListener,
)
from core.services.labels import LabelTranslator, format_classification
from core.services.triage_engine import TriageEngine
from infrastructure.image_service import is_supported_image
from infrastructure.settings import AppConfig


class _SignalListener(TriageListener):
    """Forwards pipeline notifications to the view-model's Qt signals."""

    def __init__(self, vm: TriageVM) -> None:
        self._vm = vm

    def on_queue_exhausted(self) -> None:
        self._vm.queueExhausted.emit()

    def on_current_changed(self, asset: Asset | None) -> None:
        self._vm.currentChanged.emit(asset)

    def on_classification_updated(self, result: ClassificationResult) -> None:
        self._vm.classificationUpdated.emit(result.asset_id, self._vm.describe(result))

    def on_permission_needed(self, message: str) -> None:
        self._vm.permissionNeeded.emit(message)

    def on_folder_access_denied(self, message: str) -> None:
        self._vm.folderAccessDenied.emit(message)

    def on_item_failed(self, item: str, reason: str) -> None:
        self._vm.itemFailed.emit(item, reason)


class TriageVM(QObject):
    """Owns the triage session and exposes it to the window.

    Must live on the GUI thread; the task runner delivers background results
    there.
    """

    queueExhausted = Signal()
    currentChanged = Signal(object)  # Asset | None
    classificationUpdated = Signal(str, str)  # asset_id, display text
    permissionNeeded = Signal(str)
    folderAccessDenied = Signal(str)
    itemFailed = Signal(str, str)  # item, reason
    offsetChanged = Signal(float)
    folderImportFinished = Signal(object)  # ScanReport

    def __init__(
        self,
        library: AssetSource,
        folders: FolderSource,
        classifier: Classifier,
        runner: TaskRunner,
        config: AppConfig | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        config = config or AppConfig()
        self._translator = LabelTranslator(config.translations)
        self._template = config.label_template

        listener = _SignalListener(self)
        self.store = AssetStore()
        self.cache = ClassificationCache(
            library,
            classifier,
            runner,
            listener,
            target_size=(config.classify_width, config.classify_height),
        )
        self.engine = TriageEngine(
            self.store,
            self.cache,
            deleter=library,
            listener=listener,
            delete_threshold=config.delete_threshold,
            advance_threshold=config.advance_threshold,
            runner=runner,
        )
        self.merger = ImportMerger(self.store, self.cache, listener)
        self.albums = AlbumImporter(library, self.store, self.cache, self.merger, listener)
        self.scanner = FolderScanner(
            folders, library, self.merger, runner, listener, is_image=is_supported_image
        )

    # Queries
    def current(self) -> Asset | None:
        return self.store.current()

    def describe(self, result: ClassificationResult | None) -> str:
        return format_classification(result, self._translator, self._template)

    def current_label(self) -> str:
        asset = self.store.current()
        return self.describe(self.cache.peek(asset.asset_id)) if asset else ""

    # Commands
    def load(self) -> None:
        self.albums.load_library()

    def import_album(self) -> None:
        self.albums.import_album()

    def import_folder(self, path: str) -> ScanReport | None:
        try:
            return self.scanner.import_folder(path, on_finished=self.folderImportFinished.emit)
        except FolderAccessDenied as ex:
            logger.warning("Folder import aborted: {}", ex.path)
            return None

    def drag(self, magnitude: float) -> None:
        self.engine.gesture_changed(magnitude)
        self.offsetChanged.emit(self.engine.offset)

    def release(self) -> Transition:
        transition = self.engine.gesture_ended()
        self.offsetChanged.emit(self.engine.offset)
        logger.debug("Gesture ended with {}", transition.value)
        return transition
