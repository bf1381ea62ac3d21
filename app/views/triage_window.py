"""Single-photo triage window.

Vertical drags on the photo feed the view-model: dragging up past the delete
threshold moves the photo to the trash, dragging down past the advance
threshold shows the next one.
"""

from __future__ import annotations

from PySide6.QtCore import QPoint, QUrl, Qt
from PySide6.QtGui import QDesktopServices, QImage, QMouseEvent, QPixmap
from PySide6.QtWidgets import (
    QFileDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QVBoxLayout,
    QWidget,
)
from loguru import logger

from app.viewmodels.triage_vm import TriageVM
from app.views.constants import (
    BACKGROUND_STYLE,
    CARD_HEIGHT_PX,
    EMPTY_TEXT,
    HINT_TEXT,
    STATUS_TIMEOUT_MS,
    TEXT_STYLE,
)
from app.views.image_tasks import PreviewLoader
from core.models import Asset, ScanReport
from core.services.interfaces import TaskRunner
from infrastructure.logging import get_log_directory


class PhotoCard(QLabel):
    """Photo label translating mouse drags into gesture offsets."""

    def __init__(self, vm: TriageVM, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._vm = vm
        self._press: QPoint | None = None
        self.setAlignment(Qt.AlignCenter)
        self.setMinimumHeight(CARD_HEIGHT_PX)
        self.setCursor(Qt.OpenHandCursor)

    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if event.button() == Qt.LeftButton:
            self._press = event.position().toPoint()
            self.setCursor(Qt.ClosedHandCursor)
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if self._press is not None:
            self._vm.drag(float(event.position().toPoint().y() - self._press.y()))
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if self._press is not None and event.button() == Qt.LeftButton:
            self._press = None
            self.setCursor(Qt.OpenHandCursor)
            self._vm.release()
        super().mouseReleaseEvent(event)


class TriageWindow(QMainWindow):
    """Main window showing one photo, its label and the import menu."""

    def __init__(
        self,
        vm: TriageVM,
        runner: TaskRunner,
        preview_side: int = 1024,
        log_dir: str | None = None,
    ) -> None:
        super().__init__()
        self._vm = vm
        self._log_dir = log_dir or get_log_directory()
        self._preview = PreviewLoader(runner, preview_side, self._on_preview_loaded)
        self._pixmap: QPixmap | None = None

        self._setup_ui()
        self._setup_menu()
        self._connect_signals()
        self.setWindowTitle("Photo Triage")
        self.resize(720, 640)

    def _setup_ui(self) -> None:
        central = QWidget()
        central.setStyleSheet(BACKGROUND_STYLE)
        layout = QVBoxLayout(central)

        self.card = PhotoCard(self._vm)
        self.classification_label = QLabel("")
        self.hint_label = QLabel(HINT_TEXT)
        self.empty_label = QLabel(EMPTY_TEXT)
        for label in (self.classification_label, self.hint_label, self.empty_label):
            label.setAlignment(Qt.AlignCenter)
            label.setStyleSheet(TEXT_STYLE)

        layout.addWidget(self.card, 1)
        layout.addWidget(self.classification_label)
        layout.addWidget(self.hint_label)
        layout.addWidget(self.empty_label, 1)
        self.setCentralWidget(central)
        self._show_asset(None)

    def _setup_menu(self) -> None:
        import_menu = self.menuBar().addMenu("&Import")
        import_menu.addAction("Import &Album", self._vm.import_album)
        import_menu.addAction("Import &Folder…", self._choose_folder)
        help_menu = self.menuBar().addMenu("&Help")
        help_menu.addAction("Open &Log Folder", self._open_log_folder)

    def _connect_signals(self) -> None:
        self._vm.currentChanged.connect(self._show_asset)
        self._vm.classificationUpdated.connect(self._on_classification)
        self._vm.queueExhausted.connect(self._on_queue_exhausted)
        self._vm.permissionNeeded.connect(self._show_permission_alert)
        self._vm.folderAccessDenied.connect(self._show_permission_alert)
        self._vm.itemFailed.connect(self._on_item_failed)
        self._vm.offsetChanged.connect(self._on_offset_changed)
        self._vm.folderImportFinished.connect(self._on_folder_import_finished)

    # Slots
    def _show_asset(self, asset: Asset | None) -> None:
        has_asset = asset is not None
        self.card.setVisible(has_asset)
        self.classification_label.setVisible(has_asset)
        self.hint_label.setVisible(has_asset)
        self.empty_label.setVisible(not has_asset)
        if asset is None:
            self._preview.cancel()
            self._pixmap = None
            self.card.clear()
            return
        self.card.setText("Loading…")
        self.classification_label.setText(self._vm.current_label())
        self._preview.request(asset)

    def _on_preview_loaded(self, token: str, image: QImage | None) -> None:
        if image is None or image.isNull():
            self.card.setText("(preview unavailable)")
            return
        self._pixmap = QPixmap.fromImage(image)
        self._render_pixmap()

    def _render_pixmap(self) -> None:
        if self._pixmap is None:
            return
        scaled = self._pixmap.scaled(
            self.card.width(), self.card.height(), Qt.KeepAspectRatio, Qt.SmoothTransformation
        )
        self.card.setPixmap(scaled)

    def resizeEvent(self, event) -> None:  # noqa: N802
        super().resizeEvent(event)
        self._render_pixmap()

    def _on_classification(self, asset_id: str, text: str) -> None:
        current = self._vm.current()
        if current is not None and current.asset_id == asset_id:
            self.classification_label.setText(text)

    def _on_offset_changed(self, offset: float) -> None:
        shift = int(offset)
        self.card.setContentsMargins(0, max(0, shift), 0, max(0, -shift))

    def _on_queue_exhausted(self) -> None:
        self.statusBar().showMessage(EMPTY_TEXT, STATUS_TIMEOUT_MS)

    def _on_item_failed(self, item: str, reason: str) -> None:
        self.statusBar().showMessage(f"Failed: {item} ({reason})", STATUS_TIMEOUT_MS)

    def _on_folder_import_finished(self, report: ScanReport) -> None:
        self.statusBar().showMessage(
            f"Imported {len(report.imported_ids)} of {report.files_seen} photos"
            f" ({len(report.failed)} failed)",
            STATUS_TIMEOUT_MS,
        )

    def _show_permission_alert(self, message: str) -> None:
        QMessageBox.warning(self, "Permission required", message)

    # Actions
    def _choose_folder(self) -> None:
        path = QFileDialog.getExistingDirectory(self, "Import Folder")
        if not path:
            return
        logger.info("Folder selected for import: {}", path)
        self._vm.import_folder(path)

    def _open_log_folder(self) -> None:
        QDesktopServices.openUrl(QUrl.fromLocalFile(self._log_dir))
