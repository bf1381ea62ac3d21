from __future__ import annotations

from typing import Any

from PIL import Image
from PySide6.QtGui import QImage
from loguru import logger

from core.models import Asset
from core.services.interfaces import TaskRunner
from infrastructure.image_service import load_scaled


def pil_to_qimage(pil_img: Image.Image) -> QImage | None:
    """Convert a Pillow RGB image to `QImage` detached from the source buffer."""
    if pil_img.mode != "RGB":
        pil_img = pil_img.convert("RGB")
    data = pil_img.tobytes("raw", "RGB")
    qimg = QImage(data, pil_img.width, pil_img.height, pil_img.width * 3, QImage.Format_RGB888)
    if qimg.isNull():
        return None
    return qimg.copy()


class PreviewLoader:
    """Loads previews of the current asset in the background.

    Tokens have the form "preview|{asset_id}|{n}"; only the most recent
    token is delivered to `on_loaded(token, image)`, earlier ones are dropped.
    """

    def __init__(self, runner: TaskRunner, max_side: int, on_loaded: Any) -> None:
        self._runner = runner
        self._side = int(max_side)
        self._on_loaded = on_loaded
        self._seq = 0
        self._current_token: str | None = None

    def request(self, asset: Asset) -> str | None:
        if not asset.file_path:
            self._current_token = None
            return None
        self._seq += 1
        token = f"preview|{asset.asset_id}|{self._seq}"
        self._current_token = token
        path = asset.file_path

        def work() -> QImage | None:
            return pil_to_qimage(load_scaled(path, self._side, self._side))

        def done(image: QImage | None, error: BaseException | None) -> None:
            if token != self._current_token:
                return
            if error is not None:
                logger.error("Preview failed for {}: {}", path, error)
                image = None
            self._on_loaded(token, image)

        self._runner.submit(work, done)
        return token

    def cancel(self) -> None:
        self._current_token = None
