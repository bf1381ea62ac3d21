from __future__ import annotations

from pathlib import Path
import sys

from PySide6.QtWidgets import QApplication
from loguru import logger

from app.viewmodels.triage_vm import TriageVM
from app.views.triage_window import TriageWindow
from infrastructure.classifiers import ToneClassifier, load_classifier
from infrastructure.folder_source import LocalFolderSource
from infrastructure.library import LocalLibrary
from infrastructure.logging import init_logging
from infrastructure.settings import JsonSettings, load_app_config
from infrastructure.task_runner import QtTaskRunner

BASE_DIR = Path(__file__).parent


def main() -> int:
    settings = JsonSettings(BASE_DIR / "settings.json")
    config = load_app_config(settings)
    log_dir = init_logging(config.log_dir, config.log_level)
    logger.info("Starting with library {}", config.library_dir)

    app = QApplication(sys.argv)

    try:
        classifier = load_classifier(config.classifier)
    except ValueError as ex:
        logger.error("Classifier plugin unavailable, using built-in: {}", ex)
        classifier = ToneClassifier()

    runner = QtTaskRunner()
    library = LocalLibrary(config.library_dir)
    vm = TriageVM(library, LocalFolderSource(), classifier, runner, config)

    win = TriageWindow(vm, runner, preview_side=config.preview_max_side, log_dir=str(log_dir))
    win.show()
    vm.load()

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
