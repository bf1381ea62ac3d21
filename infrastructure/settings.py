"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
from typing import Any

from loguru import logger

from core.services.labels import DEFAULT_TEMPLATE, DEFAULT_TRANSLATIONS


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access."""

    def __init__(self, settings_path: str | Path) -> None:
        self._path = Path(settings_path)
        if not self._path.exists():
            raise FileNotFoundError(f"settings.json not found: {self._path}")
        with self._path.open("r", encoding="utf-8") as f:
            self._data = json.load(f)

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node


@dataclass
class AppConfig:
    """Typed view of the settings used to assemble the application."""

    library_dir: str = str(Path.home() / "Pictures" / "PhotoTriage")
    log_dir: str | None = None
    log_level: str = "INFO"
    delete_threshold: float = -100.0
    advance_threshold: float = 100.0
    classify_width: int = 224
    classify_height: int = 224
    classifier: str = ""
    preview_max_side: int = 1024
    label_template: str = DEFAULT_TEMPLATE
    translations: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_TRANSLATIONS))


def _number(settings: JsonSettings, key: str, default: float, cast: type) -> Any:
    raw = settings.get(key, default)
    try:
        return cast(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid value for {}: {!r}; using {}", key, raw, default)
        return default


def load_app_config(settings: JsonSettings) -> AppConfig:
    """Build `AppConfig`, falling back to defaults for missing or invalid keys."""
    defaults = AppConfig()
    delete_threshold = _number(settings, "triage.delete_threshold", defaults.delete_threshold, float)
    advance_threshold = _number(
        settings, "triage.advance_threshold", defaults.advance_threshold, float
    )
    if delete_threshold >= 0:
        logger.warning("triage.delete_threshold must be negative; using {}", defaults.delete_threshold)
        delete_threshold = defaults.delete_threshold
    if advance_threshold <= 0:
        logger.warning(
            "triage.advance_threshold must be positive; using {}", defaults.advance_threshold
        )
        advance_threshold = defaults.advance_threshold

    translations = settings.get("labels.translations", defaults.translations)
    if not isinstance(translations, dict):
        logger.warning("labels.translations must be an object; using defaults")
        translations = defaults.translations

    return AppConfig(
        library_dir=str(settings.get("library.path", defaults.library_dir) or defaults.library_dir),
        log_dir=settings.get("logging.dir") or None,
        log_level=str(settings.get("logging.level", defaults.log_level) or defaults.log_level),
        delete_threshold=delete_threshold,
        advance_threshold=advance_threshold,
        classify_width=_number(settings, "classifier.target_width", defaults.classify_width, int),
        classify_height=_number(
            settings, "classifier.target_height", defaults.classify_height, int
        ),
        classifier=str(settings.get("classifier.plugin", "") or ""),
        preview_max_side=_number(settings, "preview.max_side", defaults.preview_max_side, int),
        label_template=str(settings.get("labels.template", defaults.label_template)),
        translations={str(k): str(v) for k, v in translations.items()},
    )
