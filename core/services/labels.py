"""Display text for classification results."""

from __future__ import annotations

from collections.abc import Mapping

from core.models import ClassificationResult, ClassificationState

DEFAULT_TRANSLATIONS: dict[str, str] = {
    "dog": "狗",
    "cat": "猫",
    "bird": "鸟",
    "fish": "鱼",
    "flower": "花",
    "tree": "树",
    "mountain": "山",
    "beach": "海滩",
    "car": "汽车",
    "airplane": "飞机",
}

DEFAULT_TEMPLATE = "Category: {label} (confidence: {confidence:.2f})"
PENDING_TEXT = "Classifying…"
FAILED_TEXT = "No label"


class LabelTranslator:
    """Case-insensitive label translation; unknown labels pass through."""

    def __init__(self, translations: Mapping[str, str] | None = None) -> None:
        source = DEFAULT_TRANSLATIONS if translations is None else translations
        self._table = {str(k).lower(): str(v) for k, v in source.items()}

    def translate(self, label: str) -> str:
        return self._table.get(label.lower(), label)


def format_classification(
    result: ClassificationResult | None,
    translator: LabelTranslator | None = None,
    template: str = DEFAULT_TEMPLATE,
) -> str:
    """Render `result` for the label under the photo."""
    if result is None:
        return ""
    if result.state is ClassificationState.PENDING:
        return PENDING_TEXT
    if result.state is ClassificationState.FAILED or result.label is None:
        return FAILED_TEXT
    label = translator.translate(result.label) if translator else result.label
    return template.format(label=label, confidence=result.confidence or 0.0)
