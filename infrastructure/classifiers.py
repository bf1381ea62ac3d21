"""Classifier implementations and configurable classifier loading.

The inference engine is opaque to the pipeline: anything with a
`classify(image_data, width, height)` method, or a plain callable with the
same signature, can be configured as `"package.module:attribute"` or as the
name of a `photo_triage.classifiers` entry point.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from importlib import import_module
from importlib.metadata import entry_points
from io import BytesIO
from typing import Any

from PIL import Image, ImageStat
from loguru import logger

from core.models import Classification

ENTRY_POINT_GROUP = "photo_triage.classifiers"


class ToneClassifier:
    """Labels a photo by its overall brightness and saturation.

    Produces one of `dark`, `bright`, `colorful` or `muted`, whichever
    statistic is strongest, with that statistic as the confidence.
    """

    def classify(self, image_data: bytes, width: int, height: int) -> Classification | None:
        with Image.open(BytesIO(image_data)) as im:
            rgb = im.convert("RGB")
        if width > 0 and height > 0 and (rgb.width > width or rgb.height > height):
            rgb.thumbnail((width, height))
        _, saturation, value = ImageStat.Stat(rgb.convert("HSV")).mean
        brightness = value / 255.0
        colorfulness = saturation / 255.0
        scores = {
            "dark": 1.0 - brightness,
            "bright": brightness,
            "colorful": colorfulness,
            "muted": 1.0 - colorfulness,
        }
        label = max(scores, key=lambda k: scores[k])
        return Classification(label=label, confidence=round(scores[label], 4))


class CallableClassifier:
    """Adapts a plain function to the classifier interface.

    The function may return a `Classification`, a `(label, confidence)`
    tuple, a mapping with `label` and `confidence`, or None.
    """

    def __init__(self, fn: Callable[[bytes, int, int], Any]) -> None:
        self._fn = fn

    def classify(self, image_data: bytes, width: int, height: int) -> Classification | None:
        return coerce_classification(self._fn(image_data, width, height))


def coerce_classification(value: Any) -> Classification | None:
    if value is None or isinstance(value, Classification):
        return value
    if isinstance(value, Mapping):
        return Classification(label=str(value["label"]), confidence=float(value["confidence"]))
    if isinstance(value, tuple) and len(value) == 2:
        label, confidence = value
        return Classification(label=str(label), confidence=float(confidence))
    raise TypeError(f"unsupported classifier result: {value!r}")


def _resolve(target: str) -> Any:
    if ":" in target:
        module_name, _, attr = target.partition(":")
        return getattr(import_module(module_name), attr)
    for entry_point in entry_points(group=ENTRY_POINT_GROUP):
        if entry_point.name == target:
            return entry_point.load()
    raise LookupError(f"no classifier entry point named {target!r}")


def load_classifier(target: str | None = None) -> Any:
    """Build the configured classifier; empty `target` selects `ToneClassifier`.

    Raises:
        ValueError: `target` cannot be imported or is not a classifier.
    """
    if not target:
        return ToneClassifier()
    try:
        obj = _resolve(target)
    except (ImportError, AttributeError, LookupError) as ex:
        raise ValueError(f"cannot load classifier {target!r}: {ex}") from ex

    if isinstance(obj, type):
        obj = obj()
    if callable(getattr(obj, "classify", None)):
        logger.info("Using classifier {}", target)
        return obj
    if callable(obj):
        logger.info("Using classifier function {}", target)
        return CallableClassifier(obj)
    raise ValueError(f"{target!r} is neither a classifier nor a callable")
