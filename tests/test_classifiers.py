"""Tests for the built-in classifier and classifier loading."""

from __future__ import annotations

from io import BytesIO
import sys
import types

from PIL import Image
import pytest

from core.models import Classification
from infrastructure.classifiers import (
    CallableClassifier,
    ToneClassifier,
    coerce_classification,
    load_classifier,
)


def _image(color, size=(50, 50)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def test_tone_classifier_labels_dark_image() -> None:
    result = ToneClassifier().classify(_image((0, 0, 0)), 224, 224)
    assert result == Classification(label="dark", confidence=1.0)


def test_tone_classifier_labels_bright_image() -> None:
    result = ToneClassifier().classify(_image((255, 255, 255), (400, 300)), 224, 224)
    assert result.label == "bright"
    assert result.confidence == 1.0


def test_tone_classifier_confidence_in_unit_range() -> None:
    result = ToneClassifier().classify(_image((90, 140, 60)), 224, 224)
    assert result.label in {"dark", "bright", "colorful", "muted"}
    assert 0.5 <= result.confidence <= 1.0


def test_tone_classifier_rejects_garbage() -> None:
    with pytest.raises(OSError):
        ToneClassifier().classify(b"garbage", 224, 224)


@pytest.fixture
def plugin_module(monkeypatch):
    module = types.ModuleType("triage_test_plugins")

    class FixedClassifier:
        def classify(self, image_data, width, height):
            return Classification("fixed", 0.7)

    def as_tuple(image_data, width, height):
        return ("tuple-label", 0.4)

    module.FixedClassifier = FixedClassifier
    module.as_tuple = as_tuple
    module.not_callable = 42
    monkeypatch.setitem(sys.modules, "triage_test_plugins", module)
    return module


def test_empty_target_uses_tone_classifier() -> None:
    assert isinstance(load_classifier(""), ToneClassifier)
    assert isinstance(load_classifier(None), ToneClassifier)


def test_load_classifier_class(plugin_module) -> None:
    classifier = load_classifier("triage_test_plugins:FixedClassifier")
    assert classifier.classify(b"", 1, 1) == Classification("fixed", 0.7)


def test_load_classifier_function(plugin_module) -> None:
    classifier = load_classifier("triage_test_plugins:as_tuple")
    assert isinstance(classifier, CallableClassifier)
    assert classifier.classify(b"", 1, 1) == Classification("tuple-label", 0.4)


@pytest.mark.parametrize(
    "target",
    ["triage_test_plugins:missing", "triage_test_plugins:not_callable", "no_such_module_xyz:fn"],
)
def test_load_classifier_errors(plugin_module, target: str) -> None:
    with pytest.raises(ValueError):
        load_classifier(target)


def test_unknown_entry_point_name() -> None:
    with pytest.raises(ValueError):
        load_classifier("no-such-registered-classifier")


def test_coerce_classification() -> None:
    assert coerce_classification(None) is None
    assert coerce_classification({"label": "cat", "confidence": "0.5"}) == Classification("cat", 0.5)
    with pytest.raises(TypeError):
        coerce_classification("cat")
