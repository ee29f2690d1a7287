"""Tests for the classifier package."""

import math

import pytest
import torch
from torch import nn

from classifier import (
    Classification,
    ClassificationError,
    ClassifierLoadError,
    StubClassifier,
    TorchScriptClassifier,
    WindowClassifier,
    get_classifier,
    list_available_classifiers,
    load_labels,
    parse_labels,
    split_label,
)
from classifier.tensor import softmax, top1


LABELS = [
    "Cardinalis cardinalis_Northern Cardinal",
    "Turdus migratorius_American Robin",
    "Poecile atricapillus_Black-capped Chickadee",
]


class FixedLogits(nn.Module):
    """Emits the same logits for every window, plus one extra head value."""

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return torch.tensor([[0.0, 2.0, 0.0, 5.0]]) + x.sum() * 0.0


@pytest.fixture
def labels_file(tmp_path):
    path = tmp_path / "labels_en.txt"
    path.write_text("# BirdNET labels\n" + "\n".join(LABELS) + "\n\n", encoding="utf-8")
    return path


@pytest.fixture
def model_file(tmp_path):
    path = tmp_path / "fixed.pt"
    torch.jit.script(FixedLogits()).save(str(path))
    return path


class TestLabels:
    """Tests for label parsing and splitting."""

    def test_parse_skips_comments_and_blanks(self):
        """Comment and blank lines are not labels."""
        assert parse_labels("# header\n\n  A_B  \nC_D\n") == ["A_B", "C_D"]

    def test_load_labels(self, labels_file):
        """Labels load in file order."""
        assert load_labels(labels_file) == LABELS

    def test_missing_labels_file(self, tmp_path):
        """A missing file is a load error."""
        with pytest.raises(ClassifierLoadError) as exc_info:
            load_labels(tmp_path / "nope.txt")

        assert exc_info.value.code == "LABELS_NOT_FOUND"

    def test_labels_file_without_labels(self, tmp_path):
        """A file holding only comments is rejected."""
        path = tmp_path / "labels.txt"
        path.write_text("# nothing here\n", encoding="utf-8")

        with pytest.raises(ClassifierLoadError) as exc_info:
            load_labels(path)

        assert exc_info.value.code == "EMPTY_LABELS"

    def test_split_on_last_underscore(self):
        """Scientific name may itself contain underscores."""
        assert split_label("Genus_species_Common Name") == ("Common Name", "Genus_species")

    def test_split_bare_name(self):
        """No underscore means no scientific name."""
        assert split_label("Engine") == ("Engine", "")


class TestTensorHelpers:
    """Tests for softmax and top1."""

    def test_softmax_sums_to_one(self):
        """Probabilities sum to 1 and keep ordering."""
        probs = softmax(torch.tensor([1.0, 3.0, 2.0]))

        assert probs.sum().item() == pytest.approx(1.0)
        assert int(torch.argmax(probs)) == 1

    def test_softmax_large_logits_stable(self):
        """Huge logits do not overflow."""
        probs = softmax(torch.tensor([1000.0, 1000.0]))

        assert probs.tolist() == pytest.approx([0.5, 0.5])

    def test_softmax_degenerate_returns_zeros(self):
        """All -inf logits yield all-zero probabilities."""
        probs = softmax(torch.full((3,), float("-inf")))

        assert probs.tolist() == [0.0, 0.0, 0.0]

    def test_top1_empty(self):
        """Empty input has no winner."""
        assert top1(torch.tensor([])) is None

    def test_top1_tie_resolves_to_first(self):
        """Ties go to the lowest index."""
        assert top1(torch.tensor([0.2, 0.4, 0.4])) == (1, pytest.approx(0.4))


class TestStubClassifier:
    """Tests for the deterministic stub."""

    def test_conforms_to_protocol(self):
        """The stub satisfies WindowClassifier."""
        assert isinstance(StubClassifier(), WindowClassifier)

    def test_window_from_seconds(self):
        """3 s at 48 kHz is 144000 samples."""
        assert StubClassifier().window_samples == 144000

    def test_cycles_labels_and_confidences(self):
        """Call i yields labels[i % 3] with confidence 0.3 + 0.1 * (i % 5)."""
        clf = StubClassifier(window_sec=0.5, sample_rate=8000)
        window = torch.zeros(1, clf.window_samples)

        verdicts = [clf.classify(window) for _ in range(6)]

        assert [v.label for v in verdicts] == LABELS + LABELS
        assert [v.confidence for v in verdicts] == pytest.approx([0.3, 0.4, 0.5, 0.6, 0.7, 0.3])

    def test_reset_restarts_sequence(self):
        """reset() makes a rescan reproducible."""
        clf = StubClassifier(window_sec=0.5, sample_rate=8000)
        window = torch.zeros(1, clf.window_samples)
        first = clf.classify(window)
        clf.classify(window)

        clf.reset()

        assert clf.classify(window) == first

    def test_wrong_window_shape(self):
        """A window of the wrong length is rejected."""
        clf = StubClassifier(window_sec=0.5, sample_rate=8000)

        with pytest.raises(ClassificationError) as exc_info:
            clf.classify(torch.zeros(1, 10))

        assert exc_info.value.code == "INVALID_INPUT"

    def test_empty_label_pool_rejected(self):
        """At least one label is required."""
        with pytest.raises(ClassifierLoadError):
            StubClassifier(labels=[])


class TestTorchScriptClassifier:
    """Tests for the TorchScript-backed classifier."""

    def test_load_and_classify(self, model_file, labels_file):
        """Extra output heads are ignored and softmax picks the top label."""
        clf = TorchScriptClassifier(model_file, labels_file, window_sec=0.5, sample_rate=8000)

        verdict = clf.classify(torch.zeros(1, 4000))

        expected = math.exp(2.0) / (math.exp(2.0) + 2.0)
        assert clf.name == "fixed"
        assert clf.window_samples == 4000
        assert verdict.label == "Turdus migratorius_American Robin"
        assert verdict.confidence == pytest.approx(expected, rel=1e-5)
        assert verdict.scores is None

    def test_include_scores(self, model_file, labels_file):
        """Per-label scores can be requested."""
        clf = TorchScriptClassifier(
            model_file, labels_file, window_sec=0.5, sample_rate=8000, include_scores=True
        )

        scores = clf.classify(torch.zeros(1, 4000)).scores

        assert set(scores) == set(LABELS)
        assert sum(scores.values()) == pytest.approx(1.0)

    def test_wrong_window_shape(self, model_file, labels_file):
        """Windows must match window_samples exactly."""
        clf = TorchScriptClassifier(model_file, labels_file, window_sec=0.5, sample_rate=8000)

        with pytest.raises(ClassificationError) as exc_info:
            clf.classify(torch.zeros(1, 3999))

        assert exc_info.value.code == "INVALID_INPUT"

    def test_missing_model(self, tmp_path, labels_file):
        """A missing model file fails at construction."""
        with pytest.raises(ClassifierLoadError) as exc_info:
            TorchScriptClassifier(tmp_path / "missing.pt", labels_file)

        assert exc_info.value.code == "FILE_NOT_FOUND"

    def test_corrupt_model(self, tmp_path, labels_file):
        """A file that is not a TorchScript archive fails to load."""
        path = tmp_path / "corrupt.pt"
        path.write_bytes(b"not a model")

        with pytest.raises(ClassifierLoadError) as exc_info:
            TorchScriptClassifier(path, labels_file)

        assert exc_info.value.code == "LOAD_FAILED"


class TestRegistry:
    """Tests for get_classifier."""

    def test_available(self):
        """Both implementations are registered."""
        assert set(list_available_classifiers()) == {"torchscript", "stub"}

    def test_cached_per_arguments(self):
        """Same id and arguments return the same instance."""
        a = get_classifier("stub", window_sec=1.0, sample_rate=8000)
        b = get_classifier("stub", sample_rate=8000, window_sec=1.0)
        c = get_classifier("stub", window_sec=2.0, sample_rate=8000)

        assert a is b
        assert a is not c

    def test_unknown_id(self):
        """Unknown ids are load errors listing what is available."""
        with pytest.raises(ClassifierLoadError) as exc_info:
            get_classifier("tflite")

        assert exc_info.value.code == "CLASSIFIER_NOT_FOUND"
        assert "stub" in exc_info.value.details["available"]

    def test_bad_arguments(self):
        """Unexpected constructor arguments become INVALID_CONFIG."""
        with pytest.raises(ClassifierLoadError) as exc_info:
            get_classifier("stub", temperature=0.5)

        assert exc_info.value.code == "INVALID_CONFIG"

    def test_classification_to_dict(self):
        """Classification serializes label and confidence."""
        assert Classification("A_B", 0.5).to_dict() == {"label": "A_B", "confidence": 0.5}
