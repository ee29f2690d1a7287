"""Tests for the app package (settings, logging, wiring)."""

import io
import logging

import pytest

from app import (
    ClassifierManager,
    Settings,
    StructuredFormatter,
    get_audio_config,
    get_scan_config,
    get_segmentation_config,
    get_settings,
    run_context,
    run_id_var,
    setup_logging,
)
from classifier import ClassifierLoadError, StubClassifier


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("CHIRPCLIP_CONFIDENCE_THRESHOLD", "CHIRPCLIP_CLASSIFIER_ID", "CHIRPCLIP_EXPORT_MODE"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        """Defaults match the segmentation and scan defaults."""
        settings = Settings(_env_file=None)

        assert settings.classifier_id == "torchscript"
        assert settings.target_sample_rate == 48000
        assert settings.confidence_threshold == 0.25
        assert settings.export_mode == "per_label"
        assert settings.allow_stub_fallback is False

    def test_env_prefix(self, monkeypatch):
        """CHIRPCLIP_ variables override defaults."""
        monkeypatch.setenv("CHIRPCLIP_CONFIDENCE_THRESHOLD", "0.6")
        monkeypatch.setenv("CHIRPCLIP_CLASSIFIER_ID", "stub")

        settings = get_settings()

        assert settings.confidence_threshold == 0.6
        assert settings.classifier_id == "stub"

    def test_get_settings_cached(self):
        """The same instance is returned until the cache is cleared."""
        assert get_settings() is get_settings()

    def test_invalid_value_rejected(self, monkeypatch):
        """Out-of-range values fail validation."""
        monkeypatch.setenv("CHIRPCLIP_CONFIDENCE_THRESHOLD", "1.5")

        with pytest.raises(ValueError):
            Settings(_env_file=None)


class TestConfigBuilders:
    """Tests for settings -> config dataclasses."""

    def test_segmentation_config(self):
        """All segmentation fields are carried over."""
        settings = Settings(_env_file=None, padding_sec=0.2, boundary_correction_sec=0.0)

        config = get_segmentation_config(settings)

        assert config.padding_sec == 0.2
        assert config.boundary_correction_sec == 0.0
        assert config.confidence_threshold == settings.confidence_threshold

    def test_scan_config(self):
        settings = Settings(_env_file=None, hop_fraction=0.25)

        assert get_scan_config(settings).hop_fraction == 0.25

    def test_audio_config(self):
        settings = Settings(_env_file=None, target_sample_rate=32000)

        assert get_audio_config(settings).target_sample_rate == 32000


class TestClassifierManager:
    """Tests for ClassifierManager."""

    def test_lazy_load(self):
        """Nothing is loaded until first use."""
        manager = ClassifierManager(classifier_id="stub", window_sec=1.0, sample_rate=8000)

        assert not manager.is_loaded
        assert isinstance(manager.classifier, StubClassifier)
        assert manager.is_loaded
        assert manager.classifier is manager.classifier

    def test_missing_model_is_fatal_by_default(self, tmp_path):
        """Without fallback a load failure propagates."""
        manager = ClassifierManager(model_path=tmp_path / "none.pt", labels_path=tmp_path / "none.txt")

        with pytest.raises(ClassifierLoadError):
            manager.load()

    def test_missing_paths(self):
        """The TorchScript classifier needs both paths."""
        with pytest.raises(ClassifierLoadError) as exc_info:
            ClassifierManager().load()

        assert exc_info.value.code == "INVALID_CONFIG"
        assert exc_info.value.details["missing"] == ["model_path", "labels_path"]

    def test_fallback_to_stub(self, tmp_path, caplog):
        """With fallback enabled the stub is served and a warning logged."""
        manager = ClassifierManager(
            model_path=tmp_path / "none.pt",
            labels_path=tmp_path / "none.txt",
            window_sec=1.0,
            sample_rate=8000,
            allow_stub_fallback=True,
        )

        with caplog.at_level(logging.WARNING, logger="app.deps"):
            classifier = manager.classifier

        assert classifier.name == "stub"
        assert classifier.window_samples == 8000
        assert manager.using_fallback
        assert "falling back to stub" in caplog.text

    def test_from_settings(self):
        settings = Settings(_env_file=None, classifier_id="stub", window_sec=2.0, target_sample_rate=8000)

        manager = ClassifierManager.from_settings(settings)

        assert manager.classifier.window_samples == 16000


class TestStructuredLogging:
    """Tests for StructuredFormatter and run_context."""

    def test_format_includes_run_id(self):
        """Records carry the active run id."""
        record = logging.LogRecord("detection.scan", logging.INFO, __file__, 1, 'scan "done"', None, None)
        formatter = StructuredFormatter()

        with run_context("abc123"):
            line = formatter.format(record)

        assert "level=INFO" in line
        assert "logger=detection.scan" in line
        assert "run_id=abc123" in line
        assert 'message="scan \\"done\\""' in line

    def test_no_run_id_outside_context(self):
        """Outside a run the id is rendered as '-'."""
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)

        assert "run_id=-" in StructuredFormatter().format(record)

    def test_run_context_generates_and_resets(self):
        """A generated id is active only inside the block."""
        with run_context() as run_id:
            assert run_id
            assert run_id_var.get() == run_id

        assert run_id_var.get() == ""

    def test_setup_logging_replaces_handlers(self):
        """Calling setup twice leaves a single handler."""
        stream = io.StringIO()
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging("INFO", stream=stream)
            setup_logging("INFO", stream=stream)
            logging.getLogger("export.assemble").info("wrote %d clips", 2)

            assert len(root.handlers) == 1
            assert stream.getvalue().count('message="wrote 2 clips"') == 1
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
