"""Configuration management for chirpclip.

This module provides centralized configuration using pydantic-settings,
loading values from ``CHIRPCLIP_``-prefixed environment variables or a
``.env`` file, with defaults tuned for 3 s / 48 kHz bird classifiers.

Example:
    >>> from app.config import get_settings
    >>> settings = get_settings()
    >>> settings.confidence_threshold
    0.25
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Every attribute can be overridden with ``CHIRPCLIP_<NAME>``, e.g.
    ``CHIRPCLIP_CONFIDENCE_THRESHOLD=0.4``.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        classifier_id: Classifier implementation ("torchscript" or "stub").
        model_path: TorchScript model file, required for "torchscript".
        labels_path: Labels file, required for "torchscript".
        device: Device for model inference ("cpu" or "cuda").
        allow_stub_fallback: Use the stub classifier when the model fails
            to load instead of aborting.
        target_sample_rate: Classifier input sample rate in Hz.
        window_sec: Classifier input window in seconds.
        max_duration_sec: Longest recording accepted.
        hop_fraction: Scan hop as a fraction of the window.
        acceptance_floor: Scan-time confidence floor.
        confidence_threshold: Segmentation confidence threshold.
        padding_sec: Maximum trailing padding per segment.
        merge_gap_sec: Largest gap merged within a label.
        min_clip_sec: Shortest segment kept.
        boundary_correction_sec: Inward correction of merged events.
        lead_in_sec: Padding before each segment.
        safety_margin_sec: Gap kept before the next event when padding.
        export_mode: "per_label" or "per_call".
        output_dir: Default directory for exported clips.
    """

    model_config = SettingsConfigDict(
        env_prefix="CHIRPCLIP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=(),
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Classifier settings
    classifier_id: Literal["torchscript", "stub"] = "torchscript"
    model_path: Path | None = None
    labels_path: Path | None = None
    device: Literal["cpu", "cuda"] = "cpu"
    allow_stub_fallback: bool = False

    # Audio settings
    target_sample_rate: int = Field(default=48000, gt=0)
    window_sec: float = Field(default=3.0, gt=0)
    max_duration_sec: float = Field(default=4 * 3600.0, gt=0)

    # Scan settings
    hop_fraction: float = Field(default=0.1, gt=0, le=1)
    acceptance_floor: float = Field(default=0.1, ge=0, lt=1)

    # Segmentation settings
    confidence_threshold: float = Field(default=0.25, ge=0, le=1)
    padding_sec: float = Field(default=0.05, ge=0)
    merge_gap_sec: float = Field(default=0.25, ge=0)
    min_clip_sec: float = Field(default=0.30, ge=0)
    boundary_correction_sec: float = Field(default=0.75, ge=0)
    lead_in_sec: float = Field(default=0.0, ge=0)
    safety_margin_sec: float = Field(default=0.01, ge=0)

    # Export settings
    export_mode: Literal["per_label", "per_call"] = "per_label"
    output_dir: Path = Path("clips")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache so the environment is read once per process; call
    ``get_settings.cache_clear()`` after changing it.
    """
    return Settings()
