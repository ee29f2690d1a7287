"""Application wiring: settings, logging and dependency construction."""

from .config import Settings, get_settings
from .deps import ClassifierManager, get_audio_config, get_scan_config, get_segmentation_config
from .logging import StructuredFormatter, run_context, run_id_var, setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "ClassifierManager",
    "get_scan_config",
    "get_segmentation_config",
    "get_audio_config",
    "StructuredFormatter",
    "setup_logging",
    "run_context",
    "run_id_var",
]
