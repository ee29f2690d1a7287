#!/usr/bin/env python3
"""Isolate bird calls from a recording and export them as WAV clips.

This script scans a recording with the configured window classifier,
merges the per-window detections into per-species segments and writes
the clips to a directory, one file per species or one file per call.
A JSON summary is printed on stdout; logs and the progress bar go to
stderr. Ctrl-C stops the scan at the next window.

Defaults come from ``CHIRPCLIP_*`` environment variables (see
``app.config.Settings``); command-line options override them.

Usage:
    python scripts/extract_calls.py --input dawn.wav --model_path birdnet.pt --labels_path labels_en.txt
    python scripts/extract_calls.py --input dawn.wav --classifier stub --mode per_call
    python scripts/extract_calls.py --input dawn.wav --confidence_threshold 0.5 --no_export --pretty

Example output:
    {
        "status": "completed",
        "sample_rate": 48000,
        "duration_sec": 62.4,
        "failed_windows": 0,
        "summaries": [
            {"label": "Turdus migratorius_American Robin", "max_confidence": 0.91,
             "average_confidence": 0.74, "clip_count": 3, "total_duration_sec": 4.2}
        ],
        "segments": {...},
        "exported": ["clips/05-17-2024-American_Robin-Turdus_migratorius-063005.wav"]
    }

Exit codes:
    0 success, 1 input file missing, 2 known error, 3 unexpected error,
    130 cancelled.
"""

import argparse
import json
import logging
import signal
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tqdm import tqdm

from app.config import get_settings
from app.deps import ClassifierManager, get_audio_config, get_scan_config, get_segmentation_config
from app.logging import run_context, setup_logging
from audioio.errors import AudioIOError
from classifier.errors import ClassifierError
from detection import CancellationToken, isolate_calls
from detection.errors import DetectionError
from export import EXPORT_MODES, export_clips
from export.errors import ExportError


logger = logging.getLogger("extract_calls")

EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser. Unset options fall back to settings."""
    parser = argparse.ArgumentParser(
        description="Isolate bird calls from a recording and export them as WAV clips",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s --input dawn.wav --model_path birdnet.pt --labels_path labels_en.txt
    %(prog)s --input dawn.wav --classifier stub --mode per_call --output_dir clips/
    %(prog)s --input dawn.wav --confidence_threshold 0.5 --padding_sec 0.1
    %(prog)s --input dawn.wav --no_export --include_detections --pretty
        """,
    )

    # Input/output arguments
    parser.add_argument("--input", "-i", type=str, required=True, help="Path to the recording")
    parser.add_argument("--output_dir", "-o", type=str, default=None, help="Directory for exported clips")
    parser.add_argument(
        "--mode",
        type=str,
        choices=list(EXPORT_MODES),
        default=None,
        help="One file per species (per_label) or per call (per_call)",
    )
    parser.add_argument(
        "--recording_date",
        type=datetime.fromisoformat,
        default=None,
        help="Recording timestamp used in filenames, ISO format (default: file mtime)",
    )
    parser.add_argument("--no_export", action="store_true", help="Only print the summary")
    parser.add_argument("--include_detections", action="store_true", help="Include raw detections in output")
    parser.add_argument("--pretty", "-p", action="store_true", help="Pretty-print JSON output")
    parser.add_argument("--quiet", "-q", action="store_true", help="Hide the progress bar")
    parser.add_argument("--log_level", type=str, default=None, help="Log level (default: from settings)")

    # Classifier arguments
    parser.add_argument("--classifier", "-c", type=str, choices=["torchscript", "stub"], default=None)
    parser.add_argument("--model_path", type=str, default=None, help="TorchScript model file")
    parser.add_argument("--labels_path", type=str, default=None, help="Labels file")
    parser.add_argument("--device", "-d", type=str, choices=["cpu", "cuda"], default=None)
    parser.add_argument(
        "--allow_stub_fallback",
        action="store_true",
        default=None,
        help="Use the stub classifier if the model fails to load",
    )

    # Scan and segmentation arguments
    parser.add_argument("--hop_fraction", type=float, default=None, help="Hop as a fraction of the window")
    parser.add_argument("--confidence_threshold", type=float, default=None)
    parser.add_argument("--padding_sec", type=float, default=None)
    parser.add_argument("--merge_gap_sec", type=float, default=None)
    parser.add_argument("--min_clip_sec", type=float, default=None)
    parser.add_argument("--boundary_correction_sec", type=float, default=None)

    return parser


SETTING_OPTIONS = (
    ("classifier", "classifier_id"),
    ("model_path", "model_path"),
    ("labels_path", "labels_path"),
    ("device", "device"),
    ("allow_stub_fallback", "allow_stub_fallback"),
    ("hop_fraction", "hop_fraction"),
    ("confidence_threshold", "confidence_threshold"),
    ("padding_sec", "padding_sec"),
    ("merge_gap_sec", "merge_gap_sec"),
    ("min_clip_sec", "min_clip_sec"),
    ("boundary_correction_sec", "boundary_correction_sec"),
    ("mode", "export_mode"),
    ("output_dir", "output_dir"),
    ("log_level", "log_level"),
)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the script.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)

    input_path = Path(args.input)
    if not input_path.exists():
        print(json.dumps({
            "error": "File not found",
            "code": "FILE_NOT_FOUND",
            "path": str(input_path),
        }), file=sys.stderr)
        return 1

    token = CancellationToken()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: token.cancel())

    try:
        overrides = {
            field: getattr(args, option)
            for option, field in SETTING_OPTIONS
            if getattr(args, option) is not None
        }
        if "log_level" in overrides:
            overrides["log_level"] = overrides["log_level"].upper()
        settings = get_settings().model_copy(update=overrides)
        setup_logging(settings.log_level, stream=sys.stderr)

        recording_date = args.recording_date or datetime.fromtimestamp(input_path.stat().st_mtime)

        with run_context() as run_id:
            manager = ClassifierManager.from_settings(settings)
            classifier = manager.classifier

            with tqdm(desc="Analyzing", unit="window", file=sys.stderr, disable=args.quiet) as bar:
                def on_progress(completed: int, total: int, message: str) -> None:
                    if bar.total != total:
                        bar.total = total
                    bar.update(completed - bar.n)

                result = isolate_calls(
                    input_path,
                    classifier,
                    audio_config=get_audio_config(settings),
                    scan_config=get_scan_config(settings),
                    segmentation_config=get_segmentation_config(settings),
                    on_progress=on_progress,
                    cancel_token=token,
                )

            output = result.to_dict(include_detections=args.include_detections)
            output["run_id"] = run_id
            output["classifier"] = classifier.name
            output["using_fallback"] = manager.using_fallback

            if not result.cancelled:
                exported = []
                if not args.no_export:
                    exported = export_clips(
                        settings.export_mode,
                        result.segments,
                        result.buffer,
                        settings.output_dir,
                        recording_date,
                    )
                output["exported"] = [str(p) for p in exported]

        if args.pretty:
            print(json.dumps(output, indent=2, ensure_ascii=False))
        else:
            print(json.dumps(output, ensure_ascii=False))

        return EXIT_CANCELLED if result.cancelled else 0

    except (AudioIOError, ClassifierError, DetectionError, ExportError) as e:
        print(json.dumps(e.to_dict(), default=str), file=sys.stderr)
        return 2

    except ValueError as e:
        print(json.dumps({
            "error": str(e),
            "code": "INVALID_CONFIG",
            "type": type(e).__name__,
        }), file=sys.stderr)
        return 2

    except Exception as e:
        logger.exception("Unexpected failure")
        print(json.dumps({
            "error": str(e),
            "code": "UNEXPECTED_ERROR",
            "type": type(e).__name__,
        }), file=sys.stderr)
        return 3

    finally:
        signal.signal(signal.SIGINT, previous_handler)


if __name__ == "__main__":
    sys.exit(main())
