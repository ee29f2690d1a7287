"""Write isolated calls to WAV files.

Two layouts are supported:
- per_label: all segments of a label spliced into one file
- per_call: one file per segment, numbered from 1 in start order

Trims are looked up as ``trims[label][index]`` where ``index`` is the
segment's 0-based position in start order, for both layouts.

Example:
    >>> from datetime import datetime
    >>> from export.assemble import export_per_label
    >>> paths = export_per_label(result.segments, result.buffer, "clips/", datetime.now())
    >>> [p.name for p in paths]
    ['05-17-2024-American_Robin-Turdus_migratorius-063005.wav']
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Literal, Sequence, get_args

from audioio import AudioWriteError, PcmBuffer, write_wav
from detection.errors import ExtractionError
from detection.extract import extract_segment, splice_segments
from detection.schema import Segment, TrimMap

from .errors import ExportError
from .filenames import generate_filename


logger = logging.getLogger(__name__)

ExportMode = Literal["per_label", "per_call"]
EXPORT_MODES: tuple[str, ...] = get_args(ExportMode)


def export_per_label(
    segments_by_label: dict[str, Sequence[Segment]],
    source: PcmBuffer,
    output_dir: str | Path,
    recording_date: datetime,
    trims: TrimMap | None = None,
) -> list[Path]:
    """Write one spliced file per label.

    Args:
        segments_by_label: Label -> segments map.
        source: Source buffer the segments index into.
        output_dir: Directory to write into (created if missing).
        recording_date: Timestamp used in filenames.
        trims: Optional per-label, per-segment trims.

    Labels whose filenames clean up to the same string get a numeric
    suffix instead of overwriting each other.

    Returns:
        Written paths, in label order.

    Raises:
        ExportError: If a file cannot be written. Files written by this
            call are removed first.
    """
    output_dir = _prepare_output_dir(output_dir)
    trims = trims or {}
    written: list[Path] = []
    taken: set[str] = set()

    for label in sorted(segments_by_label):
        segments = segments_by_label[label]
        if not segments:
            continue

        try:
            clip = splice_segments(segments, source, trims.get(label))
        except ExtractionError as e:
            logger.warning("Skipping label %r: %s", label, e)
            continue

        path = output_dir / _unique_name(generate_filename(label, recording_date), taken)
        written.append(_write_clip(clip, path, written))

    logger.info("Exported %d per-label file(s) to %s", len(written), output_dir)
    return written


def export_per_call(
    segments_by_label: dict[str, Sequence[Segment]],
    source: PcmBuffer,
    output_dir: str | Path,
    recording_date: datetime,
    trims: TrimMap | None = None,
) -> list[Path]:
    """Write one file per segment, numbered per label from 1 in start order.

    A segment trimmed down to nothing is skipped; the numbering of the
    remaining clips is unchanged.

    Returns:
        Written paths, in label order then start order.

    Raises:
        ExportError: If a file cannot be written. Files written by this
            call are removed first.
    """
    output_dir = _prepare_output_dir(output_dir)
    trims = trims or {}
    written: list[Path] = []
    taken: set[str] = set()

    for label in sorted(segments_by_label):
        label_trims = trims.get(label, {})
        ordered = sorted(segments_by_label[label], key=lambda s: s.start_sample)

        for index, segment in enumerate(ordered):
            try:
                clip = extract_segment(segment, source, label_trims.get(index))
            except ExtractionError as e:
                logger.warning("Skipping clip %d of label %r: %s", index + 1, label, e)
                continue

            path = output_dir / _unique_name(generate_filename(label, recording_date, clip_index=index + 1), taken)
            written.append(_write_clip(clip, path, written))

    logger.info("Exported %d per-call file(s) to %s", len(written), output_dir)
    return written


def export_clips(
    mode: str,
    segments_by_label: dict[str, Sequence[Segment]],
    source: PcmBuffer,
    output_dir: str | Path,
    recording_date: datetime,
    trims: TrimMap | None = None,
) -> list[Path]:
    """Dispatch to ``export_per_label`` or ``export_per_call`` by mode name.

    Raises:
        ExportError: INVALID_MODE for an unknown mode.
    """
    if mode == "per_label":
        return export_per_label(segments_by_label, source, output_dir, recording_date, trims)
    if mode == "per_call":
        return export_per_call(segments_by_label, source, output_dir, recording_date, trims)

    raise ExportError(
        message=f"Unknown export mode: {mode}",
        code="INVALID_MODE",
        details={"mode": mode, "available": list(EXPORT_MODES)},
    )


def cleanup_files(paths: Iterable[str | Path]) -> None:
    """Delete exported files. Files already gone are ignored."""
    for path in paths:
        Path(path).unlink(missing_ok=True)


def _prepare_output_dir(output_dir: str | Path) -> Path:
    output_dir = Path(output_dir)
    if output_dir.exists() and not output_dir.is_dir():
        raise ExportError(
            message="Output path exists and is not a directory",
            code="OUTPUT_DIR_INVALID",
            details={"output_dir": str(output_dir)},
        )
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def _write_clip(clip: PcmBuffer, path: Path, written: list[Path]) -> Path:
    try:
        return write_wav(clip, path)
    except AudioWriteError as e:
        cleanup_files(written)
        raise ExportError(
            message=f"Failed to write clip {path.name}",
            code="WRITE_FAILED",
            details={"path": str(path), "error": str(e), "removed": len(written)},
        ) from e


def _unique_name(name: str, taken: set[str]) -> str:
    """Suffix ``-2``, ``-3``... onto a name another label of this export already produced."""
    candidate = name
    suffix = 2
    while candidate in taken:
        candidate = f"{name[:-len('.wav')]}-{suffix}.wav"
        suffix += 1
    taken.add(candidate)
    return candidate
