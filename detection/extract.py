"""Cut segments out of a source buffer and join them together.

These are the primitives used for playback and export. They only read
from the source buffer and always return newly allocated buffers, so any
number of extractions can run against one source concurrently.

Example:
    >>> from detection.extract import concatenate, extract_segment
    >>> clips = [extract_segment(seg, source, trims.get(i)) for i, seg in enumerate(segments)]
    >>> combined = concatenate(clips)
    >>> combined.frame_count == sum(c.frame_count for c in clips)
    True
"""

import logging
from typing import Sequence

import torch

from audioio import PcmBuffer

from .errors import ExtractionError
from .schema import Segment, TrimSpec


logger = logging.getLogger(__name__)


def extract_segment(
    segment: Segment,
    source: PcmBuffer,
    trim: TrimSpec | None = None,
) -> PcmBuffer:
    """Copy one segment's samples out of the source, applying an optional trim.

    The segment is clamped to the source first. Trim amounts are converted
    to whole samples (truncated) and clamped so the result stays inside the
    clamped segment and never inverts.

    Args:
        segment: Segment to extract.
        source: Source buffer (not modified).
        trim: Optional user trim. None means no trim.

    Returns:
        New buffer with the source's sample rate and channel count.

    Raises:
        ExtractionError: EMPTY_RESULT if no frame remains.
    """
    frame_count = source.frame_count
    sample_rate = source.sample_rate

    base_start = max(0, min(segment.start_sample, frame_count))
    base_end = max(base_start, min(segment.end_sample, frame_count))

    trim_start_samples = 0
    trim_end_samples = 0
    if trim is not None:
        trim_start_samples = max(0, int(trim.trim_start_sec * sample_rate))
        trim_end_samples = max(0, int(trim.trim_end_sec * sample_rate))

    start = max(base_start, min(base_start + trim_start_samples, base_end))
    end = max(start, min(base_end - trim_end_samples, base_end))

    if end - start <= 0:
        raise ExtractionError(
            message="Segment and trim leave no samples to extract",
            code="EMPTY_RESULT",
            details={
                "start_sample": segment.start_sample,
                "end_sample": segment.end_sample,
                "source_frames": frame_count,
                "trim_start_samples": trim_start_samples,
                "trim_end_samples": trim_end_samples,
            },
        )

    return PcmBuffer(samples=source.samples[:, start:end].clone(), sample_rate=sample_rate)


def concatenate(buffers: Sequence[PcmBuffer]) -> PcmBuffer:
    """Join buffers end to end, in the given order.

    Args:
        buffers: Buffers sharing one sample rate and channel count.

    Returns:
        New buffer whose length is the sum of the input lengths.

    Raises:
        ExtractionError: EMPTY_INPUT for an empty list, FORMAT_MISMATCH
            when sample rates or channel counts differ.
    """
    if not buffers:
        raise ExtractionError(
            message="No buffers to concatenate",
            code="EMPTY_INPUT",
            details={"buffer_count": 0},
        )

    first = buffers[0]
    for index, buffer in enumerate(buffers):
        if buffer.sample_rate != first.sample_rate or buffer.channels != first.channels:
            raise ExtractionError(
                message="Buffers must share sample rate and channel layout",
                code="FORMAT_MISMATCH",
                details={
                    "index": index,
                    "expected": {"sample_rate": first.sample_rate, "channels": first.channels},
                    "actual": {"sample_rate": buffer.sample_rate, "channels": buffer.channels},
                },
            )

    total = sum(b.frame_count for b in buffers)
    out = torch.empty(first.channels, total, dtype=torch.float32)

    write_index = 0
    for buffer in buffers:
        length = buffer.frame_count
        out[:, write_index:write_index + length] = buffer.samples
        write_index += length

    return PcmBuffer(samples=out, sample_rate=first.sample_rate)


def splice_segments(
    segments: Sequence[Segment],
    source: PcmBuffer,
    trims: dict[int, TrimSpec] | None = None,
) -> PcmBuffer:
    """Extract several segments in start order and join them.

    ``trims`` is keyed by the segment's index in start order, the same
    numbering used for per-call export. Segments that extract to nothing
    are skipped.

    Raises:
        ExtractionError: EMPTY_INPUT if no segment yields any sample.
    """
    trims = trims or {}
    ordered = sorted(segments, key=lambda s: s.start_sample)

    clips: list[PcmBuffer] = []
    for index, segment in enumerate(ordered):
        try:
            clips.append(extract_segment(segment, source, trims.get(index)))
        except ExtractionError as e:
            logger.debug("Skipping segment %d: %s", index, e)

    if not clips:
        raise ExtractionError(
            message="No segment produced any samples",
            code="EMPTY_INPUT",
            details={"segment_count": len(ordered)},
        )

    return concatenate(clips)
