"""Filenames for exported clips.

Names are built from the recording timestamp and the label so that clips
from one session sort together and stay readable in a file browser:
``MM-DD-YYYY-<Common>[-<Scientific>]-HHMMSS[-<index>].wav``.

Example:
    >>> from datetime import datetime
    >>> generate_filename("Turdus migratorius_American Robin", datetime(2024, 5, 17, 6, 30, 5))
    '05-17-2024-American_Robin-Turdus_migratorius-063005.wav'
"""

from datetime import datetime

from classifier.labels import split_label


# Characters that are unsafe on at least one common filesystem
INVALID_FILENAME_CHARS = '/\\?%*|"<>:'

_TRANSLATION = str.maketrans({c: "_" for c in INVALID_FILENAME_CHARS + " "})


def sanitize_filename(text: str) -> str:
    """Replace path-hostile characters and spaces with underscores.

    Examples:
        >>> sanitize_filename("Black-capped Chickadee")
        'Black-capped_Chickadee'
        >>> sanitize_filename('a/b:c')
        'a_b_c'
    """
    return text.translate(_TRANSLATION)


def generate_filename(
    label: str,
    recording_date: datetime,
    clip_index: int | None = None,
) -> str:
    """Build the export filename for a label's clip.

    Args:
        label: Label token, ``"<Scientific>_<Common>"`` or a bare name.
        recording_date: Recording timestamp (date and time are both used).
        clip_index: 1-based clip number for per-call export, or None for a
            per-label file.

    Returns:
        Filename ending in ``.wav``. The scientific part is omitted when
        the label has none.
    """
    common, scientific = split_label(label)

    parts = [recording_date.strftime("%m-%d-%Y"), sanitize_filename(common)]
    scientific = sanitize_filename(scientific)
    if scientific:
        parts.append(scientific)
    parts.append(recording_date.strftime("%H%M%S"))
    if clip_index is not None:
        parts.append(str(clip_index))

    return "-".join(parts) + ".wav"
