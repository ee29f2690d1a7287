"""Label file loading and label-token helpers.

Labels are opaque tokens for the pipeline. BirdNET-style label files use
``<Scientific name>_<Common name>`` per line, which is the only place the
structure matters: building readable export filenames.
"""

from pathlib import Path

from .errors import ClassifierLoadError


def load_labels(path: str | Path) -> list[str]:
    """Load labels from a UTF-8 text file, one label per line.

    Blank lines and lines starting with ``#`` are skipped; surrounding
    whitespace is stripped.

    Args:
        path: Path to the labels file.

    Returns:
        Labels in file order.

    Raises:
        ClassifierLoadError: LABELS_NOT_FOUND if the file is missing,
            LOAD_FAILED if it cannot be decoded, EMPTY_LABELS if no
            label remains after filtering.

    Examples:
        >>> load_labels("labels_en.txt")[:2]
        ['Abroscopus albogularis_Rufous-faced Warbler', 'Abroscopus schisticeps_Black-faced Warbler']
    """
    path = Path(path)

    if not path.is_file():
        raise ClassifierLoadError(
            message=f"Labels file not found: {path}",
            code="LABELS_NOT_FOUND",
            details={"path": str(path)},
        )

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ClassifierLoadError(
            message=f"Unable to decode labels file: {e}",
            code="LOAD_FAILED",
            details={"path": str(path), "error": str(e)},
        ) from e

    labels = parse_labels(content)

    if not labels:
        raise ClassifierLoadError(
            message=f"Labels file contains no labels: {path}",
            code="EMPTY_LABELS",
            details={"path": str(path)},
        )

    return labels


def parse_labels(content: str) -> list[str]:
    """Parse label file content into a list of labels."""
    lines = (line.strip() for line in content.splitlines())
    return [line for line in lines if line and not line.startswith("#")]


def split_label(label: str) -> tuple[str, str]:
    """Split a label token into (common name, scientific name).

    The split happens on the last underscore. A label without an
    underscore is treated as a bare common name.

    Examples:
        >>> split_label("Turdus migratorius_American Robin")
        ('American Robin', 'Turdus migratorius')
        >>> split_label("Noise")
        ('Noise', '')
    """
    scientific, sep, common = label.rpartition("_")
    if not sep:
        return label, ""
    return common, scientific
