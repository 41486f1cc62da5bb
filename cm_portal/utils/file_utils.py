import re

_UNSAFE_BLOB_CHARS = re.compile(r"[^A-Za-z0-9._-]+")

DEFAULT_BLOB_FILENAME = "upload"


def base_filename(filename: str) -> str:
    """Last path segment of a client-supplied filename, splitting on both separators."""
    return filename.split("/")[-1].split("\\")[-1].strip()


def safe_blob_filename(filename: str) -> str:
    """Filename usable as the final blob path segment.

    Directory parts are dropped, runs of unsafe characters (spaces included)
    become ``_`` and a name made only of dots falls back to ``upload``.
    """
    name = _UNSAFE_BLOB_CHARS.sub("_", base_filename(filename))
    if not name.strip("."):
        return DEFAULT_BLOB_FILENAME
    return name
