"""
Form Ingestion - turns a multipart submission into typed field values and files

Multipart values reach the API in several wire shapes: plain strings from
Starlette's parser, upload handles, lists for repeated keys, and wrapper
objects (``.value``/``.data``/``.fields``) produced by other multipart
clients and proxies. Every raw value is first classified into one of the
shapes below, then projected to a scalar by a function that never raises.
"""

import inspect
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from starlette.datastructures import UploadFile

from ...config.component_fields import (
    CATEGORICAL_FIELDS,
    DATE_FIELDS,
    FILE_FIELDS,
    NUMERIC_FIELDS,
)
from ...utils.file_utils import base_filename

logger = logging.getLogger(__name__)

DEFAULT_MIMETYPE = "application/octet-stream"
_MAX_UNWRAP_DEPTH = 5
_MISSING = object()
_DECIMAL_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


# ============================================================================
# Wire shapes
# ============================================================================

@dataclass(frozen=True)
class MissingField:
    pass


@dataclass(frozen=True)
class ScalarField:
    value: Union[str, int, float]


@dataclass(frozen=True)
class WrappedValueField:
    value: Any


@dataclass(frozen=True)
class WrappedDataField:
    data: Any


@dataclass(frozen=True)
class FieldArrayField:
    fields: Sequence[Any]


@dataclass(frozen=True)
class ListField:
    items: Sequence[Any]


@dataclass(frozen=True)
class FileField:
    handle: Any


@dataclass(frozen=True)
class UnknownField:
    raw: Any


FieldShape = Union[
    MissingField,
    ScalarField,
    WrappedValueField,
    WrappedDataField,
    FieldArrayField,
    ListField,
    FileField,
    UnknownField,
]


def _lookup(raw: Any, name: str) -> Any:
    """Read ``name`` as a mapping key or attribute, returning ``_MISSING`` if absent."""
    if isinstance(raw, Mapping):
        return raw.get(name, _MISSING)
    return getattr(raw, name, _MISSING)


def _first_present(raw: Any, *names: str) -> Any:
    for name in names:
        value = _lookup(raw, name)
        if value is not _MISSING and value not in (None, ""):
            return value
    return None


def _looks_like_file(raw: Any) -> bool:
    if isinstance(raw, UploadFile):
        return True
    if isinstance(raw, (str, bytes, int, float, list, tuple)):
        return False
    has_name = _first_present(raw, "filename", "name") is not None
    has_content = any(
        _lookup(raw, attr) is not _MISSING for attr in ("read", "_buf", "buffer", "file")
    )
    return has_name and has_content


def classify_field(raw: Any) -> FieldShape:
    """Classify a raw multipart value into one of the known wire shapes."""
    if raw is None:
        return MissingField()
    if isinstance(raw, (str, int, float)):
        return ScalarField(raw)
    if isinstance(raw, (list, tuple)):
        return ListField(raw)
    if _looks_like_file(raw):
        return FileField(raw)

    value = _lookup(raw, "value")
    if value is not _MISSING:
        return WrappedValueField(value)
    data = _lookup(raw, "data")
    if data is not _MISSING:
        return WrappedDataField(data)
    fields = _lookup(raw, "fields")
    if isinstance(fields, (list, tuple)) and fields:
        return FieldArrayField(fields)

    return UnknownField(raw)


def extract_field_value(raw: Any, _depth: int = 0) -> Optional[Union[str, int, float]]:
    """Project a raw multipart value onto a scalar, or ``None`` if it has none."""
    if _depth > _MAX_UNWRAP_DEPTH:
        logger.warning("Field value nested too deeply, ignoring", extra={"depth": _depth})
        return None

    shape = classify_field(raw)

    if isinstance(shape, MissingField):
        return None
    if isinstance(shape, ScalarField):
        return shape.value
    if isinstance(shape, WrappedValueField):
        return extract_field_value(shape.value, _depth + 1)
    if isinstance(shape, WrappedDataField):
        return extract_field_value(shape.data, _depth + 1)
    if isinstance(shape, FieldArrayField):
        inner = _lookup(shape.fields[0], "value")
        return None if inner is _MISSING else extract_field_value(inner, _depth + 1)
    if isinstance(shape, ListField):
        return extract_field_value(shape.items[0], _depth + 1) if shape.items else None
    if isinstance(shape, FileField):
        return None

    logger.warning(
        "Could not extract value from field object",
        extra={"field_type": type(shape.raw).__name__},
    )
    return None


# ============================================================================
# Type coercion
# ============================================================================

def _parse_float(text: str) -> Optional[float]:
    # float() also accepts digit separators ("1_000") and words ("nan")
    if not _DECIMAL_PATTERN.match(text):
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _parse_date(text: str) -> Optional[datetime]:
    candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return datetime.fromisoformat(candidate)
    except ValueError:
        return None


def convert_to_database_type(field_name: str, value: Any) -> Any:
    """Convert an extracted form value to the type stored for ``field_name``."""
    if value is None or value == "":
        return None

    string_value = str(value).strip()

    if field_name in CATEGORICAL_FIELDS:
        return string_value
    if field_name in NUMERIC_FIELDS:
        return _parse_float(string_value) if string_value else None
    if field_name in DATE_FIELDS:
        return _parse_date(string_value) if string_value else None
    return string_value or None


# ============================================================================
# Files
# ============================================================================

@dataclass
class FileDescriptor:
    field_name: str
    filename: str
    mimetype: str
    size: int
    buffer: Optional[bytes]
    original_name: str

    @property
    def uploadable(self) -> bool:
        return self.buffer is not None


async def _read_full_contents(handle: Any, filename: str) -> Optional[bytes]:
    reader = _lookup(handle, "read")
    if not callable(reader):
        return None
    try:
        content = reader()
        if inspect.isawaitable(content):
            content = await content
    except Exception as e:
        logger.warning(
            f"❌ Failed to read file contents for {filename}: {e}",
            extra={"file_name": filename, "error_type": type(e).__name__},
        )
        return None
    return bytes(content) if isinstance(content, (bytes, bytearray)) else None


def _declared_size(raw: Any) -> int:
    declared = _first_present(raw, "size")
    try:
        return max(int(declared or 0), 0)
    except (TypeError, ValueError):
        logger.debug("Ignoring non-numeric file size", extra={"declared_size": repr(declared)})
        return 0


async def resolve_file_descriptor(field_name: str, raw: Any, index: int = 0) -> Optional[FileDescriptor]:
    """Describe one uploaded file; entries without a filename are not files."""
    raw_name = _first_present(raw, "filename", "name")
    # Client paths are never kept; only the last segment names the file
    filename = base_filename(str(raw_name)) if raw_name else ""
    if not filename:
        logger.debug("Skipping file entry without a filename", extra={"field": field_name, "index": index})
        return None

    buffer = None
    for attr in ("_buf", "buffer", "data"):
        candidate = _lookup(raw, attr)
        if isinstance(candidate, (bytes, bytearray)):
            buffer = bytes(candidate)
            break
    if buffer is None:
        buffer = await _read_full_contents(raw, filename)

    size = len(buffer) if buffer is not None else _declared_size(raw)

    return FileDescriptor(
        field_name=field_name,
        filename=filename,
        mimetype=str(_first_present(raw, "content_type", "mimetype", "type") or DEFAULT_MIMETYPE),
        size=size,
        buffer=buffer,
        original_name=str(_first_present(raw, "originalname", "filename", "name")),
    )


def _file_candidates(raw: Any) -> List[Any]:
    shape = classify_field(raw)
    if isinstance(shape, ListField):
        candidates: List[Any] = []
        for item in shape.items:
            candidates.extend(_file_candidates(item))
        return candidates
    if isinstance(shape, FieldArrayField):
        return list(shape.fields)
    if isinstance(shape, (MissingField, ScalarField)):
        return []
    return [raw]


# ============================================================================
# Whole form
# ============================================================================

@dataclass
class IngestedForm:
    fields: Dict[str, Any] = field(default_factory=dict)
    files: Dict[str, List[FileDescriptor]] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    @property
    def has_files(self) -> bool:
        return bool(self.files)

    def missing(self, required: Iterable[str]) -> List[str]:
        """Required names whose value is absent or empty, in the given order."""
        return [name for name in required if self.fields.get(name) in (None, "")]

    def iter_files(self) -> Iterable[FileDescriptor]:
        for descriptors in self.files.values():
            yield from descriptors


def _form_items(form: Any) -> List[Tuple[str, Any]]:
    """Collapse a multi-valued form into ``(key, raw)`` pairs, one per key."""
    if hasattr(form, "multi_items") and hasattr(form, "getlist"):
        keys = dict.fromkeys(key for key, _ in form.multi_items())
        items = []
        for key in keys:
            values = form.getlist(key)
            items.append((key, values[0] if len(values) == 1 else list(values)))
        return items
    return list(form.items())


async def ingest_form(form: Any, file_fields: Sequence[str] = FILE_FIELDS) -> IngestedForm:
    """Parse a submitted form into converted field values and evidence files."""
    ingested = IngestedForm()

    for key, raw in _form_items(form):
        if key in file_fields:
            descriptors = []
            for index, candidate in enumerate(_file_candidates(raw)):
                descriptor = await resolve_file_descriptor(key, candidate, index)
                if descriptor is not None:
                    descriptors.append(descriptor)
            if descriptors:
                ingested.files[key] = descriptors
                logger.debug(
                    f"📁 {len(descriptors)} file(s) for {key}",
                    extra={"field": key, "filenames": [d.filename for d in descriptors]},
                )
            continue

        ingested.fields[key] = convert_to_database_type(key, extract_field_value(raw))

    logger.info(
        f"📊 Form ingested: {len(ingested.fields)} fields, {len(ingested.files)} file categories",
        extra={
            "action": ingested.fields.get("action"),
            "component_code": ingested.fields.get("componentCode"),
            "field_count": len(ingested.fields),
            "file_categories": list(ingested.files),
        },
    )
    return ingested
