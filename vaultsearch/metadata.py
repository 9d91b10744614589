"""Front-matter reading for vault documents.

Documents may start with a YAML block between ``---`` lines. Only ``tags``,
``date`` and ``lastmod`` are consumed here; the parser defaults anything
absent or oddly shaped instead of failing.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import frontmatter
import yaml

from .errors import MetadataReadFailure


@dataclass(frozen=True)
class DocumentMetadata:
    tags: tuple[str, ...] = ()
    date: str = ""
    last_modified: str = ""


EMPTY_METADATA = DocumentMetadata()


def _coerce_scalar(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def coerce_tags(value: Any) -> tuple[str, ...]:
    """Normalize a ``tags`` value to unique strings in header order."""
    if isinstance(value, str):
        items: list[Any] = [value]
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        return ()
    seen: dict[str, None] = {}
    for item in items:
        if item is None or isinstance(item, (dict, list)):
            continue
        tag = str(item).strip()
        if tag:
            seen.setdefault(tag, None)
    return tuple(seen)


def metadata_from_mapping(attributes: Mapping[str, Any]) -> DocumentMetadata:
    return DocumentMetadata(
        tags=coerce_tags(attributes.get("tags")),
        date=_coerce_scalar(attributes.get("date")),
        last_modified=_coerce_scalar(attributes.get("lastmod")),
    )


def parse_metadata(text: str) -> DocumentMetadata:
    """Parse front matter from document text.

    Raises ``yaml.YAMLError`` when a header exists but is not valid YAML.
    """
    attributes, _body = frontmatter.parse(text)
    if not isinstance(attributes, Mapping):
        return EMPTY_METADATA
    return metadata_from_mapping(attributes)


def load_metadata(path: Path) -> DocumentMetadata:
    """Read and parse the front matter of ``path``.

    Any read, decode, or YAML error becomes ``MetadataReadFailure``.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MetadataReadFailure(path, str(exc)) from exc
    try:
        return parse_metadata(text)
    except yaml.YAMLError as exc:
        raise MetadataReadFailure(path, f"invalid front matter: {exc}") from exc
