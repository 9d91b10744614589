"""Vault maintenance commands: listing, tag edits, backlinks.

All paths returned here are vault-relative strings. Failures surface as
``VaultError`` so the CLI can report them in one place.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

import frontmatter
import yaml

from .errors import MetadataReadFailure, VaultError
from .metadata import coerce_tags, load_metadata

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".md"
LISTING_SKIP_DIRS = frozenset({".trash", "Utilities"})

WIKI_LINK_TARGET_RE = re.compile(r"\[\[(.*?)(?:\|.*?)?\]\]")
INLINE_TAG_RE = re.compile(r"(?<!\S)#([a-zA-Z0-9_-]+)")


@dataclass(frozen=True)
class Backlink:
    path: str
    context: str


def parse_wiki_links(content: str) -> list[str]:
    """Return ``[[target]]`` / ``[[target|alias]]`` targets in order."""
    return [match.group(1) for match in WIKI_LINK_TARGET_RE.finditer(content)]


def parse_inline_tags(content: str) -> list[str]:
    return [match.group(1) for match in INLINE_TAG_RE.finditer(content)]


def iter_documents(base: Path, skip_dirs: Iterable[str] = ()) -> Iterator[Path]:
    """Yield Markdown files under ``base`` depth-first in name order."""
    skipped = frozenset(skip_dirs)
    try:
        entries = sorted(os.scandir(base), key=lambda entry: entry.name)
    except OSError as exc:
        raise VaultError(f"cannot read directory {base}: {exc}") from exc
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            if entry.name not in skipped:
                yield from iter_documents(Path(entry.path), skipped)
        elif entry.name.endswith(DOCUMENT_SUFFIX):
            yield Path(entry.path)


def _relative(root: Path, path: Path) -> str:
    return os.path.relpath(path, root)


def list_markdown_files(root: Path) -> list[str]:
    return [_relative(root, path) for path in iter_documents(root, LISTING_SKIP_DIRS)]


def count_files_without_tags(root: Path, files: Iterable[str]) -> int:
    """Count documents whose front matter has no tags.

    Unreadable documents count as untagged.
    """
    count = 0
    for rel_path in files:
        try:
            tags = load_metadata(root / rel_path).tags
        except MetadataReadFailure as exc:
            logger.warning("%s", exc)
            tags = ()
        if not tags:
            count += 1
    return count


def _merge_tags(current: tuple[str, ...], new_tags: Iterable[str], replace: bool) -> list[str]:
    cleaned = [tag.strip() for tag in new_tags if tag and tag.strip()]
    if replace:
        return list(dict.fromkeys(cleaned))
    return list(dict.fromkeys([*current, *cleaned]))


def _rewrite_tags(path: Path, new_tags: Iterable[str], replace: bool) -> None:
    try:
        post = frontmatter.load(str(path))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise VaultError(f"cannot read {path}: {exc}") from exc
    post.metadata["tags"] = _merge_tags(coerce_tags(post.metadata.get("tags")), new_tags, replace)
    try:
        path.write_text(frontmatter.dumps(post, sort_keys=False) + "\n", encoding="utf-8")
    except OSError as exc:
        raise VaultError(f"cannot write {path}: {exc}") from exc
    logger.info("updated tags in %s", path)


def update_tags(root: Path, files: Iterable[str], tags: Iterable[str], replace: bool = False) -> int:
    """Add ``tags`` to (or replace the tags of) each listed document."""
    tag_list = list(tags)
    count = 0
    for rel_path in files:
        rel_path = rel_path.strip()
        if not rel_path:
            continue
        _rewrite_tags(root / rel_path, tag_list, replace)
        count += 1
    return count


def collect_tags(root: Path, subpath: str = "", inline: bool = False) -> list[str]:
    """Return unique tags under ``root/subpath`` in discovery order.

    Front-matter tags always count; ``inline`` also collects body ``#tags``.
    """
    seen: dict[str, None] = {}
    for path in iter_documents(root / subpath):
        try:
            attributes, body = frontmatter.parse(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
            raise VaultError(f"cannot read {path}: {exc}") from exc
        tags = list(coerce_tags(attributes.get("tags")))
        if inline:
            tags.extend(parse_inline_tags(body))
        for tag in tags:
            seen.setdefault(tag, None)
    return list(seen)


def add_tag_to_subpath(root: Path, subpath: str, tag: str, replace: bool = False) -> int:
    if not subpath:
        raise VaultError("Subpath is required")
    if not tag.strip():
        raise VaultError("Tag is required")
    count = 0
    for path in iter_documents(root / subpath):
        _rewrite_tags(path, [tag], replace)
        count += 1
    return count


def find_backlinks(root: Path, file: str) -> list[Backlink]:
    """Find documents linking to ``file`` by its stem.

    The context is the first line containing the plain ``[[stem]]`` link,
    or an empty string when only aliased links exist.
    """
    stem = Path(file).stem
    plain_link = f"[[{stem}]]"
    backlinks: list[Backlink] = []
    for path in iter_documents(root):
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise VaultError(f"cannot read {path}: {exc}") from exc
        if stem not in parse_wiki_links(content):
            continue
        context = next((line for line in content.split("\n") if plain_link in line), "")
        backlinks.append(Backlink(path=_relative(root, path), context=context))
    return backlinks
