"""Full-text search over the vault with ripgrep.

Runs ``rg`` once per query and folds its ``path\\0line:text`` output into one
``SearchResult`` per document, in the order files were first reported.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from .errors import MetadataReadFailure, SearchFailure
from .metadata import EMPTY_METADATA, DocumentMetadata, load_metadata

logger = logging.getLogger(__name__)

RG_NO_MATCHES_EXIT_CODE = 1


@dataclass(frozen=True)
class SearchResult:
    title: str
    path: str  # vault-relative, unique per result
    matches: tuple[str, ...]
    tags: tuple[str, ...] = ()
    date: str = ""
    last_modified: str = ""


@dataclass(frozen=True)
class RgLine:
    file_path: str
    line_number: int
    text: str


@dataclass
class _PendingResult:
    title: str
    path: str
    metadata: DocumentMetadata
    matches: list[str] = field(default_factory=list)

    def freeze(self) -> SearchResult:
        return SearchResult(
            title=self.title,
            path=self.path,
            matches=tuple(self.matches),
            tags=self.metadata.tags,
            date=self.metadata.date,
            last_modified=self.metadata.last_modified,
        )


def parse_rg_line(line: str) -> RgLine | None:
    """Split one ``path\\0line:text`` record written by ``rg --null``.

    The path ends at the NUL byte, so it may contain colons; the first colon
    after it ends the line number. Returns ``None`` for other shapes.
    """
    clean = line.rstrip("\r\n")
    file_path, nul, rest = clean.partition("\0")
    if not nul or not file_path:
        return None
    line_text, colon, text = rest.partition(":")
    if not colon:
        return None
    try:
        line_number = int(line_text)
    except ValueError:
        return None
    return RgLine(file_path=file_path, line_number=line_number, text=text)


def build_rg_command(root: Path, query: str, rg_binary: str = "rg", glob: str = "*.md") -> list[str]:
    return [
        rg_binary,
        "--ignore-case",
        "--line-number",
        "--with-filename",
        "--no-heading",
        "--null",
        "--color",
        "never",
        "--glob",
        glob,
        "-e",
        query,
        str(root),
    ]


def run_rg(root: Path, query: str, rg_binary: str = "rg", glob: str = "*.md") -> list[str]:
    """Run ripgrep and return its stdout lines.

    Exit code 1 means "no matches" and yields an empty list. A missing
    binary, a spawn error, or any other non-zero exit raises ``SearchFailure``.
    """
    if shutil.which(rg_binary) is None:
        raise SearchFailure(f"{rg_binary} is not installed.")

    cmd = build_rg_command(root, query, rg_binary=rg_binary, glob=glob)
    logger.debug("running %s", cmd)
    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as exc:
        raise SearchFailure(f"failed to run {rg_binary}: {exc}") from exc

    stdout_text, stderr_text = proc.communicate()
    if proc.returncode == RG_NO_MATCHES_EXIT_CODE:
        return []
    if proc.returncode != 0:
        err = (stderr_text or "").strip() or f"{rg_binary} failed with exit code {proc.returncode}"
        raise SearchFailure(err)
    return (stdout_text or "").split("\n")


def _metadata_for(file_path: Path) -> DocumentMetadata:
    try:
        return load_metadata(file_path)
    except MetadataReadFailure as exc:
        logger.warning("%s", exc)
        return EMPTY_METADATA


def aggregate_lines(root: Path, lines: list[str]) -> list[SearchResult]:
    """Group rg output lines into per-document results.

    Metadata is read once per document, on first discovery. Later lines for
    the same document only append their trimmed text.
    """
    pending: dict[str, _PendingResult] = {}
    for line in lines:
        record = parse_rg_line(line)
        if record is None:
            if line.strip():
                logger.debug("skipping malformed rg line: %r", line)
            continue
        rel_path = os.path.relpath(record.file_path, root)
        existing = pending.get(rel_path)
        if existing is not None:
            existing.matches.append(record.text.strip())
            continue
        # rg prints paths prefixed with the root argument it was given.
        pending[rel_path] = _PendingResult(
            title=Path(rel_path).stem,
            path=rel_path,
            metadata=_metadata_for(Path(record.file_path)),
            matches=[record.text.strip()],
        )
    return [item.freeze() for item in pending.values()]


def aggregate_matches(
    root: Path,
    query: str,
    rg_binary: str = "rg",
    glob: str = "*.md",
) -> list[SearchResult]:
    """Search ``root`` for ``query`` and return results in discovery order."""
    if not query:
        return []
    lines = run_rg(root, query, rg_binary=rg_binary, glob=glob)
    results = aggregate_lines(root, lines)
    logger.info("query %r matched %d documents under %s", query, len(results), root)
    return results
