"""Local filesystem source provider."""

from __future__ import annotations

from pathlib import Path

from codeqa.config import MAX_FILE_SIZE, CodeQAConfig
from codeqa.errors import InputError, UnsupportedFileError
from codeqa.logging import get_logger
from codeqa.models import SourceUnit, language_for_path
from codeqa.sources.base import SourceSet, is_excluded

logger = get_logger("sources.local")


def load_unit(path: str | Path, rel_path: str | None = None) -> SourceUnit:
    """Read one file into a SourceUnit.

    Raises UnsupportedFileError for unknown extensions and InputError when the
    file cannot be read.
    """
    path = Path(path)
    rel = rel_path or path.name
    language = language_for_path(rel)
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise InputError(f"Cannot read {path}: {e}") from e
    return SourceUnit(
        path=rel,
        content=content,
        language=language,
        size_bytes=path.stat().st_size,
    )


def gather_units(root: str | Path, config: CodeQAConfig | None = None) -> SourceSet:
    """Gather analyzable files under `root`, sorted by relative path.

    Excluded directories, oversized files and unreadable files are skipped.
    Files with unknown extensions are not analyzed but are listed in
    `other_paths`. A file `root` yields a single unit.
    """
    config = config or CodeQAConfig()
    root = Path(root)

    if not root.exists():
        raise InputError(f"Path does not exist: {root}")

    if root.is_file():
        return SourceSet(units=[load_unit(root)], origin=str(root))

    excluded = config.excluded
    max_size = config.max_file_size or MAX_FILE_SIZE
    units: list[SourceUnit] = []
    other: list[str] = []

    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        rel = path.relative_to(root).as_posix()
        if is_excluded(rel, excluded):
            continue
        try:
            language_for_path(rel)
        except UnsupportedFileError:
            other.append(rel)
            continue
        try:
            if path.stat().st_size > max_size:
                logger.debug("Skipping oversized file %s", rel)
                continue
            units.append(load_unit(path, rel))
        except (InputError, OSError) as e:
            logger.warning("Skipping unreadable file %s: %s", rel, e)
            continue

    logger.info("Gathered %d source file(s) from %s", len(units), root)
    return SourceSet(units=units, other_paths=other, origin=str(root))
