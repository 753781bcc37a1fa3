"""Placeholder substitution across a directory tree.

Every regular file below the root is read as text and each ``{{ key }}``
token (whitespace inside the braces optional) whose key is in the
replacement map is replaced with its value.  Tokens with unknown keys are
left as they are.  Files are only written back when something changed.

A file that cannot be read, decoded or written produces a warning and the
walk moves on.  A directory that cannot be listed aborts the walk.  Symlinks
are never followed, read or written; they are listed in the report.
"""

from __future__ import annotations

import asyncio
import os
import re
from pathlib import Path

from pydantic import BaseModel, Field

from ..errors import ScaffoldError
from ..utils import print_error, print_warning

STAGE = "walking"


class FileFailure(BaseModel):
    """A file that could not be processed."""

    path: Path
    error: str


class SubstitutionReport(BaseModel):
    """Outcome of one placeholder walk."""

    files_scanned: int = 0
    files_changed: list[Path] = Field(default_factory=list)
    symlinks_skipped: list[Path] = Field(default_factory=list)
    replacements: int = 0
    failures: list[FileFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def placeholder_pattern(key: str) -> re.Pattern[str]:
    """Compile the regex matching ``{{ key }}`` with optional inner whitespace."""
    return re.compile(r"\{\{\s*" + re.escape(key) + r"\s*\}\}")


def substitute_placeholders(content: str, replacements: dict[str, str]) -> tuple[str, int]:
    """Replace every known placeholder in *content*.

    Values are inserted literally (no backreference expansion).

    Returns:
        ``(new_content, replacement_count)``.
    """
    total = 0
    for key, value in replacements.items():
        content, count = placeholder_pattern(key).subn(lambda _m, v=value: v, content)
        total += count
    return content, total


async def replace_placeholders(
    directory: str | Path,
    replacements: dict[str, str],
    *,
    encoding: str = "utf-8",
    report: SubstitutionReport | None = None,
) -> SubstitutionReport:
    """Recursively substitute placeholders in every file below *directory*.

    Args:
        directory: Root of the tree to rewrite.
        replacements: Placeholder name to value mapping.
        encoding: Text encoding used to read and write files.
        report: Report to accumulate into (used by the recursion).

    Returns:
        A ``SubstitutionReport`` describing the walk.

    Raises:
        ScaffoldError: If a directory cannot be listed.
    """
    report = report if report is not None else SubstitutionReport()
    root = Path(directory)

    try:
        entries = await asyncio.to_thread(_list_dir, root)
    except OSError as exc:
        print_error(f"Error processing directory {root}: {exc}")
        raise ScaffoldError(STAGE, f"Could not list directory {root}: {exc}") from exc

    for path, is_dir, is_link in entries:
        if is_link:
            report.symlinks_skipped.append(path)
            continue
        if is_dir:
            await replace_placeholders(path, replacements, encoding=encoding, report=report)
            continue

        report.files_scanned += 1
        try:
            content = await asyncio.to_thread(_read_text, path, encoding)
            updated, count = substitute_placeholders(content, replacements)
            if count:
                await asyncio.to_thread(_write_text, path, updated, encoding)
                report.files_changed.append(path)
                report.replacements += count
        except (OSError, UnicodeError) as exc:
            print_warning(f"Warning: Could not process file {path}: {exc}")
            report.failures.append(FileFailure(path=path, error=str(exc)))

    return report


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _list_dir(directory: Path) -> list[tuple[Path, bool, bool]]:
    """Return ``(path, is_directory, is_symlink)`` triples sorted by name."""
    with os.scandir(directory) as it:
        entries = [
            (Path(entry.path), entry.is_dir(follow_symlinks=False), entry.is_symlink())
            for entry in it
        ]
    return sorted(entries)


def _read_text(path: Path, encoding: str) -> str:
    # newline="" keeps CRLF endings intact on rewrite.
    with path.open("r", encoding=encoding, newline="") as fh:
        return fh.read()


def _write_text(path: Path, content: str, encoding: str) -> None:
    with path.open("w", encoding=encoding, newline="") as fh:
        fh.write(content)
