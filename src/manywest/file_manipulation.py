from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

import filetype

from manywest.config import SNIFF_BYTES, Classification, ContentType, FileEntry
from manywest.exceptions import ClassificationError, LineCountError, TraversalError
from manywest.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from manywest.config import ExclusionSet


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            If path is not under root, returns the original path as a string.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def sniff_type_label(sample: bytes) -> str:
    """Map a byte sample to a type label.

    Args:
        sample (bytes): the leading bytes of a file

    Returns:
        str: the MIME top-level category of a recognised signature
            (e.g. "image" for PNG, "application" for gzip), or "text"
            when no signature matches
    """
    if not sample:
        return ContentType.TEXT.value
    kind = filetype.guess(sample)
    if kind is None:
        return ContentType.TEXT.value
    return kind.mime.split("/", 1)[0]


def classify(path: Path) -> Classification:
    """Classify a file as text or binary from its first `SNIFF_BYTES` bytes.

    Args:
        path (Path): the file to sample

    Raises:
        ClassificationError: if the file cannot be opened or read

    Returns:
        Classification: `is_text` is True when sniffing is inconclusive
            or explicitly "text"
    """
    try:
        with path.open("rb") as f:
            sample = f.read(SNIFF_BYTES)
    except OSError as e:
        raise ClassificationError(path=path, reason=str(e)) from e
    label = sniff_type_label(sample)
    return Classification(is_text=label == ContentType.TEXT, type_label=label)


def count_lines(path: Path) -> int:
    """Count newline-delimited records in a file.

    Every `\\n` ends one line; trailing bytes after the last newline count
    as one more line. An empty file has zero lines.

    Args:
        path (Path): the file to scan

    Raises:
        LineCountError: if the file cannot be opened or read

    Returns:
        int: the number of lines
    """
    count = 0
    last = b""
    try:
        with path.open("rb") as f:
            for blk in iter(lambda: f.read(1024 * 1024), b""):
                count += blk.count(b"\n")
                last = blk[-1:]
    except OSError as e:
        raise LineCountError(path=path, reason=str(e)) from e
    if last and last != b"\n":
        count += 1
    return count


def is_excluded_dir(rel: str, exclusions: ExclusionSet) -> bool:
    """Check whether a root-relative directory path contains an excluded fragment.

    Args:
        rel (str): the directory path relative to the traversal root
        exclusions (ExclusionSet): lower-cased directory-name fragments

    Returns:
        bool: True if any fragment is a case-insensitive substring of `rel`
    """
    low = rel.lower()
    return any(fragment in low for fragment in exclusions)


def is_excluded_file(path: Path) -> bool:
    """Decide whether a discovered file must be left out of the listing.

    Unreadable files are excluded.

    Args:
        path (Path): the file to test

    Returns:
        bool: True if the file is binary or cannot be classified
    """
    try:
        result = classify(path)
    except ClassificationError as e:
        logger.warning("error checking if file is text", file=str(path), error=e.reason)
        return True
    logger.debug("filetype", type=result.type_label, file=str(path))
    return not result.is_text


def _sorted_entries(directory: Path) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise TraversalError(path=directory, operation="scandir", reason=str(e)) from e


def _entry_mode(entry: os.DirEntry[str], *, follow_symlinks: bool) -> int | None:
    op = "stat" if follow_symlinks else "lstat"
    try:
        return entry.stat(follow_symlinks=follow_symlinks).st_mode
    except FileNotFoundError as e:
        # dangling symlink
        if follow_symlinks:
            return None
        raise TraversalError(path=Path(entry.path), operation=op, reason=str(e)) from e
    except OSError as e:
        raise TraversalError(path=Path(entry.path), operation=op, reason=str(e)) from e


def walk_directory(root: Path, exclusions: ExclusionSet) -> list[str]:
    """Recursively list the text files under `root`.

    Traversal is an iterative depth-first pre-order walk with the entries
    of each directory visited by name, so the result is reproducible
    and is not re-sorted.
    Directories whose root-relative path contains an excluded fragment are
    pruned without being read. Symbolic links are never descended into.

    Args:
        root (Path): the directory to walk
        exclusions (ExclusionSet): lower-cased directory-name fragments to prune

    Raises:
        TraversalError: if a directory cannot be listed or an entry cannot be inspected

    Returns:
        list[str]: paths relative to `root`, POSIX separators, in visitation order
    """
    results: list[str] = []
    # one iterator per open directory level, innermost last
    stack: list[Iterator[os.DirEntry[str]]] = [iter(_sorted_entries(root))]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        p = Path(entry.path)
        rel = relpath(p, root)
        mode = _entry_mode(entry, follow_symlinks=False) or 0
        if stat.S_ISDIR(mode):
            if is_excluded_dir(rel, exclusions):
                logger.debug("skipping excluded directory", dir=rel)
                continue
            stack.append(iter(_sorted_entries(p)))
            continue
        target = mode if not stat.S_ISLNK(mode) else _entry_mode(entry, follow_symlinks=True)
        if target is None or not stat.S_ISREG(target):
            logger.debug("skipping non-regular file", file=rel)
            continue
        if is_excluded_file(p):
            continue
        results.append(rel)
    return results


def build_entries(paths: Sequence[str], root: Path) -> list[FileEntry]:
    """Create a FileEntry for each walked path, preserving order.

    Paths whose lines cannot be counted are dropped. A failed type lookup
    keeps the entry with the "unknown" content type.

    Args:
        paths (Sequence[str]): paths relative to `root`, as returned by `walk_directory`
        root (Path): the traversal root

    Returns:
        list[FileEntry]: one entry per countable path, in input order
    """
    entries: list[FileEntry] = []
    for rel in paths:
        p = root / rel
        try:
            count = count_lines(p)
        except LineCountError as e:
            logger.warning("error counting lines in file", file=rel, error=e.reason)
            continue
        try:
            content_type = classify(p).type_label
        except ClassificationError as e:
            logger.warning("error looking up file type", file=rel, error=e.reason)
            content_type = ContentType.UNKNOWN.value
        entries.append(FileEntry(path=rel, line_count=count, content_type=content_type))
    return entries
