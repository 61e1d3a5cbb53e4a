"""File enumeration for glob patterns.

Matching follows glob rules: ``*``, ``?`` and ``[...]`` within one path
segment, ``**`` across any number of directories, and names starting with a
dot only match segments that start with a dot. Unlike ``glob.iglob``, a
directory that cannot be listed is an error, not an empty match.
"""

import fnmatch
import glob
import logging
import os
from collections.abc import Iterator

from multizopfli.errors import EnumerationError


logger = logging.getLogger(__name__)

PNG_EXTENSION = '.png'
RECURSIVE = '**'


def normalize_pattern(pattern: str) -> str:
    """Use forward slashes so the pattern matches the same way on every OS."""
    return pattern.replace('\\', '/')


def _join(directory: str, name: str) -> str:
    if not directory:
        return name
    if directory.endswith('/'):
        return directory + name
    return f'{directory}/{name}'


def _scan(directory: str) -> list[os.DirEntry]:
    try:
        with os.scandir(directory or '.') as it:
            return list(it)
    except OSError as e:
        raise EnumerationError(f'Failed to list {directory or "."}: {e}') from e


def _hidden_mismatch(name: str, segment: str) -> bool:
    return name.startswith('.') and not segment.startswith('.')


def _search(directory: str, segments: list[str]) -> Iterator[str]:
    head, rest = segments[0], segments[1:]

    if head == RECURSIVE:
        if rest:
            yield from _search(directory, rest)
        for entry in _scan(directory):
            if entry.name.startswith('.'):
                continue
            path = _join(directory, entry.name)
            if entry.is_dir(follow_symlinks=False):
                yield from _search(path, segments)
            elif not rest and entry.is_file():
                yield path
        return

    if not glob.has_magic(head):
        path = _join(directory, head)
        if rest:
            if os.path.isdir(path):
                yield from _search(path, rest)
        elif os.path.isfile(path):
            yield path
        return

    for entry in _scan(directory):
        if _hidden_mismatch(entry.name, head) or not fnmatch.fnmatch(entry.name, head):
            continue
        path = _join(directory, entry.name)
        if rest:
            if entry.is_dir():
                yield from _search(path, rest)
        elif entry.is_file():
            yield path


def iter_files(pattern: str) -> Iterator[str]:
    """Lazily yield regular files matching a glob pattern.

    Directories and other non-file entries are skipped. ``**`` matches
    recursively. A missing literal directory yields nothing.

    Raises:
        EnumerationError: a directory on the search path could not be listed
    """
    normalized = normalize_pattern(pattern)
    root = '/' if normalized.startswith('/') else ''
    segments = [s for s in normalized.split('/') if s]
    if not segments:
        return
    yield from _search(root, segments)


def is_png(path: str) -> bool:
    """Case-sensitive check for the .png extension."""
    return os.path.splitext(path)[1] == PNG_EXTENSION


def iter_png_files(pattern: str, exclude_suffix: str | None = None) -> Iterator[str]:
    """Lazily yield files matching the pattern whose extension is exactly .png.

    Paths ending in exclude_suffix (e.g. leftover temp outputs) are skipped.
    """
    for path in iter_files(pattern):
        if not is_png(path):
            logger.debug(f'Skipping non-png file: {path}')
            continue
        if exclude_suffix and path.endswith(exclude_suffix):
            logger.debug(f'Skipping temporary output: {path}')
            continue
        yield path
