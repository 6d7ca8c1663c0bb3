"""Discovery of documentable files under the source roots."""

from __future__ import annotations

import os
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple

from .description import DESCRIPTION_FILE_NAME
from .dispatcher import SECONDARY_ALIAS_SUFFIX, SECONDARY_SUFFIX

PRIMARY_SUFFIXES = (".groovy", ".gvy", ".gy", ".gsh")

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".gradle",
    ".idea",
    "build",
    "target",
    "out",
    "node_modules",
}


def is_documentable(file_name: str) -> bool:
    name = file_name.rsplit("/", 1)[-1]
    if name == DESCRIPTION_FILE_NAME:
        return True
    return name.endswith(PRIMARY_SUFFIXES + (SECONDARY_SUFFIX, SECONDARY_ALIAS_SUFFIX))


class SourceScanner:
    """Lists documentable files relative to their source root.

    ``exclude_paths`` holds globs over root-relative paths. A trailing ``/``
    restricts a glob to directories. A glob with a leading or inner ``/`` must
    match the whole path; any other glob may match a single path segment.
    """

    def __init__(self, exclude_paths: Iterable[str] = ()) -> None:
        self._excludes: List[Tuple[str, bool, bool]] = []
        for raw in exclude_paths:
            pattern = raw.strip()
            directories_only = pattern.endswith("/")
            whole_path = "/" in pattern.rstrip("/")
            pattern = pattern.strip("/")
            if pattern:
                self._excludes.append((pattern, directories_only, whole_path))

    def scan(self, sourcepath: Sequence[Path]) -> List[str]:
        """Return relative ``/`` separated names, first occurrence order, no duplicates."""
        seen: set[str] = set()
        names: List[str] = []
        for root in sourcepath:
            root_path = Path(root).expanduser()
            if not root_path.is_dir():
                continue
            for rel_path in sorted(self._iter_files(root_path)):
                if rel_path not in seen:
                    seen.add(rel_path)
                    names.append(rel_path)
        return names

    def _excluded(self, rel_path: str, is_dir: bool) -> bool:
        segments = rel_path.split("/")
        for pattern, directories_only, whole_path in self._excludes:
            if directories_only and not is_dir:
                continue
            if whole_path:
                if fnmatchcase(rel_path, pattern):
                    return True
            elif any(fnmatchcase(segment, pattern) for segment in segments):
                return True
        return False

    def _iter_files(self, root: Path) -> Iterator[str]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

            kept = []
            for name in dirnames:
                rel_path = f"{rel_dir}/{name}" if rel_dir else name
                if name in _EXCLUDED_DIRS or self._excluded(rel_path, True):
                    continue
                kept.append(name)
            dirnames[:] = kept

            for filename in filenames:
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if is_documentable(rel_path) and not self._excluded(rel_path, False):
                    yield rel_path


__all__ = ["PRIMARY_SUFFIXES", "SourceScanner", "is_documentable"]
