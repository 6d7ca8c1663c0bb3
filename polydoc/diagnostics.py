"""Diagnostics collected while building a root document."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List

from .logging import get_logger

GRAMMAR = "grammar"
TOKEN_STREAM = "token-stream"
MARKUP = "markup"
DUPLICATE_CLASS = "duplicate-class"
AMBIGUOUS_SOURCE = "ambiguous-source"

# Categories that mean the file contributed nothing to the document.
SKIPPED_CATEGORIES = frozenset({GRAMMAR, TOKEN_STREAM, MARKUP})

_LABELS = {
    GRAMMAR: "grammar error",
    TOKEN_STREAM: "token stream error",
    MARKUP: "markup error",
    DUPLICATE_CLASS: "duplicate class",
    AMBIGUOUS_SOURCE: "ambiguous source",
}


@dataclass(frozen=True)
class Diagnostic:
    """One advisory line about a file processed during a run."""

    file: str
    category: str
    message: str

    def format(self) -> str:
        label = _LABELS.get(self.category, self.category)
        if self.category in SKIPPED_CATEGORIES:
            return f"ignored due to {label}: {self.file} [{self.message}]"
        return f"{label}: {self.file} [{self.message}]"


@dataclass
class Diagnostics:
    """Explicit collector handed to and returned from the root builder."""

    entries: List[Diagnostic] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._logger = get_logger("diagnostics")

    def report(self, file: str, category: str, message: str) -> Diagnostic:
        diagnostic = Diagnostic(file=file, category=category, message=message)
        self.entries.append(diagnostic)
        self._logger.warning(diagnostic.format())
        return diagnostic

    def skipped_files(self) -> List[str]:
        return [entry.file for entry in self.entries if entry.category in SKIPPED_CATEGORIES]

    def by_category(self, category: str) -> List[Diagnostic]:
        return [entry for entry in self.entries if entry.category == category]

    def lines(self) -> List[str]:
        return [entry.format() for entry in self.entries]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)


__all__ = [
    "AMBIGUOUS_SOURCE",
    "DUPLICATE_CLASS",
    "Diagnostic",
    "Diagnostics",
    "GRAMMAR",
    "MARKUP",
    "SKIPPED_CATEGORIES",
    "TOKEN_STREAM",
]
