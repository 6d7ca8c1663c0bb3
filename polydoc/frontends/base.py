"""Front-end contract and the parse failure taxonomy."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ..diagnostics import GRAMMAR, TOKEN_STREAM
from .tree import Node


class ParseError(Exception):
    """Base class for failures turning source text into a normalized tree."""

    category = GRAMMAR

    def __init__(self, message: str, *, line: Optional[int] = None, column: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        if self.column is None:
            return f"line {self.line}: {self.message}"
        return f"line {self.line}:{self.column}: {self.message}"


class GrammarError(ParseError):
    """Structural parse failure: the token sequence does not fit the grammar."""

    category = GRAMMAR


class TokenStreamError(ParseError):
    """Lexical failure: malformed escapes, undecodable text or a truncated token stream."""

    category = TOKEN_STREAM


class FrontEnd(ABC):
    """Turns source text of one language into the normalized Groovy-shaped tree."""

    language: str = ""

    @abstractmethod
    def parse(self, source: str) -> Node:
        """Return the normalized tree for ``source`` or raise :class:`ParseError`."""


__all__ = ["FrontEnd", "GrammarError", "ParseError", "TokenStreamError"]
