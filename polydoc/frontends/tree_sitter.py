"""Tree-sitter grammar boundary: source text in, normalized :class:`Node` out."""

from __future__ import annotations

import importlib
import re
from typing import FrozenSet, Iterable, Iterator, List, NamedTuple, Optional

from tree_sitter import Node as TSNode
from tree_sitter import Language, Parser
from tree_sitter_language_pack import get_parser

from .base import GrammarError, TokenStreamError
from .tree import KEYWORD, Node

# Anonymous tokens worth keeping: keywords such as ``class``, ``extends``,
# ``public``, ``@interface`` and ``non-sealed``, plus the vararg ellipsis.
_KEYWORD_TOKEN = re.compile(r"^(@?[A-Za-z][A-Za-z_-]*|\.\.\.)$")

_UNICODE_ESCAPE = re.compile(r"(\\+)(u+)([0-9A-Fa-f]{0,4})")


def translate_unicode_escapes(source: str) -> str:
    """Replace ``\\uXXXX`` escapes before lexing, as both languages require.

    A backslash preceded by an odd number of backslashes is escaped itself
    and starts no unicode escape.
    """
    if "\\u" not in source:
        return source

    def _replace(match: re.Match[str]) -> str:
        backslashes, _, digits = match.groups()
        if len(backslashes) % 2 == 0:
            return match.group(0)
        if len(digits) != 4:
            line = source.count("\n", 0, match.start()) + 1
            raise TokenStreamError(f"invalid unicode escape {match.group(0)!r}", line=line)
        return backslashes[:-1] + chr(int(digits, 16))

    translated = _UNICODE_ESCAPE.sub(_replace, source)
    if any("\ud800" <= char <= "\udfff" for char in translated):
        try:
            translated = translated.encode("utf-16", "surrogatepass").decode("utf-16")
        except UnicodeDecodeError as exc:
            raise TokenStreamError("unpaired surrogate in unicode escape") from exc
    return translated


class _Pending(NamedTuple):
    node: TSNode
    field: Optional[str]
    opaque: bool
    parent: int


class TreeSitterGrammar:
    """Parses one language with tree-sitter and lowers the CST.

    ``callable_kinds`` names CST nodes whose ``body`` field holds executable
    code; those bodies are kept as leaves since no documentation lives there.
    Initializers stored under a ``value`` field are leaves too: only their
    text is documented.

    The parser comes from ``tree_sitter_language_pack`` unless
    ``grammar_module`` names a standalone grammar binding exposing
    ``language()``.
    """

    def __init__(
        self,
        language: str,
        *,
        callable_kinds: Iterable[str] = (),
        grammar_module: Optional[str] = None,
    ) -> None:
        self.language = language
        self.grammar_module = grammar_module
        self.callable_kinds: FrozenSet[str] = frozenset(callable_kinds)
        self._parser: Optional[Parser] = None

    @property
    def parser(self) -> Parser:
        if self._parser is None:
            if self.grammar_module is not None:
                module = importlib.import_module(self.grammar_module)
                self._parser = Parser(Language(module.language()))
            else:
                self._parser = get_parser(self.language)  # type: ignore[arg-type]
        return self._parser

    def parse(self, source: str) -> Node:
        data = translate_unicode_escapes(source).encode("utf-8")
        tree = self.parser.parse(data)
        root = tree.root_node
        if root.has_error:
            _raise_parse_error(root, data)
        return self._lower(root, data)

    def _opaque(self, parent: TSNode, field: Optional[str]) -> bool:
        if field == "body":
            return parent.type in self.callable_kinds
        return field == "value"

    def _lower(self, root: TSNode, data: bytes) -> Node:
        # Breadth-first discovery, then bottom-up construction, so that deeply
        # nested expressions never touch the interpreter's recursion limit.
        pending = [_Pending(root, None, False, -1)]
        index = 0
        while index < len(pending):
            entry = pending[index]
            if entry.node.is_named and not entry.opaque:
                for position, child in enumerate(entry.node.children):
                    field = entry.node.field_name_for_child(position)
                    if child.is_named:
                        pending.append(_Pending(child, field, self._opaque(entry.node, field), index))
                    elif _KEYWORD_TOKEN.match(child.type):
                        pending.append(_Pending(child, field, True, index))
            index += 1

        built: List[List[Node]] = [[] for _ in pending]
        for index in range(len(pending) - 1, -1, -1):
            entry = pending[index]
            line = entry.node.start_point[0] + 1
            if entry.node.is_named:
                node = Node(
                    kind=entry.node.type,
                    text=_node_text(entry.node, data),
                    field=entry.field,
                    line=line,
                    children=tuple(reversed(built[index])),
                )
            else:
                node = Node(kind=KEYWORD, text=entry.node.type, field=entry.field, line=line)
            if entry.parent < 0:
                return node
            built[entry.parent].append(node)
        raise AssertionError("unreachable")


def _node_text(node: TSNode, data: bytes) -> str:
    return data[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _iter_nodes(root: TSNode) -> Iterator[TSNode]:
    stack = [root]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _raise_parse_error(root: TSNode, data: bytes) -> None:
    missing: Optional[TSNode] = None
    for node in _iter_nodes(root):
        if node.type == "ERROR":
            line, column = node.start_point[0] + 1, node.start_point[1] + 1
            snippet = " ".join(_node_text(node, data).split())[:40]
            if snippet:
                raise GrammarError(f"unexpected token near {snippet!r}", line=line, column=column)
            raise GrammarError("unexpected token", line=line, column=column)
        if node.is_missing and missing is None:
            missing = node
    if missing is not None:
        raise TokenStreamError(
            f"expecting {missing.type!r}, found end of token stream",
            line=missing.start_point[0] + 1,
            column=missing.start_point[1] + 1,
        )
    raise GrammarError("source could not be parsed", line=1)


__all__ = ["TreeSitterGrammar", "translate_unicode_escapes"]
