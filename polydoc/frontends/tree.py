"""Normalized syntax tree shared by every front end.

Both grammars lower into :class:`Node`, an immutable tagged variant whose
``kind`` comes from the Groovy grammar vocabulary. The helpers here are pure:
they build new trees and never mutate their input.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Iterator, List, Mapping, Optional, Sequence, Tuple

KEYWORD = "keyword"


@dataclass(frozen=True)
class Node:
    kind: str
    text: str = ""
    field: Optional[str] = None
    line: int = 0
    children: Tuple["Node", ...] = ()

    def child(self, field: str) -> Optional["Node"]:
        """Return the first child stored under ``field``."""
        for node in self.children:
            if node.field == field:
                return node
        return None

    def children_of(self, *kinds: str) -> List["Node"]:
        return [node for node in self.children if node.kind in kinds]

    def first(self, *kinds: str) -> Optional["Node"]:
        for node in self.children:
            if node.kind in kinds:
                return node
        return None

    def keywords(self) -> List[str]:
        return [node.text for node in self.children if node.kind == KEYWORD]

    def has_keyword(self, word: str) -> bool:
        return word in self.keywords()


def keyword(text: str, line: int = 0, field: Optional[str] = None) -> Node:
    return Node(kind=KEYWORD, text=text, field=field, line=line)


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and its descendants in pre-order (source order)."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def remap(node: Node, table: Mapping[str, str]) -> Node:
    """Rename node kinds through ``table``; the tree shape is preserved."""
    return replace(
        node,
        kind=table.get(node.kind, node.kind),
        children=tuple(remap(child, table) for child in node.children),
    )


RewriteRule = Callable[[Node, Tuple[Node, ...]], Sequence[Node]]


def rewrite(node: Node, rule: RewriteRule) -> Node:
    """Apply ``rule`` bottom-up and return the rewritten tree.

    ``rule`` receives a node whose children are already rewritten together
    with its original ancestors (outermost first) and returns the nodes that
    replace it: an empty sequence drops it, several splice into the parent.
    """
    result = _rewrite(node, rule, ())
    if len(result) != 1:
        raise ValueError(f"Rewrite of the root {node.kind!r} must produce exactly one node")
    return result[0]


def _rewrite(node: Node, rule: RewriteRule, ancestors: Tuple[Node, ...]) -> Sequence[Node]:
    path = ancestors + (node,)
    children: List[Node] = []
    for child in node.children:
        children.extend(_rewrite(child, rule, path))
    return rule(replace(node, children=tuple(children)), ancestors)


__all__ = ["KEYWORD", "Node", "RewriteRule", "keyword", "remap", "rewrite", "walk"]
