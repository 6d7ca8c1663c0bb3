"""Primary front end: Groovy sources parse straight into the normalized vocabulary."""

from __future__ import annotations

from typing import Optional

from .base import FrontEnd
from .tree import Node
from .tree_sitter import TreeSitterGrammar

# Standalone binding for the grammar that emits class_definition, closure and
# function_definition. The bundled language-pack grammar parses Groovy into
# generic command nodes instead.
GROOVY_GRAMMAR_MODULE = "tree_sitter_groovy"

_PLAIN_CLASS = "class Plain {}\n"


class GroovyFrontEnd(FrontEnd):
    language = "groovy"

    def __init__(self, grammar: Optional[TreeSitterGrammar] = None) -> None:
        self._grammar = grammar or TreeSitterGrammar(
            "groovy",
            callable_kinds={"function_definition"},
            grammar_module=GROOVY_GRAMMAR_MODULE,
        )
        self._verified = False

    def parse(self, source: str) -> Node:
        if not self._verified:
            self.verify_grammar()
        return self._grammar.parse(source)

    def verify_grammar(self) -> None:
        """Fail fast when the installed grammar does not speak our node vocabulary."""
        tree = self._grammar.parse(_PLAIN_CLASS)
        if tree.first("class_definition") is None:
            kinds = ", ".join(child.kind for child in tree.children) or "nothing"
            raise RuntimeError(
                "Installed Groovy grammar does not produce class_definition nodes "
                f"(got {kinds}); install the tree-sitter-groovy package"
            )
        self._verified = True


__all__ = ["GROOVY_GRAMMAR_MODULE", "GroovyFrontEnd"]
