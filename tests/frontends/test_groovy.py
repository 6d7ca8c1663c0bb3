"""Tests for the Groovy front end."""

from __future__ import annotations

import pytest

from polydoc.assembler import ClassDocAssembler
from polydoc.frontends import GroovyFrontEnd, ParseError
from polydoc.frontends.tree import Node


@pytest.fixture(scope="module")
def groovy() -> GroovyFrontEnd:
    return GroovyFrontEnd()


def test_groovy_class_with_superclass_and_method(groovy: GroovyFrontEnd) -> None:
    tree = groovy.parse(
        """
package pkg.a

class Bar extends Foo {
    def greet(String who) {
        return who
    }
}
"""
    )
    docs = ClassDocAssembler("pkg/a", "pkg/a/Bar.groovy").assemble(tree)

    bar = docs["pkg.a.Bar"]
    assert bar.language == "groovy"
    assert bar.superclass.name == "Foo"
    assert "greet" in [method.name for method in bar.methods]


def test_groovy_script_becomes_script_class(groovy: GroovyFrontEnd) -> None:
    tree = groovy.parse('println "hello"\n')
    docs = ClassDocAssembler("tools", "tools/hello.groovy").assemble(tree)

    script = docs["tools.hello"]
    assert script.kind == "script"
    assert script.superclass.name == "Script"
    assert [method.name for method in script.methods] == ["main", "run"]


def test_groovy_parse_failure_raises(groovy: GroovyFrontEnd) -> None:
    with pytest.raises(ParseError):
        groovy.parse("class Broken extends {\n")


def test_installed_grammar_recognizes_class_definitions(groovy: GroovyFrontEnd) -> None:
    tree = groovy.parse("class Plain {}\n")

    assert tree.first("class_definition") is not None, (
        "the Groovy grammar in use does not emit class_definition nodes"
    )


class _CommandGrammar:
    """Stands in for a grammar that parses every statement as a generic command."""

    def parse(self, source: str) -> Node:
        return Node(kind="source_file", text=source, children=(Node(kind="command", text=source),))


def test_foreign_grammar_vocabulary_fails_fast() -> None:
    front_end = GroovyFrontEnd(grammar=_CommandGrammar())  # type: ignore[arg-type]

    with pytest.raises(RuntimeError, match="class_definition"):
        front_end.parse("class Bar extends Foo {}\n")
