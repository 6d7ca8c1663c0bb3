"""Tests for the Java adapter: remap pass, groovify pass and real parses."""

from __future__ import annotations

import pytest

from polydoc.frontends import JavaFrontEnd, ParseError
from polydoc.frontends.java import JAVA_TOKEN_NAMES, groovify, java_to_groovy
from polydoc.frontends.tree import Node, keyword, walk


@pytest.fixture(scope="module")
def java() -> JavaFrontEnd:
    return JavaFrontEnd()


def _class(*members: Node, words=("class",), name: str = "Foo") -> Node:
    return Node(
        kind="class_definition",
        children=(
            *(keyword(word) for word in words),
            Node(kind="identifier", text=name, field="name"),
            Node(kind="closure", field="body", children=members),
        ),
    )


def _access(node: Node) -> list:
    return [child.text for child in node.children if child.kind in {"access_modifier", "annotation"}]


def test_remap_table_targets_groovy_vocabulary() -> None:
    assert JAVA_TOKEN_NAMES["program"] == "source_file"
    assert JAVA_TOKEN_NAMES["class_declaration"] == "class_definition"
    assert JAVA_TOKEN_NAMES["formal_parameters"] == "parameter_list"

    tree = Node(kind="program", children=(Node(kind="class_declaration", children=(Node(kind="class_body"),)),))
    mapped = java_to_groovy(tree)

    assert [node.kind for node in walk(mapped)] == ["source_file", "class_definition", "closure"]


def test_groovify_splits_multi_declarator_fields() -> None:
    declaration = Node(
        kind="declaration",
        text="int a, b[];",
        children=(
            Node(kind="builtintype", text="int", field="type"),
            Node(kind="variable_declarator", field="declarator", children=(Node(kind="identifier", text="a", field="name"),)),
            Node(
                kind="variable_declarator",
                field="declarator",
                children=(Node(kind="identifier", text="b", field="name"), Node(kind="dimensions", text="[]")),
            ),
        ),
    )

    result = groovify(Node(kind="source_file", children=(_class(declaration),)))
    body = result.children[0].child("body")
    first, second = body.children_of("declaration")

    assert first.child("name").text == "a"
    assert first.child("type").text == "int"
    assert second.child("name").text == "b"
    assert second.child("type").text == "int[]"
    assert _access(first) == ["@PackageScope"]
    assert _access(second) == ["@PackageScope"]


def test_groovify_drops_implied_public_and_keeps_field_public() -> None:
    method = Node(
        kind="function_definition",
        children=(
            Node(kind="modifiers", children=(keyword("public"), keyword("static"))),
            Node(kind="builtintype", text="void", field="type"),
            Node(kind="identifier", text="run", field="name"),
            Node(kind="parameter_list", field="parameters"),
            Node(kind="closure", field="body"),
        ),
    )
    field = Node(
        kind="declaration",
        children=(
            Node(kind="modifiers", children=(keyword("public"),)),
            Node(kind="builtintype", text="int", field="type"),
            Node(kind="identifier", text="count", field="name"),
        ),
    )
    cls = Node(
        kind="class_definition",
        children=(
            Node(kind="modifiers", children=(keyword("public"),)),
            keyword("class"),
            Node(kind="identifier", text="Foo", field="name"),
            Node(kind="closure", field="body", children=(method, field)),
        ),
    )

    result = groovify(cls)
    new_method, new_field = result.child("body").children

    assert _access(result) == []
    assert _access(new_method) == []
    assert [child.text for child in new_method.children if child.kind == "modifier"] == ["static"]
    assert _access(new_field) == ["public"]


def test_groovify_marks_bodiless_interface_methods() -> None:
    method = Node(
        kind="function_definition",
        children=(
            Node(kind="builtintype", text="double", field="type"),
            Node(kind="identifier", text="area", field="name"),
            Node(kind="parameter_list", field="parameters"),
        ),
    )

    result = groovify(_class(method, words=("interface",), name="Shape"))
    (declared,) = result.child("body").children

    assert declared.kind == "function_declaration"
    assert _access(declared) == []


def test_java_parse_translates_access_and_heritage(java: JavaFrontEnd) -> None:
    tree = java.parse(
        """
package pkg.a;

import java.util.List;

/** A greeter. */
public class Foo extends Base implements Runnable, Comparable<Foo> {
    public static final int MAX = 3;
    int count, totals[];
    private String name;

    public Foo(String name) { this.name = name; }

    /** Runs. */
    public void run() {}

    protected List<String> names(String... prefixes) { return null; }
}
"""
    )

    assert tree.kind == "source_file"
    assert tree.first("groovy_package") is not None
    assert tree.first("groovy_import") is not None
    assert tree.first("groovy_doc").text == "/** A greeter. */"

    cls = tree.first("class_definition")
    assert cls.child("name").text == "Foo"
    assert _access(cls) == []
    assert [child.text for child in cls.children if child.field == "superclass"] == ["Base"]
    assert [child.text for child in cls.children if child.field == "interfaces"] == [
        "Runnable",
        "Comparable<Foo>",
    ]

    body = cls.child("body")
    declarations = body.children_of("declaration")
    assert [decl.child("name").text for decl in declarations] == ["MAX", "count", "totals", "name"]
    assert [_access(decl) for decl in declarations] == [
        ["public"],
        ["@PackageScope"],
        ["@PackageScope"],
        ["private"],
    ]
    assert declarations[2].child("type").text == "int[]"

    methods = body.children_of("function_definition")
    assert [_access(method) for method in methods] == [[], [], ["protected"]]
    spread = methods[2].child("parameters").first("parameter")
    assert spread.child("type").text == "String..."
    assert spread.child("name").text == "prefixes"


def test_java_parse_gives_enum_constructor_private(java: JavaFrontEnd) -> None:
    tree = java.parse("enum Color {\n    RED, GREEN;\n    Color() {}\n    int code() { return 1; }\n}\n")

    cls = tree.first("class_definition")
    body = cls.child("body")
    constructor, method = body.children_of("function_definition")

    assert _access(cls) == ["@PackageScope"]
    assert len(body.children_of("enum_constant")) == 2
    assert _access(constructor) == ["private"]
    assert _access(method) == ["@PackageScope"]


def test_java_parse_failure_raises_parse_error(java: JavaFrontEnd) -> None:
    with pytest.raises(ParseError) as excinfo:
        java.parse("public class Bad { void broken( { }\n")

    assert excinfo.value.line is not None
    assert excinfo.value.category in {"grammar", "token-stream"}


def test_java_parse_translates_unicode_escapes_first(java: JavaFrontEnd) -> None:
    tree = java.parse("class \\u0041pple {}\n")

    assert tree.first("class_definition").child("name").text == "Apple"
