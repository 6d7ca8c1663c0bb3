"""Tests for polydoc.assembler."""

from __future__ import annotations

import pytest

from polydoc.assembler import ClassDocAssembler, clean_comment
from polydoc.frontends import JavaFrontEnd
from polydoc.frontends.tree import Node, keyword
from polydoc.models import LinkArgument


@pytest.fixture(scope="module")
def java() -> JavaFrontEnd:
    return JavaFrontEnd()


def _identifier(text: str, field: str) -> Node:
    return Node(kind="identifier", text=text, field=field)


def _person_tree() -> Node:
    greet = Node(
        kind="function_definition",
        line=5,
        children=(
            keyword("def", field="type"),
            _identifier("greet", "function"),
            Node(
                kind="parameter_list",
                field="parameters",
                children=(
                    Node(
                        kind="parameter",
                        children=(
                            _identifier("String", "type"),
                            _identifier("who", "name"),
                            Node(kind="string", text="'world'", field="value"),
                        ),
                    ),
                ),
            ),
            Node(kind="closure", field="body"),
        ),
    )
    constructor = Node(
        kind="function_definition",
        children=(
            _identifier("Person", "function"),
            Node(kind="parameter_list", field="parameters"),
            Node(kind="closure", field="body"),
        ),
    )
    body = Node(
        kind="closure",
        field="body",
        children=(
            Node(kind="declaration", children=(_identifier("String", "type"), _identifier("name", "name"))),
            Node(
                kind="declaration",
                children=(
                    Node(kind="access_modifier", text="private"),
                    Node(kind="builtintype", text="int", field="type"),
                    _identifier("age", "name"),
                ),
            ),
            Node(kind="groovy_doc", text="/** Says hello. */"),
            greet,
            constructor,
        ),
    )
    person = Node(
        kind="class_definition",
        line=4,
        children=(keyword("class"), _identifier("Person", "name"), keyword("extends"), _identifier("Base", "superclass"), body),
    )
    return Node(
        kind="source_file",
        children=(
            Node(kind="groovy_package", text="package people"),
            Node(kind="groovy_import", text="import lib.Base"),
            Node(kind="groovy_doc", text="/**\n * A person.\n */"),
            person,
        ),
    )


def test_clean_comment_strips_delimiters_and_star_column() -> None:
    text = "/**\n * Line one.\n *\n * Line two.\n */"
    assert clean_comment(text) == "Line one.\n\nLine two."
    assert clean_comment("/** Short. */") == "Short."


def test_groovy_class_members() -> None:
    link = LinkArgument(href="https://example.org/api/", packages=["lib."])
    docs = ClassDocAssembler("people", "people/Person.groovy", links=[link]).assemble(_person_tree())

    assert list(docs) == ["people.Person"]
    person = docs["people.Person"]
    assert person.comment == "A person."
    assert person.superclass.name == "Base"
    assert person.imports == ["lib.Base"]
    assert person.links == [link]
    assert person.line == 4
    assert [prop.name for prop in person.properties] == ["name"]
    assert person.properties[0].type.name == "String"
    assert [f.name for f in person.fields] == ["age"]
    assert [c.name for c in person.constructors] == ["Person"]

    (greet,) = person.methods
    assert greet.name == "greet"
    assert greet.type is None
    assert greet.comment == "Says hello."
    assert greet.line == 5
    assert [(p.name, p.type.name, p.default) for p in greet.parameters] == [("who", "String", "'world'")]


def test_scope_option_filters_members() -> None:
    docs = ClassDocAssembler("people", "people/Person.groovy", options={"scope": "public"}).assemble(_person_tree())

    person = docs["people.Person"]
    assert [f.name for f in person.fields] == []
    assert [p.name for p in person.properties] == ["name"]


def test_unknown_scope_is_rejected() -> None:
    with pytest.raises(ValueError):
        ClassDocAssembler("p", "p/A.groovy", options={"scope": "friends"}).assemble(_person_tree())


def _script_tree() -> Node:
    helper = Node(
        kind="function_definition",
        children=(keyword("def", field="type"), _identifier("helper", "function"), Node(kind="parameter_list", field="parameters")),
    )
    return Node(kind="source_file", children=(helper, Node(kind="expression_statement", text="helper()")))


def test_top_level_code_becomes_script() -> None:
    docs = ClassDocAssembler("scripts", "scripts/run_me.groovy").assemble(_script_tree())

    script = docs["scripts.run_me"]
    assert script.kind == "script"
    assert [m.name for m in script.methods] == ["helper", "main", "run"]


def test_script_options() -> None:
    without_main = ClassDocAssembler(
        "scripts", "scripts/run_me.groovy", options={"include_main_for_scripts": "false"}
    ).assemble(_script_tree())
    assert [m.name for m in without_main["scripts.run_me"].methods] == ["helper"]

    skipped = ClassDocAssembler("scripts", "scripts/run_me.groovy", options={"process_scripts": False}).assemble(
        _script_tree()
    )
    assert skipped == {}


def test_java_class_from_source(java: JavaFrontEnd) -> None:
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
    docs = ClassDocAssembler("pkg/a", "pkg/a/Foo.java", language="java").assemble(tree)

    foo = docs["pkg.a.Foo"]
    assert foo.language == "java"
    assert foo.kind == "class"
    assert foo.comment == "A greeter."
    assert foo.visibility == "public"
    assert foo.imports == ["java.util.List"]
    assert foo.superclass.name == "Base"
    assert [ref.name for ref in foo.interfaces] == ["Runnable", "Comparable<Foo>"]

    assert [f.name for f in foo.fields] == ["MAX", "count", "totals", "name"]
    assert [f.visibility for f in foo.fields] == ["public", "package", "package", "private"]
    assert foo.fields[0].modifiers == ["public", "static", "final"]
    assert foo.fields[2].type.name == "int[]"
    assert foo.properties == []

    (constructor,) = foo.constructors
    assert [(p.name, p.type.name) for p in constructor.parameters] == [("name", "String")]

    run, names = foo.methods
    assert run.comment == "Runs."
    assert run.type.name == "void"
    assert names.visibility == "protected"
    assert names.type.name == "List<String>"
    assert names.parameters[0].type.name == "String..."


def test_java_interface_and_nested_types(java: JavaFrontEnd) -> None:
    tree = java.parse(
        """
public interface Shape extends Comparable<Shape> {
    int SIDES = 0;
    double area();
    default String label() { return "shape"; }
    class Unit {}
}
"""
    )
    docs = ClassDocAssembler("geo", "geo/Shape.java", language="java").assemble(tree)

    assert list(docs) == ["geo.Shape", "geo.Shape.Unit"]
    shape = docs["geo.Shape"]
    assert shape.kind == "interface"
    assert shape.superclass is None
    assert [ref.name for ref in shape.interfaces] == ["Comparable<Shape>"]
    assert shape.fields[0].modifiers == ["public", "static", "final"]
    area, label = shape.methods
    assert "abstract" in area.modifiers
    assert "abstract" not in label.modifiers
    assert "static" in docs["geo.Shape.Unit"].modifiers


def test_java_enum(java: JavaFrontEnd) -> None:
    tree = java.parse("enum Color {\n    RED, GREEN;\n    Color() {}\n    int code() { return 1; }\n}\n")
    docs = ClassDocAssembler("paint", "paint/Color.java", language="java").assemble(tree)

    color = docs["paint.Color"]
    assert color.kind == "enum"
    assert color.visibility == "package"
    assert [c.name for c in color.enum_constants] == ["RED", "GREEN"]
    assert color.enum_constants[0].type.name == "Color"
    assert color.constructors[0].modifiers == ["private"]
    assert [m.name for m in color.methods] == ["code"]


def test_java_file_never_becomes_script(java: JavaFrontEnd) -> None:
    tree = java.parse("package empty;\n")
    assert ClassDocAssembler("empty", "empty/Nothing.java", language="java").assemble(tree) == {}
