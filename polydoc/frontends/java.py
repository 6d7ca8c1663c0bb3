"""Secondary front end: Java sources adapted to the Groovy tree vocabulary.

Parsing happens in three steps. The Java grammar produces a tree in Java
vocabulary, :func:`java_to_groovy` renames node kinds one for one through
:data:`JAVA_TOKEN_NAMES`, and :func:`groovify` restructures the constructs
Groovy spells differently. Only then does the tree reach the assembler.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from .base import FrontEnd
from .tree import KEYWORD, Node, remap, rewrite
from .tree_sitter import TreeSitterGrammar

JAVA_TOKEN_NAMES: Dict[str, str] = {
    "program": "source_file",
    "package_declaration": "groovy_package",
    "import_declaration": "groovy_import",
    "class_declaration": "class_definition",
    "interface_declaration": "class_definition",
    "enum_declaration": "class_definition",
    "annotation_type_declaration": "class_definition",
    "record_declaration": "class_definition",
    "class_body": "closure",
    "interface_body": "closure",
    "enum_body": "closure",
    "annotation_type_body": "closure",
    "constructor_body": "closure",
    "block": "closure",
    "method_declaration": "function_definition",
    "constructor_declaration": "function_definition",
    "annotation_type_element_declaration": "function_declaration",
    "field_declaration": "declaration",
    "constant_declaration": "declaration",
    "formal_parameters": "parameter_list",
    "formal_parameter": "parameter",
    "marker_annotation": "annotation",
    "line_comment": "comment",
    "block_comment": "comment",
    "type_identifier": "identifier",
    "scoped_identifier": "qualified_name",
    "scoped_type_identifier": "qualified_name",
    "integral_type": "builtintype",
    "floating_point_type": "builtintype",
    "boolean_type": "builtintype",
    "void_type": "builtintype",
}

ACCESS_MODIFIERS = ("public", "protected", "private")
PACKAGE_SCOPE = "PackageScope"

_MODIFIER_KINDS = ("access_modifier", "modifier", "annotation")


def java_to_groovy(tree: Node, token_names: Mapping[str, str] = JAVA_TOKEN_NAMES) -> Node:
    """Structural pass: rename Java node kinds to their Groovy counterparts."""
    return remap(tree, token_names)


def groovify(tree: Node) -> Node:
    """Idiom pass: rewrite Java-only constructs into their Groovy equivalents."""
    return rewrite(tree, _groovify_rule)


class JavaFrontEnd(FrontEnd):
    language = "java"

    def __init__(
        self,
        grammar: Optional[TreeSitterGrammar] = None,
        token_names: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._grammar = grammar or TreeSitterGrammar(
            "java", callable_kinds={"method_declaration", "constructor_declaration"}
        )
        self._token_names = dict(JAVA_TOKEN_NAMES if token_names is None else token_names)

    def parse(self, source: str) -> Node:
        tree = self._grammar.parse(source)
        return groovify(java_to_groovy(tree, self._token_names))


def _groovify_rule(node: Node, ancestors: Tuple[Node, ...]) -> Sequence[Node]:
    handler = _RULES.get(node.kind)
    if handler is None:
        return (node,)
    return handler(node, ancestors)


def _splice(node: Node, ancestors: Tuple[Node, ...]) -> Sequence[Node]:
    return node.children


def _flatten_modifiers(node: Node, ancestors: Tuple[Node, ...]) -> Sequence[Node]:
    flattened: List[Node] = []
    for child in node.children:
        if child.kind == KEYWORD:
            kind = "access_modifier" if child.text in ACCESS_MODIFIERS else "modifier"
            flattened.append(Node(kind=kind, text=child.text, line=child.line))
        else:
            flattened.append(child)
    return flattened


def _heritage(field: str) -> Callable[[Node, Tuple[Node, ...]], Sequence[Node]]:
    def _rule(node: Node, ancestors: Tuple[Node, ...]) -> Sequence[Node]:
        return [
            child if child.kind == KEYWORD else replace(child, field=field)
            for child in node.children
        ]

    return _rule


def _doc_comment(node: Node, ancestors: Tuple[Node, ...]) -> Sequence[Node]:
    text = node.text.lstrip()
    if text.startswith("/**") and text != "/**/":
        return (replace(node, kind="groovy_doc"),)
    return (node,)


def _type_definition(node: Node, ancestors: Tuple[Node, ...]) -> Sequence[Node]:
    if _definition_kind(node) == "record":
        node = _record_components_to_properties(node)
    return (_apply_access(node, ancestors, keep_public=False),)


def _method(node: Node, ancestors: Tuple[Node, ...]) -> Sequence[Node]:
    if node.kind == "function_definition" and node.child("body") is None:
        node = replace(node, kind="function_declaration")
    return (_apply_access(node, ancestors, keep_public=False),)


def _declaration(node: Node, ancestors: Tuple[Node, ...]) -> Sequence[Node]:
    declarators = node.children_of("variable_declarator")
    if not declarators:
        return (_apply_access(node, ancestors, keep_public=True),)
    type_node = node.child("type")
    shared = [child for child in node.children if child.kind != "variable_declarator"]
    results = []
    for declarator in declarators:
        dimensions = declarator.first("dimensions")
        own_type = type_node
        if type_node is not None and dimensions is not None:
            own_type = _with_dimensions(type_node, dimensions)
        parts = [own_type if child is type_node else child for child in shared]
        parts.extend(child for child in declarator.children if child.kind != "dimensions")
        split = replace(node, children=tuple(part for part in parts if part is not None))
        results.append(_apply_access(split, ancestors, keep_public=True))
    return results


def _parameter(node: Node, ancestors: Tuple[Node, ...]) -> Sequence[Node]:
    dimensions = node.first("dimensions")
    type_node = node.child("type")
    if dimensions is None or type_node is None:
        return (node,)
    children = tuple(
        _with_dimensions(child, dimensions) if child is type_node else child
        for child in node.children
        if child is not dimensions
    )
    return (replace(node, children=children),)


def _spread_parameter(node: Node, ancestors: Tuple[Node, ...]) -> Sequence[Node]:
    modifiers = [child for child in node.children if child.kind in _MODIFIER_KINDS]
    declarator = node.first("variable_declarator")
    type_node = next(
        (
            child
            for child in node.children
            if child.kind not in _MODIFIER_KINDS + (KEYWORD, "variable_declarator")
        ),
        None,
    )
    children: List[Node] = list(modifiers)
    if type_node is not None:
        children.append(replace(type_node, text=f"{type_node.text}...", field="type"))
    if declarator is not None:
        name = declarator.child("name") or declarator.first("identifier")
        if name is not None:
            children.append(replace(name, field="name"))
    return (replace(node, kind="parameter", children=tuple(children)),)


_RULES: Dict[str, Callable[[Node, Tuple[Node, ...]], Sequence[Node]]] = {
    "modifiers": _flatten_modifiers,
    "superclass": _heritage("superclass"),
    "super_interfaces": _heritage("interfaces"),
    "extends_interfaces": _heritage("interfaces"),
    "type_list": _splice,
    "enum_body_declarations": _splice,
    "comment": _doc_comment,
    "class_definition": _type_definition,
    "function_definition": _method,
    "function_declaration": _method,
    "declaration": _declaration,
    "parameter": _parameter,
    "spread_parameter": _spread_parameter,
}


def _definition_kind(node: Optional[Node]) -> Optional[str]:
    if node is None:
        return None
    for word in node.keywords():
        if word == "@interface":
            return "annotation"
        if word in {"interface", "enum", "record", "class"}:
            return word
    return "class"


def _enclosing_type(ancestors: Tuple[Node, ...]) -> Optional[Node]:
    chain = [node for node in ancestors if node.kind != "enum_body_declarations"]
    if len(chain) >= 2 and chain[-1].kind == "closure" and chain[-2].kind == "class_definition":
        return chain[-2]
    return None


def _apply_access(node: Node, ancestors: Tuple[Node, ...], *, keep_public: bool) -> Node:
    """Translate Java access defaults into Groovy ones.

    Groovy makes types and methods public by default and turns an unmarked
    field into a property, so ``public`` disappears where it is implied and
    Java's package-private default becomes ``@PackageScope``.
    """
    owner_kind = _definition_kind(_enclosing_type(ancestors))
    implicit_public = owner_kind in {"interface", "annotation"}
    children = list(node.children)
    access = [child for child in children if child.kind == "access_modifier"]

    if implicit_public or not keep_public:
        children = [
            child
            for child in children
            if not (child.kind == "access_modifier" and child.text == "public")
        ]
    if access or implicit_public:
        return replace(node, children=tuple(children))

    is_constructor = node.kind == "function_definition" and node.child("type") is None
    if owner_kind == "enum" and is_constructor:
        marker = Node(kind="access_modifier", text="private", line=node.line)
    else:
        marker = Node(
            kind="annotation",
            text=f"@{PACKAGE_SCOPE}",
            line=node.line,
            children=(Node(kind="identifier", text=PACKAGE_SCOPE, field="name", line=node.line),),
        )
    return replace(node, children=(marker, *children))


def _with_dimensions(type_node: Node, dimensions: Node) -> Node:
    suffix = "".join(dimensions.text.split())
    return replace(type_node, kind="array_type", text=f"{type_node.text}{suffix}", children=())


def _record_components_to_properties(node: Node) -> Node:
    components = node.child("parameters")
    body = node.child("body")
    if components is None or body is None:
        return node
    properties = tuple(
        Node(
            kind="declaration",
            text=parameter.text,
            line=parameter.line,
            children=tuple(child for child in parameter.children if child.kind not in _MODIFIER_KINDS),
        )
        for parameter in components.children_of("parameter")
    )
    new_body = replace(body, children=properties + body.children)
    children = tuple(
        new_body if child is body else child for child in node.children if child is not components
    )
    return replace(node, children=children)


__all__ = ["JAVA_TOKEN_NAMES", "JavaFrontEnd", "groovify", "java_to_groovy"]
