"""Builds class documentation records from a normalized tree."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .config import DOCUMENTATION_SCOPES
from .frontends.tree import KEYWORD, Node
from .logging import get_logger
from .models import ClassDocument, ClassRef, LinkArgument, MemberDocument, ParameterDocument

CLASS_KINDS = frozenset(
    {
        "class_definition",
        "class_declaration",
        "interface_definition",
        "interface_declaration",
        "enum_definition",
        "enum_declaration",
        "trait_definition",
    }
)
METHOD_KINDS = frozenset({"function_definition", "function_declaration", "method_declaration"})
FIELD_KINDS = frozenset({"declaration", "field_declaration"})
BODY_KINDS = frozenset({"closure", "class_body", "block"})
PARAMETER_KINDS = frozenset({"parameter", "formal_parameter"})
IMPORT_KINDS = frozenset({"groovy_import", "import_declaration"})
PACKAGE_KINDS = frozenset({"groovy_package", "package_declaration"})
COMMENT_KINDS = frozenset({"comment", "groovy_doc"})
ANNOTATION_KINDS = frozenset({"annotation", "marker_annotation"})
MODIFIER_KINDS = frozenset({"access_modifier", "modifier", "modifiers"})
NAME_KINDS = frozenset({"identifier", "type_identifier"})

MODIFIER_WORDS = frozenset(
    {
        "public",
        "protected",
        "private",
        "static",
        "final",
        "abstract",
        "synchronized",
        "native",
        "transient",
        "volatile",
        "strictfp",
        "default",
        "sealed",
        "non-sealed",
    }
)

SCOPE_RANKS = {scope: rank for rank, scope in enumerate(DOCUMENTATION_SCOPES)}

_NOT_TYPE_KINDS = (
    COMMENT_KINDS
    | ANNOTATION_KINDS
    | MODIFIER_KINDS
    | BODY_KINDS
    | PARAMETER_KINDS
    | frozenset(
        {KEYWORD, "parameter_list", "formal_parameters", "type_parameters", "dimensions", "throws", "permits"}
    )
)
_ANNOTATION_NAME = re.compile(r"@\s*([\w.]+)")
_COMMENT_LINE_PREFIX = re.compile(r"^\s*(\*(?!/)\s?)?")


class ClassDocAssembler:
    """Walks a normalized tree in source order and records every type it declares.

    ``options`` is the configuration bag of the run. The assembler reads
    ``scope``, ``process_scripts`` and ``include_main_for_scripts`` from it;
    other keys are carried untouched. ``links`` are attached to each record.
    """

    def __init__(
        self,
        package_path: str,
        file_name: str,
        *,
        language: str = "groovy",
        links: Optional[Sequence[LinkArgument]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.package_path = package_path
        self.file_name = file_name
        self.language = language
        self.links = list(links or [])
        self.options = dict(options or {})
        self.logger = get_logger("assembler")
        self._imports: List[str] = []

    @property
    def scope(self) -> str:
        scope = str(self.options.get("scope", "private")).lower()
        if scope not in SCOPE_RANKS:
            raise ValueError(f"Unknown documentation scope: {scope}")
        return scope

    def assemble(self, tree: Node) -> Dict[str, ClassDocument]:
        """Return ``{qualified name: ClassDocument}`` for the file."""
        self._imports = [
            entry
            for entry in (_import_target(node) for node in tree.children_of(*IMPORT_KINDS))
            if entry
        ]
        docs: Dict[str, ClassDocument] = {}
        script_members: List[Tuple[Node, str]] = []
        has_statements = False

        for index, node in enumerate(tree.children):
            if node.kind in CLASS_KINDS:
                self._visit_class(node, _doc_comment(tree.children, index, node), None, docs)
            elif node.kind in METHOD_KINDS:
                script_members.append((node, _doc_comment(tree.children, index, node)))
            elif not _is_declaration_context(node):
                has_statements = True

        if self.language == "groovy" and (script_members or has_statements):
            script = self._script_class(script_members, docs)
            if script is not None:
                docs = {script.qualified_name: script, **docs}

        return self._filter_scope(docs)

    def _visit_class(
        self,
        node: Node,
        comment: str,
        outer: Optional[ClassDocument],
        docs: Dict[str, ClassDocument],
    ) -> None:
        simple_name = _name_of(node)
        if not simple_name:
            self.logger.debug("Skipping anonymous type at %s:%d", self.file_name, node.line)
            return
        kind = _class_kind(node)
        modifiers, annotations = _modifiers_of(node)
        if outer is not None and outer.is_interface and "static" not in modifiers:
            modifiers.append("static")
        doc = ClassDocument(
            name=f"{outer.name}.{simple_name}" if outer else simple_name,
            package_path=self.package_path,
            kind=kind,
            language=self.language,
            source_file=self.file_name,
            comment=comment,
            modifiers=modifiers,
            annotations=annotations,
            imports=list(self._imports),
            links=list(self.links),
            line=node.line,
        )
        doc.superclass, doc.interfaces = _heritage(node, kind)
        docs[doc.qualified_name] = doc

        body = node.child("body") or _last(node.children_of(*BODY_KINDS))
        if body is None:
            return
        for index, member in enumerate(body.children):
            member_comment = _doc_comment(body.children, index, member)
            if member.kind in CLASS_KINDS:
                self._visit_class(member, member_comment, doc, docs)
            elif member.kind in METHOD_KINDS:
                self._visit_method(doc, member, member_comment)
            elif member.kind in FIELD_KINDS:
                self._visit_field(doc, member, member_comment)
            elif member.kind == "enum_constant":
                doc.enum_constants.append(
                    MemberDocument(
                        name=_name_of(member),
                        kind="enum_constant",
                        comment=member_comment,
                        modifiers=["public", "static", "final"],
                        type=ClassRef(doc.name),
                        line=member.line,
                    )
                )

    def _visit_method(self, owner: ClassDocument, node: Node, comment: str) -> None:
        member = self._method_document(node, comment)
        if owner.is_interface and "abstract" not in member.modifiers and node.kind == "function_declaration":
            member.modifiers.append("abstract")
        if member.name == owner.simple_name and member.type is None and not node.has_keyword("def"):
            member.kind = "constructor"
            owner.constructors.append(member)
        else:
            owner.methods.append(member)

    def _method_document(self, node: Node, comment: str) -> MemberDocument:
        modifiers, annotations = _modifiers_of(node)
        name_node = node.child("function") or node.child("name") or _name_before_parameters(node)
        type_node = node.child("type") or _leading_type(node, name_node)
        parameters_node = node.child("parameters") or node.first("parameter_list", "formal_parameters")
        parameters = []
        if parameters_node is not None:
            parameters = [_parameter(child) for child in parameters_node.children_of(*PARAMETER_KINDS)]
        return MemberDocument(
            name=name_node.text if name_node is not None else "",
            kind="method",
            comment=comment,
            modifiers=modifiers,
            annotations=annotations,
            type=_type_ref(type_node),
            parameters=parameters,
            line=node.line,
        )

    def _visit_field(self, owner: ClassDocument, node: Node, comment: str) -> None:
        modifiers, annotations = _modifiers_of(node)
        name_node = node.child("name") or _last_name(node)
        if name_node is None:
            return
        type_node = node.child("type") or _leading_type(node, name_node)
        has_access = any(word in modifiers for word in ("public", "protected", "private"))
        is_property = (
            not has_access
            and "PackageScope" not in annotations
            and not owner.is_interface
        )
        member = MemberDocument(
            name=name_node.text,
            kind="property" if is_property else "field",
            comment=comment,
            modifiers=modifiers,
            annotations=annotations,
            type=_type_ref(type_node),
            line=node.line,
        )
        if owner.is_interface:
            for word in ("public", "static", "final"):
                if word not in member.modifiers:
                    member.modifiers.append(word)
        (owner.properties if is_property else owner.fields).append(member)

    def _script_class(
        self, members: Iterable[Tuple[Node, str]], docs: Mapping[str, ClassDocument]
    ) -> Optional[ClassDocument]:
        if not _as_bool(self.options.get("process_scripts"), default=True):
            return None
        name = PurePosixPath(self.file_name).stem
        if any(doc.name == name for doc in docs.values()):
            return None
        script = ClassDocument(
            name=name,
            package_path=self.package_path,
            kind="script",
            language=self.language,
            source_file=self.file_name,
            superclass=ClassRef("Script"),
            imports=list(self._imports),
            links=list(self.links),
            line=1,
        )
        for node, comment in members:
            script.methods.append(self._method_document(node, comment))
        if _as_bool(self.options.get("include_main_for_scripts"), default=True):
            script.methods.append(
                MemberDocument(
                    name="main",
                    kind="method",
                    modifiers=["public", "static"],
                    type=ClassRef("void"),
                    parameters=[ParameterDocument(name="args", type=ClassRef("String[]"))],
                )
            )
            script.methods.append(
                MemberDocument(name="run", kind="method", modifiers=["public"], type=ClassRef("Object"))
            )
        return script

    def _filter_scope(self, docs: Dict[str, ClassDocument]) -> Dict[str, ClassDocument]:
        minimum = SCOPE_RANKS[self.scope]
        if minimum == 0:
            return docs

        def _visible(visibility: str) -> bool:
            return SCOPE_RANKS[visibility] >= minimum

        kept: Dict[str, ClassDocument] = {}
        for qualified_name, doc in docs.items():
            if not _visible(doc.visibility):
                continue
            doc.constructors = [m for m in doc.constructors if _visible(m.visibility)]
            doc.methods = [m for m in doc.methods if _visible(m.visibility)]
            doc.fields = [m for m in doc.fields if _visible(m.visibility)]
            doc.properties = [m for m in doc.properties if _visible(m.visibility)]
            kept[qualified_name] = doc
        return kept


def clean_comment(text: str) -> str:
    """Strip comment delimiters and the leading ``*`` column of a doc comment."""
    body = text.strip()
    if body.startswith("/**"):
        body = body[3:]
    elif body.startswith("/*"):
        body = body[2:]
    if body.endswith("*/"):
        body = body[:-2]
    lines = [_COMMENT_LINE_PREFIX.sub("", line).rstrip() for line in body.splitlines()]
    return "\n".join(lines).strip()


def _is_doc_comment(node: Node) -> bool:
    if node.kind == "groovy_doc":
        return True
    return node.kind == "comment" and node.text.lstrip().startswith("/**")


def _doc_comment(siblings: Sequence[Node], index: int, node: Node) -> str:
    leading = next((child for child in node.children if child.kind not in COMMENT_KINDS), None)
    for child in node.children:
        if child is leading:
            break
        if _is_doc_comment(child):
            return clean_comment(child.text)
    for previous in reversed(siblings[:index]):
        if _is_doc_comment(previous):
            return clean_comment(previous.text)
        if previous.kind in COMMENT_KINDS or previous.kind in ANNOTATION_KINDS:
            continue
        break
    return ""


def _import_target(node: Node) -> Optional[str]:
    text = " ".join(node.text.split()).rstrip(";").strip()
    if text.startswith("import "):
        text = text[len("import ") :].strip()
    if text.startswith("static "):
        return None
    text = text.replace(" . ", ".").replace(" .", ".").replace(". ", ".")
    return text or None


def _name_of(node: Node) -> str:
    name = node.child("name") or _first_name(node)
    return name.text if name is not None else ""


def _first_name(node: Node) -> Optional[Node]:
    return node.first(*NAME_KINDS)


def _name_before_parameters(node: Node) -> Optional[Node]:
    candidate = None
    for child in node.children:
        if child.kind in {"parameter_list", "formal_parameters"}:
            return candidate
        if child.kind in NAME_KINDS:
            candidate = child
    return candidate or _first_name(node)


def _is_declaration_context(node: Node) -> bool:
    """True for top-level nodes that are not script statements."""
    if node.kind in IMPORT_KINDS | PACKAGE_KINDS | COMMENT_KINDS | ANNOTATION_KINDS | MODIFIER_KINDS:
        return True
    return node.kind in {KEYWORD, "shebang"} or "package" in node.kind or "import" in node.kind


def _last_name(node: Node) -> Optional[Node]:
    names = node.children_of(*NAME_KINDS)
    return names[-1] if names else None


def _last(nodes: List[Node]) -> Optional[Node]:
    return nodes[-1] if nodes else None


def _class_kind(node: Node) -> str:
    words = node.keywords()
    if "@interface" in words:
        return "annotation"
    for word in ("interface", "enum", "trait", "record"):
        if word in words or node.kind.startswith(word):
            return word
    return "class"


def _modifiers_of(node: Node) -> Tuple[List[str], List[str]]:
    modifiers: List[str] = []
    annotations: List[str] = []

    def _collect(children: Iterable[Node]) -> None:
        for child in children:
            if child.kind in ANNOTATION_KINDS:
                match = _ANNOTATION_NAME.match(child.text.strip())
                if match:
                    annotations.append(match.group(1).rsplit(".", 1)[-1])
            elif child.kind == "modifiers":
                _collect(child.children)
                if not child.children:
                    modifiers.extend(w for w in child.text.split() if w in MODIFIER_WORDS)
            elif child.kind in MODIFIER_KINDS:
                modifiers.extend(word for word in child.text.split() if word in MODIFIER_WORDS)
            elif child.kind == KEYWORD and child.text in MODIFIER_WORDS and child.text != "default":
                modifiers.append(child.text)

    _collect(node.children)
    return modifiers, annotations


def _flatten_heritage(children: Iterable[Node]) -> Iterable[Node]:
    for child in children:
        nested = child.children
        if child.kind != KEYWORD and any(
            grand.kind == KEYWORD and grand.text in {"extends", "implements"} for grand in nested
        ):
            yield from _flatten_heritage(nested)
        elif child.kind in {"type_list", "interfaces", "super_interfaces"}:
            yield from _flatten_heritage(nested)
        else:
            yield child


def _heritage(node: Node, kind: str) -> Tuple[Optional[ClassRef], List[ClassRef]]:
    superclass: Optional[ClassRef] = None
    interfaces: List[ClassRef] = []
    clause: Optional[str] = None
    for child in _flatten_heritage(node.children):
        if child.kind == KEYWORD:
            clause = child.text if child.text in {"extends", "implements"} else None
            continue
        if child.kind in BODY_KINDS or child.field == "body":
            break
        if clause is None:
            clause = {"superclass": "extends", "interfaces": "implements"}.get(child.field or "")
            if clause is None:
                continue
        if child.kind in _NOT_TYPE_KINDS:
            continue
        ref = ClassRef(" ".join(child.text.split()))
        if clause == "extends" and kind not in {"interface", "annotation"} and superclass is None:
            superclass = ref
        else:
            interfaces.append(ref)
    return superclass, interfaces


def _leading_type(node: Node, name_node: Optional[Node]) -> Optional[Node]:
    candidate = None
    for child in node.children:
        if child is name_node:
            return candidate
        if child.kind not in _NOT_TYPE_KINDS:
            candidate = child
    return None


def _type_ref(node: Optional[Node]) -> Optional[ClassRef]:
    if node is None:
        return None
    text = " ".join(node.text.split())
    if not text or text == "def":
        return None
    return ClassRef(text)


def _parameter(node: Node) -> ParameterDocument:
    name_node = node.child("name") or _last_name(node)
    type_node = node.child("type") or _leading_type(node, name_node)
    default = node.child("value") or node.child("default")
    return ParameterDocument(
        name=name_node.text if name_node is not None else "",
        type=_type_ref(type_node),
        default=" ".join(default.text.split()) if default is not None else None,
    )


def _as_bool(value: Any, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in {"true", "yes", "1"}:
        return True
    if lowered in {"false", "no", "0"}:
        return False
    return default


__all__ = ["ClassDocAssembler", "clean_comment"]
