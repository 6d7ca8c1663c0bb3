"""Documentation model shared by the assembler, the root builder and renderers.

A run owns exactly one :class:`RootDocument`. Package documents and the flat
class index hold references to the same :class:`ClassDocument` objects, so a
link established by :meth:`RootDocument.resolve` is visible from both.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional

DEFAULT_PACKAGE = "DefaultPackage"

# Packages whose types are visible without an import in Groovy sources (a
# superset of the Java default).
DEFAULT_IMPORTS = (
    "java.lang",
    "java.util",
    "java.io",
    "java.net",
    "groovy.lang",
    "groovy.util",
)

_GENERICS_PATTERN = re.compile(r"<.*>", re.DOTALL)


class DocumentSealedError(RuntimeError):
    """Raised when a resolved root document is mutated."""


class DocumentState(str, Enum):
    EMPTY = "empty"
    ACCUMULATING = "accumulating"
    RESOLVED = "resolved"


@dataclass
class LinkArgument:
    """External documentation target for a set of package prefixes."""

    href: str
    packages: List[str] = field(default_factory=list)


def package_name(package_path: str) -> str:
    """Return the dotted package name for a ``/`` separated package path."""
    if not package_path or package_path == DEFAULT_PACKAGE:
        return ""
    return package_path.strip("/").replace("/", ".")


def qualify(package_path: str, name: str) -> str:
    """Return the fully-qualified class name for ``name`` in ``package_path``."""
    prefix = package_name(package_path)
    return f"{prefix}.{name}" if prefix else name


@dataclass
class ClassRef:
    """A by-name reference to a class, linked to its document by ``resolve()``."""

    name: str
    target: Optional["ClassDocument"] = field(default=None, compare=False, repr=False)

    @property
    def lookup_name(self) -> str:
        """The referenced type name without generics or array suffixes."""
        base = _GENERICS_PATTERN.sub("", self.name)
        base = base.replace("...", "").replace("[]", "")
        return "".join(base.split())

    @property
    def is_resolved(self) -> bool:
        return self.target is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "target": self.target.qualified_name if self.target is not None else None,
        }


@dataclass
class ParameterDocument:
    name: str
    type: Optional[ClassRef] = None
    default: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.to_dict() if self.type else None,
            "default": self.default,
        }


@dataclass
class MemberDocument:
    """Constructor, method, field, property or enum constant of a class."""

    name: str
    kind: str
    comment: str = ""
    modifiers: List[str] = field(default_factory=list)
    annotations: List[str] = field(default_factory=list)
    type: Optional[ClassRef] = None
    parameters: List[ParameterDocument] = field(default_factory=list)
    line: int = 0

    @property
    def visibility(self) -> str:
        return _visibility(self.modifiers, self.annotations)

    def refs(self) -> Iterator[ClassRef]:
        if self.type is not None:
            yield self.type
        for parameter in self.parameters:
            if parameter.type is not None:
                yield parameter.type

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "comment": self.comment,
            "modifiers": list(self.modifiers),
            "annotations": list(self.annotations),
            "type": self.type.to_dict() if self.type else None,
            "parameters": [parameter.to_dict() for parameter in self.parameters],
            "line": self.line,
        }


@dataclass
class ClassDocument:
    """Per-class documentation record produced by the assembler."""

    name: str
    package_path: str
    kind: str = "class"
    language: str = "groovy"
    source_file: str = ""
    comment: str = ""
    modifiers: List[str] = field(default_factory=list)
    annotations: List[str] = field(default_factory=list)
    superclass: Optional[ClassRef] = None
    interfaces: List[ClassRef] = field(default_factory=list)
    constructors: List[MemberDocument] = field(default_factory=list)
    methods: List[MemberDocument] = field(default_factory=list)
    fields: List[MemberDocument] = field(default_factory=list)
    properties: List[MemberDocument] = field(default_factory=list)
    enum_constants: List[MemberDocument] = field(default_factory=list)
    imports: List[str] = field(default_factory=list)
    links: List[LinkArgument] = field(default_factory=list)
    line: int = 0
    subclasses: List[str] = field(default_factory=list)
    implementors: List[str] = field(default_factory=list)

    @property
    def qualified_name(self) -> str:
        return qualify(self.package_path, self.name)

    @property
    def package_name(self) -> str:
        return package_name(self.package_path)

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def is_interface(self) -> bool:
        return self.kind in {"interface", "annotation"}

    @property
    def visibility(self) -> str:
        return _visibility(self.modifiers, self.annotations)

    def members(self) -> Iterator[MemberDocument]:
        yield from self.constructors
        yield from self.methods
        yield from self.fields
        yield from self.properties
        yield from self.enum_constants

    def refs(self) -> Iterator[ClassRef]:
        """Every deferred class reference held by this document."""
        if self.superclass is not None:
            yield self.superclass
        yield from self.interfaces
        for member in self.members():
            yield from member.refs()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "qualified_name": self.qualified_name,
            "package": self.package_path,
            "kind": self.kind,
            "language": self.language,
            "source_file": self.source_file,
            "comment": self.comment,
            "modifiers": list(self.modifiers),
            "annotations": list(self.annotations),
            "superclass": self.superclass.to_dict() if self.superclass else None,
            "interfaces": [ref.to_dict() for ref in self.interfaces],
            "constructors": [member.to_dict() for member in self.constructors],
            "methods": [member.to_dict() for member in self.methods],
            "fields": [member.to_dict() for member in self.fields],
            "properties": [member.to_dict() for member in self.properties],
            "enum_constants": [member.to_dict() for member in self.enum_constants],
            "subclasses": list(self.subclasses),
            "implementors": list(self.implementors),
            "line": self.line,
        }


@dataclass
class PackageDocument:
    """Per-package aggregate of class documents and description text."""

    path: str
    description: str = ""
    classes: Dict[str, ClassDocument] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return package_name(self.path)

    def class_named(self, name: str) -> Optional[ClassDocument]:
        return self.classes.get(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "description": self.description,
            "classes": sorted(doc.qualified_name for doc in self.classes.values()),
        }


class RootDocument:
    """Top-level aggregate for a run: packages plus a flat class index.

    The document moves from ``EMPTY`` to ``ACCUMULATING`` on the first
    mutation and to ``RESOLVED`` when :meth:`resolve` runs. A resolved
    document rejects further mutation.
    """

    def __init__(self, name: str = "root") -> None:
        self.name = name
        self.packages: Dict[str, PackageDocument] = {}
        self.classes: Dict[str, ClassDocument] = {}
        self.state = DocumentState.EMPTY

    @property
    def is_resolved(self) -> bool:
        return self.state is DocumentState.RESOLVED

    def package_named(self, path: str) -> Optional[PackageDocument]:
        return self.packages.get(path)

    def class_named(self, qualified_name: str) -> Optional[ClassDocument]:
        return self.classes.get(qualified_name)

    def put_package(self, package: PackageDocument) -> None:
        self._begin_mutation()
        existing = self.packages.get(package.path)
        if existing is not None and existing is not package:
            raise ValueError(f"Package {package.path!r} is already registered")
        self.packages[package.path] = package

    def set_description(self, package: PackageDocument, description: str) -> None:
        self._begin_mutation()
        package.description = description
        self.put_package(package)

    def put_classes(
        self,
        package: PackageDocument,
        class_docs: Mapping[str, ClassDocument],
        *,
        keep_existing: bool = False,
    ) -> List[str]:
        """Fold one file's classes into both indices.

        Returns the qualified names that were already present. Existing
        entries are overwritten unless ``keep_existing`` is set.
        """
        self._begin_mutation()
        for qualified_name, doc in class_docs.items():
            if doc.package_path != package.path:
                raise ValueError(
                    f"Class {qualified_name!r} belongs to {doc.package_path!r}, not {package.path!r}"
                )
        collisions: List[str] = []
        for qualified_name, doc in class_docs.items():
            if qualified_name in self.classes:
                collisions.append(qualified_name)
                if keep_existing:
                    continue
            self.classes[qualified_name] = doc
            package.classes[doc.name] = doc
        self.put_package(package)
        return collisions

    def resolve(self) -> None:
        """Link every deferred class reference; later calls are no-ops."""
        if self.state is DocumentState.RESOLVED:
            return
        for doc in self.classes.values():
            doc.subclasses.clear()
            doc.implementors.clear()
        for doc in self.classes.values():
            heritage = [doc.superclass, *doc.interfaces]
            for ref in doc.refs():
                ref.target = self._lookup(doc, ref, allow_self=not any(ref is own for own in heritage))
            if doc.superclass is not None and doc.superclass.target is not None:
                doc.superclass.target.subclasses.append(doc.qualified_name)
            for ref in doc.interfaces:
                if ref.target is not None:
                    ref.target.implementors.append(doc.qualified_name)
        for doc in self.classes.values():
            doc.subclasses.sort()
            doc.implementors.sort()
        self.state = DocumentState.RESOLVED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "state": self.state.value,
            "packages": {path: pkg.to_dict() for path, pkg in sorted(self.packages.items())},
            "classes": {name: doc.to_dict() for name, doc in sorted(self.classes.items())},
        }

    def _begin_mutation(self) -> None:
        if self.state is DocumentState.RESOLVED:
            raise DocumentSealedError("Root document has been resolved and can no longer change")
        self.state = DocumentState.ACCUMULATING

    def _lookup(
        self, owner: ClassDocument, ref: ClassRef, *, allow_self: bool = True
    ) -> Optional[ClassDocument]:
        for candidate in _candidate_names(owner, ref.lookup_name):
            found = self.classes.get(candidate)
            if found is not None and (allow_self or found is not owner):
                return found
        return None


def _candidate_names(owner: ClassDocument, name: str) -> Iterator[str]:
    if not name:
        return
    if "." in name:
        yield name
    package = owner.package_name

    def _in_package(relative: str) -> str:
        return f"{package}.{relative}" if package else relative

    # Nested types visible from the owner and each enclosing type.
    outer_parts = owner.name.split(".")
    for index in range(len(outer_parts), 0, -1):
        yield _in_package(".".join(outer_parts[:index] + [name]))
    yield _in_package(name)

    head, _, rest = name.partition(".")
    suffix = f".{rest}" if rest else ""
    for entry in owner.imports:
        target, _, alias = entry.partition(" as ")
        target = target.strip()
        if target.endswith(".*"):
            continue
        local = alias.strip() or target.rsplit(".", 1)[-1]
        if local == head:
            yield target + suffix
    for entry in owner.imports:
        if entry.endswith(".*"):
            yield f"{entry[:-2]}.{name}"
    for default in DEFAULT_IMPORTS:
        yield f"{default}.{name}"


def _visibility(modifiers: List[str], annotations: List[str]) -> str:
    for level in ("public", "protected", "private"):
        if level in modifiers:
            return level
    if "PackageScope" in annotations:
        return "package"
    return "public"


__all__ = [
    "ClassDocument",
    "ClassRef",
    "DEFAULT_IMPORTS",
    "DEFAULT_PACKAGE",
    "DocumentSealedError",
    "DocumentState",
    "LinkArgument",
    "MemberDocument",
    "PackageDocument",
    "ParameterDocument",
    "RootDocument",
    "package_name",
    "qualify",
]
