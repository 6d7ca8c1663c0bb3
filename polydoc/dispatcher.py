"""Per-file routing between the language front ends and the description path."""

from __future__ import annotations

from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from .assembler import ClassDocAssembler
from .description import DESCRIPTION_FILE_NAME
from .frontends import FrontEnd, GrammarError, create_front_end
from .logging import get_logger
from .models import ClassDocument, LinkArgument

SECONDARY_SUFFIX = ".java"
# Alternate suffix for secondary-language sources used by fixtures.
SECONDARY_ALIAS_SUFFIX = ".sourcefile"

AssemblerFactory = Callable[..., ClassDocAssembler]


class Route(str, Enum):
    SECONDARY = "secondary"
    SECONDARY_ALIAS = "secondary-alias"
    DESCRIPTION = "description"
    PRIMARY = "primary"


def route_for(file_name: str) -> Route:
    """Classify a file purely by its name, in precedence order."""
    name = PurePosixPath(file_name.replace("\\", "/")).name
    if name.endswith(SECONDARY_SUFFIX):
        return Route.SECONDARY
    if name.endswith(SECONDARY_ALIAS_SUFFIX):
        return Route.SECONDARY_ALIAS
    if name == DESCRIPTION_FILE_NAME:
        return Route.DESCRIPTION
    return Route.PRIMARY


class Dispatcher:
    """Selects a front end for each source file and runs the assembler on its tree."""

    def __init__(
        self,
        primary: Optional[FrontEnd] = None,
        secondary: Optional[FrontEnd] = None,
        *,
        links: Optional[Sequence[LinkArgument]] = None,
        options: Optional[Mapping[str, Any]] = None,
        assembler_factory: AssemblerFactory = ClassDocAssembler,
    ) -> None:
        self._primary = primary
        self._secondary = secondary
        self.links = list(links or [])
        self.options = dict(options or {})
        self._assembler_factory = assembler_factory
        self.logger = get_logger("dispatcher")

    @property
    def primary(self) -> FrontEnd:
        if self._primary is None:
            self._primary = create_front_end("groovy")
        return self._primary

    @property
    def secondary(self) -> FrontEnd:
        if self._secondary is None:
            self._secondary = create_front_end("java")
        return self._secondary

    def route(self, file_name: str) -> Route:
        return route_for(file_name)

    def front_end_for(self, file_name: str) -> FrontEnd:
        route = self.route(file_name)
        if route is Route.DESCRIPTION:
            raise ValueError(f"{file_name} is a package description, not a source file")
        if route in (Route.SECONDARY, Route.SECONDARY_ALIAS):
            return self.secondary
        return self.primary

    def class_docs(self, package_path: str, file_name: str, source: str) -> Dict[str, ClassDocument]:
        """Parse one source file and return its ``{qualified name: ClassDocument}`` map.

        Parse failures propagate as :class:`~polydoc.frontends.ParseError`.
        """
        front_end = self.front_end_for(file_name)
        self.logger.debug("Parsing %s as %s", file_name, front_end.language)
        try:
            tree = front_end.parse(source)
            assembler = self._assembler_factory(
                package_path,
                file_name,
                language=front_end.language,
                links=self.links,
                options=self.options,
            )
            return assembler.assemble(tree)
        except RecursionError as exc:
            raise GrammarError("source nests too deeply to document", line=1) from exc


__all__ = ["Dispatcher", "Route", "route_for"]
