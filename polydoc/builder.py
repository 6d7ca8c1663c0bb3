"""Root document builder: locates sources, folds per-file results, resolves links."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Any, Iterable, Mapping, Optional, Sequence

from .config import COLLISION_POLICIES, DOCUMENTATION_SCOPES, SOURCE_ROOT_POLICIES, PolyDocConfig
from .description import DescriptionExtractor, MarkupError
from .diagnostics import AMBIGUOUS_SOURCE, DUPLICATE_CLASS, MARKUP, TOKEN_STREAM, Diagnostics
from .dispatcher import Dispatcher, Route
from .frontends import ParseError
from .logging import get_logger
from .models import DEFAULT_PACKAGE, DocumentSealedError, LinkArgument, PackageDocument, RootDocument

SEPARATOR = "/"


def package_path_for(file_name: str) -> str:
    """Return the package path of a source-root relative file name."""
    parent = PurePosixPath(file_name.replace("\\", SEPARATOR)).parent.as_posix()
    if parent in {"", "."}:
        return DEFAULT_PACKAGE
    return parent


class RootDocBuilder:
    """Builds one :class:`RootDocument` from files found on a search path.

    Files are processed one at a time in the order given. A file that fails
    to parse is reported to the diagnostics collector and contributes
    nothing; the batch always continues. :meth:`root_doc` resolves the
    document, after which the builder accepts no more files.
    """

    def __init__(
        self,
        sourcepath: Sequence[Path | str],
        links: Optional[Sequence[LinkArgument]] = None,
        options: Optional[Mapping[str, Any]] = None,
        *,
        encoding: str = "utf-8",
        collision_policy: str = "overwrite",
        source_root_policy: str = "first",
        dispatcher: Optional[Dispatcher] = None,
        description_extractor: Optional[DescriptionExtractor] = None,
        diagnostics: Optional[Diagnostics] = None,
        root: Optional[RootDocument] = None,
    ) -> None:
        if collision_policy not in COLLISION_POLICIES:
            raise ValueError(f"Unknown collision policy: {collision_policy}")
        if source_root_policy not in SOURCE_ROOT_POLICIES:
            raise ValueError(f"Unknown source root policy: {source_root_policy}")
        scope = str((options or {}).get("scope", "private")).lower()
        if scope not in DOCUMENTATION_SCOPES:
            raise ValueError(f"Unknown documentation scope: {scope}")
        self.sourcepath = [Path(entry).expanduser() for entry in sourcepath]
        self.encoding = encoding
        self.collision_policy = collision_policy
        self.source_root_policy = source_root_policy
        self.dispatcher = dispatcher or Dispatcher(links=links, options=options)
        self.description_extractor = description_extractor or DescriptionExtractor()
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.root = root if root is not None else RootDocument()
        self.logger = get_logger("builder")

    @classmethod
    def from_config(cls, config: PolyDocConfig, **kwargs: Any) -> "RootDocBuilder":
        return cls(
            kwargs.pop("sourcepath", config.sourcepath),
            config.links,
            config.options,
            encoding=config.encoding,
            collision_policy=config.collision_policy,
            source_root_policy=config.source_root_policy,
            **kwargs,
        )

    def build_tree(self, filenames: Iterable[str]) -> Diagnostics:
        """Process every named file found under the search path."""
        for filename in filenames:
            matches = [root for root in self.sourcepath if (root / filename).is_file()]
            if not matches:
                self.logger.debug("%s not found on the source path", filename)
                continue
            if self.source_root_policy == "all":
                selected = matches
            else:
                selected = matches[:1]
                if self.source_root_policy == "report" and len(matches) > 1:
                    ignored = ", ".join(str(root) for root in matches[1:])
                    self.diagnostics.report(
                        filename,
                        AMBIGUOUS_SOURCE,
                        f"using {matches[0]}; also found under {ignored}",
                    )
            for root in selected:
                self.process_file(filename, root / filename)
        return self.diagnostics

    def process_file(self, filename: str, path: Path) -> None:
        """Read ``path`` and fold it in under the relative name ``filename``."""
        data = path.read_bytes()
        try:
            source = data.decode(self.encoding)
        except UnicodeDecodeError as exc:
            self.diagnostics.report(_normalise(filename), TOKEN_STREAM, f"cannot decode as {self.encoding}: {exc}")
            return
        self.process_source(filename, source)

    def process_source(self, filename: str, source: str) -> None:
        """Fold one file's source text into the root document."""
        if self.root.is_resolved:
            raise DocumentSealedError("Cannot process files after the root document was resolved")
        filename = _normalise(filename)
        package_path = package_path_for(filename)
        package = self.root.package_named(package_path) or PackageDocument(path=package_path)

        if self.dispatcher.route(filename) is Route.DESCRIPTION:
            self._process_description(filename, source, package)
            return

        try:
            class_docs = self.dispatcher.class_docs(package_path, filename, source)
        except ParseError as exc:
            self.diagnostics.report(filename, exc.category, str(exc))
            return

        collisions = self.root.put_classes(
            package, class_docs, keep_existing=self.collision_policy == "keep-first"
        )
        self.logger.debug("%s contributed %d classes to %s", filename, len(class_docs), package_path)
        if self.collision_policy != "overwrite":
            kept = "kept first definition" if self.collision_policy == "keep-first" else "replaced earlier definition"
            for qualified_name in collisions:
                self.diagnostics.report(filename, DUPLICATE_CLASS, f"{qualified_name}: {kept}")

    def root_doc(self) -> RootDocument:
        """Resolve cross references and return the finished document."""
        self.root.resolve()
        return self.root

    def _process_description(self, filename: str, source: str, package: PackageDocument) -> None:
        try:
            description = self.description_extractor.extract(source)
        except MarkupError as exc:
            self.diagnostics.report(filename, MARKUP, str(exc))
            return
        self.root.set_description(package, description)


def _normalise(filename: str) -> str:
    return filename.replace("\\", SEPARATOR)


def build_root_doc(
    sourcepath: Sequence[Path | str],
    filenames: Iterable[str],
    links: Optional[Sequence[LinkArgument]] = None,
    options: Optional[Mapping[str, Any]] = None,
    **kwargs: Any,
) -> tuple[RootDocument, Diagnostics]:
    """Build and resolve a root document in one call."""
    builder = RootDocBuilder(sourcepath, links, options, **kwargs)
    diagnostics = builder.build_tree(filenames)
    return builder.root_doc(), diagnostics


__all__ = ["RootDocBuilder", "build_root_doc", "package_path_for"]
