"""Language front ends and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable

from .base import FrontEnd, GrammarError, ParseError, TokenStreamError
from .groovy import GroovyFrontEnd
from .java import JavaFrontEnd
from .tree import Node

_ENTRY_POINT_GROUP = "polydoc.frontends"

_BUILTIN_FACTORIES: Dict[str, Callable[[], FrontEnd]] = {
    "groovy": GroovyFrontEnd,
    "java": JavaFrontEnd,
}


def create_front_end(language: str) -> FrontEnd:
    """Return a front end for ``language``; installed plugins override builtins."""
    key = language.lower()
    for entry in _iter_entry_points():
        if entry.name.lower() != key:
            continue
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - broken plugin install
            raise RuntimeError(f"Failed to load front end entry point '{entry.name}': {exc}") from exc
        return _coerce_front_end(loaded)
    factory = _BUILTIN_FACTORIES.get(key)
    if factory is None:
        raise ValueError(f"Unknown front end requested: {language}")
    return factory()


def _coerce_front_end(obj: object) -> FrontEnd:
    if isinstance(obj, FrontEnd):
        return obj
    if isinstance(obj, type) and issubclass(obj, FrontEnd):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, FrontEnd):
            return instance
    raise TypeError("Front end entry point must be a FrontEnd subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "FrontEnd",
    "GrammarError",
    "GroovyFrontEnd",
    "JavaFrontEnd",
    "Node",
    "ParseError",
    "TokenStreamError",
    "create_front_end",
]
