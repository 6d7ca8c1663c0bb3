from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from polydoc.builder import RootDocBuilder
from polydoc.dispatcher import Dispatcher
from tests._fixtures.line_frontend import LineFrontEnd
from tests._fixtures.source_tree import SourceTreeBuilder


@pytest.fixture(autouse=True)
def _reset_polydoc_logger() -> Iterator[None]:
    """Drop handlers installed by configure_logging so they never outlive a test."""
    yield
    logger = logging.getLogger("polydoc")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def source_tree(tmp_path: Path) -> SourceTreeBuilder:
    """Provide a reusable source tree builder rooted at the pytest tmp_path."""
    return SourceTreeBuilder(tmp_path)


@pytest.fixture
def line_dispatcher() -> Dispatcher:
    """Dispatcher whose both front ends are the toy line grammar."""
    return Dispatcher(primary=LineFrontEnd("groovy"), secondary=LineFrontEnd("java"))


@pytest.fixture
def line_builder(line_dispatcher: Dispatcher, tmp_path: Path) -> RootDocBuilder:
    """Builder over an empty source path that is fed through process_source."""
    return RootDocBuilder([tmp_path], dispatcher=line_dispatcher)
