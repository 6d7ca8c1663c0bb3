"""Tests for polydoc.description."""

from __future__ import annotations

import pytest

from polydoc.description import DescriptionExtractor, MarkupError


def test_extracts_body_text() -> None:
    markup = "<html><head><title>Ignored</title></head><body><p>Classes for <b>A</b>.</p></body></html>"

    assert DescriptionExtractor().extract(markup) == "Classes for A."


def test_extracts_namespaced_body() -> None:
    markup = '<html xmlns="http://www.w3.org/1999/xhtml"><body>\n  Shared helpers.\n</body></html>'

    assert DescriptionExtractor().extract(markup) == "Shared helpers."


def test_custom_section() -> None:
    markup = "<html><head><title>Title text</title></head><body>Body</body></html>"

    assert DescriptionExtractor(section="title").extract(markup) == "Title text"


def test_missing_section_is_a_markup_error() -> None:
    with pytest.raises(MarkupError):
        DescriptionExtractor().extract("<html><head/></html>")


def test_malformed_markup_is_a_markup_error() -> None:
    with pytest.raises(MarkupError):
        DescriptionExtractor().extract("<html><body><p>unclosed</body></html>")
