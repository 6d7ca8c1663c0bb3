"""Package description extraction from ``package.html`` files."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from typing import Optional

DESCRIPTION_FILE_NAME = "package.html"


class MarkupError(RuntimeError):
    """Raised when a package description file cannot be read as markup."""


class DescriptionExtractor:
    """Returns the text of one named section (``body`` by default) of a markup document."""

    def __init__(self, section: str = "body") -> None:
        self.section = section

    def extract(self, markup: str) -> str:
        try:
            root = ET.fromstring(markup)
        except ET.ParseError as exc:
            raise MarkupError(str(exc)) from exc

        section = self._find_section(root)
        if section is None:
            raise MarkupError(f"no <{self.section}> element found")
        return "".join(section.itertext()).strip()

    def _find_section(self, root: ET.Element) -> Optional[ET.Element]:
        for element in root.iter():
            if _local_name(element.tag) == self.section:
                return element
        return None


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return re.sub(r"^\{.+}", "", tag).lower()


__all__ = ["DESCRIPTION_FILE_NAME", "DescriptionExtractor", "MarkupError"]
