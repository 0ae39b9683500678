# src/extractor/services/section_extract_service.py
import logging
from typing import List, Optional

from bs4 import NavigableString, Tag, Comment

from auditor.dom.elements.marker import MarkerNode, is_marker, parse_marker
from extractor.model import (
    BCDSection, BCDValue, ProseSection, ProseValue, Section,
    SpecificationRef, SpecificationsSection, SpecificationsValue,
)

logger = logging.getLogger(__name__)

SECTION_HEADINGS = ("h2", "h3")


class _Run:
    """The heading that opened the current run, and whether a section has used it yet."""

    def __init__(self, heading: Optional[Tag] = None):
        self.id: Optional[str] = heading.get("id") if heading is not None else None
        self.title: Optional[str] = heading.decode_contents() if heading is not None else None
        self.is_h3 = heading is not None and heading.name == "h3"
        self.used = heading is None

    def claim(self) -> dict:
        """
        Heading fields for the next section: id and title only once, then
        untitled. Every section of an h3 run stays marked as such.
        """
        if self.used:
            return {"id": None, "title": None, "is_h3": self.is_h3}
        self.used = True
        return {"id": self.id, "title": self.title, "is_h3": self.is_h3}


class SectionExtractService:
    """
    Splits an article body into typed sections.

    Every h2/h3 opens a new run. Structured-data markers become sections of
    their own; everything else in a run is collected into prose sections.
    """

    def extract(self, root: Optional[Tag], url: str = "") -> List[Section]:
        """
        Args:
            root: The element whose top-level children form the body.
            url: Document URL, for log messages only.
        """
        if root is None:
            return []

        sections: List[Section] = []
        run = _Run()
        buffer: List[str] = []

        def flush():
            content = "".join(buffer)
            buffer.clear()
            if content.strip():
                sections.append(ProseSection(value=ProseValue(content=content, **run.claim())))

        for child in list(root.children):
            if isinstance(child, Comment):
                continue

            if isinstance(child, Tag) and child.name in SECTION_HEADINGS:
                flush()
                run = _Run(child)
                continue

            if isinstance(child, Tag) and is_marker(child):
                marker = parse_marker(child)
                if self._has_query(marker, url):
                    flush()
                    sections.append(self._marker_section(marker, run.claim()))
                    continue

            if isinstance(child, Tag):
                buffer.append(child.decode())
            elif isinstance(child, NavigableString):
                buffer.append(child.output_ready())

        flush()
        return sections

    @staticmethod
    def _has_query(marker: MarkerNode, url: str) -> bool:
        if marker.query:
            return True
        logger.warning(f"Structured-data marker without a query on {url}, keeping it as prose.")
        return False

    @staticmethod
    def _marker_section(marker: MarkerNode, heading: dict) -> Section:
        if marker.marker_kind == "specifications":
            return SpecificationsSection(value=SpecificationsValue(
                query=marker.query,
                specifications=[SpecificationRef(bcd_specification_url=u) for u in marker.spec_urls],
                **heading,
            ))
        return BCDSection(value=BCDValue(query=marker.query, **heading))
