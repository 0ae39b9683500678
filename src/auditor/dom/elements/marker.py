from typing import List, Literal, Optional

from bs4 import Tag
from pydantic import Field

from ..core import SourceNode, ElementDefinition

BCD_CLASS = "bc-data"
SPECS_CLASS = "bc-specs"


class MarkerNode(SourceNode):
    """
    Placeholder for structured data rendered elsewhere: a browser
    compatibility table or a specifications table.
    """
    kind: str = "marker"
    marker_kind: Literal["bcd", "specifications"]
    query: Optional[str] = None
    spec_urls: List[str] = Field(default_factory=list)


def _classes(tag: Tag) -> List[str]:
    classes = tag.get("class") or []
    return classes.split() if isinstance(classes, str) else list(classes)


def is_marker(tag: Tag) -> bool:
    classes = _classes(tag)
    return BCD_CLASS in classes or SPECS_CLASS in classes


def parse_marker(tag: Tag) -> MarkerNode:
    if SPECS_CLASS in _classes(tag):
        raw_urls = tag.get("data-spec-urls") or ""
        return MarkerNode(
            marker_kind="specifications",
            query=(tag.get("data-bcd-query") or "").strip() or None,
            spec_urls=[u.strip() for u in raw_urls.split(",") if u.strip()],
            element=tag,
        )

    query = (tag.get("data-query") or "").strip()
    if not query:
        element_id = tag.get("id") or ""
        if element_id.startswith("bcd:"):
            query = element_id[len("bcd:"):].strip()
    return MarkerNode(marker_kind="bcd", query=query or None, element=tag)


DEFINITION = ElementDefinition(
    tag_names=["div"],
    model=MarkerNode,
    parser=parse_marker,
    matcher=is_marker,
)
