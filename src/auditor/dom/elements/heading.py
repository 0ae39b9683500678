from typing import Optional

from bs4 import Tag

from ..core import SourceNode, ElementDefinition


class HeadingNode(SourceNode):
    """
    Model representing a heading element (h1-h6).
    `html` is the inner markup, used verbatim as section title.
    """
    kind: str = "heading"
    level: int = 0
    text: str = ""
    html: str = ""
    id: Optional[str] = None


def parse_heading(tag: Tag) -> HeadingNode:
    """
    Parses heading tags and determines their hierarchy level (e.g., h2 -> 2).
    """
    try:
        level = int(tag.name[1])
    except (ValueError, IndexError, TypeError):
        level = 0

    return HeadingNode(
        level=level,
        text=tag.get_text(" ", strip=True),
        html=tag.decode_contents(),
        id=(tag.get("id") or "").strip() or None,
        element=tag,
    )


# --- ELEMENT DEFINITION ---

# Ids are assigned by the anchor normalizer before any rule runs, so headings
# carry no rules of their own.
DEFINITION = ElementDefinition(
    tag_names=["h1", "h2", "h3", "h4", "h5", "h6"],
    model=HeadingNode,
    parser=parse_heading,
)
