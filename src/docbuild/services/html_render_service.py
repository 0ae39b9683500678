# src/docbuild/services/html_render_service.py
import logging
from typing import Optional

from bs4 import BeautifulSoup, Tag

from auditor.dom.core import add_class

logger = logging.getLogger(__name__)

NOTECARD_CLASSES = ("note", "warning", "callout")


class HtmlRenderService:
    """Final cosmetic rewrites of the article tree before it is serialized."""

    def finish_body(self, soup: BeautifulSoup, root: Optional[Tag] = None) -> None:
        """
        Applies the content rewrites to the tree in place. Heading self-anchors
        are added separately, after sections have taken their titles.
        """
        root = root or soup
        self.mark_notranslate(root)
        self.fold_notecards(soup, root)

    @staticmethod
    def mark_notranslate(root: Tag) -> None:
        """Code blocks must not be touched by machine translation."""
        for pre in root.find_all("pre"):
            add_class(pre, "notranslate")

    @staticmethod
    def fold_notecards(soup: BeautifulSoup, root: Tag) -> None:
        """
        Turns note/warning/callout boxes into notecards. A leading <h4> becomes
        a bold lead-in of the first paragraph: <p><strong>Note:</strong> ...</p>.
        """
        for box in root.find_all("div"):
            classes = box.get("class") or []
            if not any(c in NOTECARD_CLASSES for c in classes):
                continue
            add_class(box, "notecard")

            first = next((c for c in box.children if isinstance(c, Tag)), None)
            if first is None or first.name != "h4":
                continue

            strong = soup.new_tag("strong")
            for child in list(first.contents):
                strong.append(child.extract())
            strong.append(":")

            paragraph = first.find_next_sibling()
            if paragraph is not None and paragraph.name == "p":
                paragraph.insert(0, " ")
                paragraph.insert(0, strong)
                first.decompose()
            else:
                paragraph = soup.new_tag("p")
                paragraph.append(strong)
                first.replace_with(paragraph)

    @staticmethod
    def add_heading_anchors(soup: BeautifulSoup, root: Tag) -> None:
        """Wraps h2/h3 content in a link to the heading itself."""
        for heading in root.find_all(["h2", "h3"]):
            heading_id = heading.get("id")
            if not heading_id or heading.find("a"):
                continue
            anchor = soup.new_tag("a", href=f"#{heading_id}")
            for child in list(heading.contents):
                anchor.append(child.extract())
            heading.append(anchor)
