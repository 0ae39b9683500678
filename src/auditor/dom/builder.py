# src/auditor/dom/builder.py
import logging
from collections import Counter
from typing import List

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from docbuild.exceptions import ParseFailure
from .core import SourceNode
from .models import NormalizedDocument
from .registry import DOMRegistry
from ..services.source_position_service import SourcePositionService

logger = logging.getLogger(__name__)


class DOMBuilder:
    """
    Builder responsible for turning a document's rendered tree into a
    NormalizedDocument: a flat, document-ordered list of typed nodes, each
    located in the original source.
    """

    def __init__(self):
        """Initializes the builder and ensures the DOMRegistry is populated."""
        DOMRegistry.discover()

    def parse_doc(self, source) -> NormalizedDocument:
        """
        Parses a SourceDocument's rendered HTML.

        Args:
            source: The SourceDocument (rendered_html, raw_content, markup, url, locale).

        Returns:
            NormalizedDocument: The parsed tree and its typed nodes.

        Raises:
            ParseFailure: If the rendered tree is missing or cannot be parsed.
        """
        html = source.rendered_html
        if not isinstance(html, str):
            raise ParseFailure("Document has no rendered tree", url=source.url)

        try:
            soup = BeautifulSoup(html.replace('\ufeff', ''), 'html.parser')
        except (ParserRejectedMarkup, AssertionError, ValueError) as e:
            raise ParseFailure(f"Rendered tree cannot be parsed: {e}", url=source.url) from e

        positions = SourcePositionService(source.raw_content, source.markup)
        # Tree positions are only source positions when the source is the tree itself
        same_tree = source.markup == "html" and source.raw_content == html
        counters: Counter = Counter()
        nodes: List[SourceNode] = []

        # find_all walks the tree in document order
        for tag in soup.find_all(True):
            defn = DOMRegistry.get_definition(tag)
            if defn is None:
                continue

            node = defn.parser(tag)
            if node is None:
                continue

            counters[node.kind] += 1
            node.node_id = f"{node.kind}{counters[node.kind]}"
            self._locate(node, positions, same_tree)
            nodes.append(node)

        logger.debug(
            f"Normalized {source.url}: " +
            ", ".join(f"{count} {kind}(s)" for kind, count in sorted(counters.items()))
        )
        return NormalizedDocument(url=source.url, locale=source.locale, nodes=nodes, soup=soup)

    @staticmethod
    def _locate(node: SourceNode, positions: SourcePositionService, same_tree: bool) -> None:
        """
        Sets the node's line/column from the original source. When the value
        cannot be found there, the element's position in the rendered tree is
        used only if that tree is the source; otherwise the position stays unknown.
        """
        needle = node.source_needle()
        found = positions.locate(*needle) if needle else None
        if found:
            node.line, node.column = found
            return

        tag = node.element
        if same_tree and tag is not None and tag.sourceline is not None:
            node.line = tag.sourceline
            node.column = (tag.sourcepos or 0) + 1
