# src/auditor/managers/flaw_manager.py
import logging
from collections import Counter
from typing import Dict, List

from auditor.dom.core import AuditResult, SourceNode
from auditor.model import BrokenLinkFlaw, DocumentFlaws, ImageFlaw

logger = logging.getLogger(__name__)

# Flaw id prefix per category.
ID_PREFIXES: Dict[str, str] = {
    "broken_links": "link",
    "images": "image",
}


class FlawManager:
    """
    Collects the flaws of one document.

    Every occurrence is its own entry, even when the same href or src shows
    up several times. Ids come from a running counter per category, so they
    follow traversal order: link1, link2, ... and image1, image2, ...
    """

    def __init__(self, url: str = ""):
        self.url = url
        self._counters: Counter = Counter()
        self._broken_links: List[BrokenLinkFlaw] = []
        self._images: List[ImageFlaw] = []
        # node_id -> flaw id, one flaw per node
        self._by_node: Dict[str, str] = {}

    def add(self, result: AuditResult, node: SourceNode) -> str:
        """
        Records a finding for `node` and returns the flaw id it was given.

        Raises:
            ValueError: For an unknown flaw category.
        """
        prefix = ID_PREFIXES.get(result.category)
        if prefix is None:
            raise ValueError(f"Unknown flaw category: {result.category}")

        if node.node_id and node.node_id in self._by_node:
            logger.warning(f"Node {node.node_id} on {self.url} already has a flaw, keeping the first one.")
            return self._by_node[node.node_id]

        self._counters[result.category] += 1
        flaw_id = f"{prefix}{self._counters[result.category]}"

        if result.category == "images":
            self._images.append(ImageFlaw(
                id=flaw_id,
                src=result.subject,
                line=node.line,
                column=node.column,
                explanation=result.explanation,
                suggestion=result.suggestion,
                fixable=result.fixable,
                external_image=result.external_image,
            ))
        else:
            self._broken_links.append(BrokenLinkFlaw(
                id=flaw_id,
                href=result.subject,
                line=node.line,
                column=node.column,
                explanation=result.explanation,
                suggestion=result.suggestion,
                fixable=result.fixable,
            ))

        if node.node_id:
            self._by_node[node.node_id] = flaw_id
        return flaw_id

    def __len__(self) -> int:
        return len(self._broken_links) + len(self._images)

    def to_flaws(self) -> DocumentFlaws:
        return DocumentFlaws(broken_links=list(self._broken_links), images=list(self._images))
