# src/auditor/dom/qngine.py
import logging
from typing import List, Optional

from auditor.managers.flaw_manager import FlawManager
from auditor.model import DocumentFlaws
from .models import NormalizedDocument
from .registry import DOMRegistry

logger = logging.getLogger(__name__)

HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}


class QNGINE:
    """
    Quality Engine (QNGINE) for auditing normalized documents.

    Gives headings their final ids first, so every fragment check sees the
    complete anchor set, then applies the registered audit rules to every
    node in document order and hands the findings to the FlawManager.
    """

    def __init__(self):
        """Initializes the engine by discovering and loading all available audit rules."""
        DOMRegistry.discover()
        self.rules = DOMRegistry.get_all_rules()

    @staticmethod
    def collect_other_ids(doc: NormalizedDocument) -> List[str]:
        """Ids of non-heading elements plus <a name> values."""
        if doc.soup is None:
            return []
        ids = [
            tag["id"] for tag in doc.soup.find_all(id=True)
            if tag.name not in HEADING_TAGS and isinstance(tag["id"], str)
        ]
        ids.extend(a["name"] for a in doc.soup.find_all("a", attrs={"name": True}))
        return ids

    def run_audit(self, doc: NormalizedDocument, ctx, flaws: Optional[FlawManager] = None) -> DocumentFlaws:
        """
        Runs the full audit suite on a normalized document.

        Args:
            doc (NormalizedDocument): The parsed document. Its tree is rewritten in place.
            ctx (AuditContext): Per-document context with the resolvers.
            flaws (FlawManager): Optional aggregator to record into.

        Returns:
            DocumentFlaws: The flaws found, per category, in document order.
        """
        flaws = flaws or FlawManager(doc.url)

        # --- Heading pre-pass ---
        ctx.anchor_normalizer.normalize_headings(doc.headings, ctx.page, self.collect_other_ids(doc))

        for node in doc.nodes:
            for rule in self.rules:
                results = rule(node, ctx)
                if not results:
                    continue

                for result in results:
                    flaw_id = flaws.add(result, node)
                    if node.element is not None:
                        node.element["data-flaw"] = flaw_id

        logger.debug(f"Audit of {doc.url} finished with {len(flaws)} flaw(s).")
        return flaws.to_flaws()
