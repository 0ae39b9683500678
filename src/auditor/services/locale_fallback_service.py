# src/auditor/services/locale_fallback_service.py
import logging

from auditor.model import FlawCode, LinkDecision, LinkMarker
from corpus.services.url_index_service import UrlIndex
from corpus.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)


class LocaleFallbackService:
    """
    Second pass over unresolved link decisions of translated documents.

    A link that cannot be resolved in the document's locale but exists in the
    default locale is not a flaw: the rendered link is pointed at the
    default-locale page and marked so readers know the target is untranslated.
    """

    def __init__(self, index: UrlIndex, strings):
        self.index = index
        self.strings = strings

    def refine(self, decision: LinkDecision, page) -> LinkDecision:
        """
        Returns a fallback decision when one applies, else the decision unchanged.
        """
        if decision.code != FlawCode.UNRESOLVED or not decision.fallback_path:
            return decision

        resolution = self.index.resolve(page.default_locale, decision.fallback_path)
        if not resolution.found:
            return decision

        target = resolution.target
        entry = resolution.entry
        logger.debug("Locale fallback on %s: %s -> %s", page.url, decision.href, target)

        anchor_target = None
        if entry is not None and entry.exists and not entry.is_attachment:
            anchor_target = entry.path

        return LinkDecision(
            href=UrlUtils.with_suffix(target, decision.query, decision.fragment, lowercase_fragment=True),
            marker=LinkMarker.LOCALE_FALLBACK,
            title=self.strings.get(page.locale, "only_in_default_locale"),
            query=decision.query,
            fragment=decision.fragment,
            anchor_target=anchor_target,
        )
