# src/auditor/services/anchor_normalizer_service.py
import logging
import re
from typing import Iterable, List, Optional, Set

from auditor.model import FlawCode, LinkDecision
from corpus.services.url_index_service import UrlIndex
from corpus.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

# Characters that have a meaning inside a URL and are dropped from generated ids.
_UNSAFE_ID_CHARS = re.compile(r"[\"#$%&+,/:;=?@\[\]\\^`{|}~'<>*!()]")
_WHITESPACE = re.compile(r"\s+")


def slugify(text: str) -> str:
    """
    Turns heading text into an id: whitespace becomes '_', URL-unsafe
    punctuation is dropped and the result is lowercased.
    """
    slug = _WHITESPACE.sub("_", (text or "").strip())
    slug = _UNSAFE_ID_CHARS.sub("", slug)
    return slug.lower() or "section"


class AnchorNormalizerService:
    """
    Gives every heading a unique id and checks link fragments against the
    anchors of their target document.
    """

    def __init__(self, index: UrlIndex):
        self.index = index

    def normalize_headings(self, headings: List, page, other_ids: Iterable[str] = ()) -> List[str]:
        """
        Assigns ids to heading nodes in document order and records the page's anchor set.

        Explicit ids keep their case. Generated ids are slugs of the heading
        text. An id colliding case-insensitively with an earlier heading id, or
        with any id in `other_ids`, gets a '_2', '_3', ... suffix. The heading
        elements are updated in place.

        Returns:
            List[str]: The final heading ids, in document order.
        """
        other_ids = [i for i in other_ids if i]
        taken: Set[str] = {i.lower() for i in other_ids}
        ids: List[str] = []

        for heading in headings:
            base = heading.id or slugify(heading.text)
            candidate = base
            counter = 2
            while candidate.lower() in taken:
                candidate = f"{base}_{counter}"
                counter += 1

            if candidate != base:
                logger.debug("Duplicate heading id %r on %s, using %r", base, page.url, candidate)

            taken.add(candidate.lower())
            heading.id = candidate
            if heading.element is not None:
                heading.element["id"] = candidate
            ids.append(candidate)

        page.anchors.update(ids)
        page.anchors.update(other_ids)
        return ids

    @staticmethod
    def lowercase_fragment(href: Optional[str]) -> Optional[str]:
        """Lowercases the '#fragment' part of an href, leaving the rest alone."""
        if not href or "#" not in href:
            return href
        base, _, fragment = href.partition("#")
        return f"{base}#{fragment.lower()}"

    def known_anchors_of(self, target: str, page) -> Optional[Set[str]]:
        """The anchor set of a target path, or None when it is not known."""
        if UrlUtils.index_key(target) == UrlUtils.index_key(page.url):
            return set(page.anchors)
        entry = self.index.lookup(target)
        if entry is None or entry.anchors is None:
            return None
        return set(entry.anchors)

    def check_fragment(self, raw_href: str, decision: LinkDecision, page) -> LinkDecision:
        """
        Checks the fragment of a cleanly resolved link.

        Decisions that already carry a flaw, or have no fragment or no anchor
        target, come back unchanged.
        """
        fragment = decision.fragment
        if decision.has_flaw or not fragment or not decision.anchor_target:
            return decision

        anchors = self.known_anchors_of(decision.anchor_target, page)

        if anchors is None:
            if fragment != fragment.lower():
                return self._not_lowercase(raw_href, decision)
            return decision

        if fragment in anchors:
            return decision

        wanted = fragment.lower()
        if any(a.lower() == wanted for a in anchors):
            return self._not_lowercase(raw_href, decision)

        return decision.model_copy(update={
            "code": FlawCode.ANCHOR_UNRESOLVED,
            "explanation": f"Can't resolve {raw_href}",
            "suggestion": self._sibling_suggestion(decision.anchor_target, fragment, page),
        })

    @staticmethod
    def _not_lowercase(raw_href: str, decision: LinkDecision) -> LinkDecision:
        return decision.model_copy(update={
            "code": FlawCode.ANCHOR_NOT_LOWERCASE,
            "explanation": "Anchor not lowercase",
            "suggestion": AnchorNormalizerService.lowercase_fragment(raw_href.strip()),
        })

    def _sibling_suggestion(self, target: str, fragment: str, page) -> Optional[str]:
        """
        Looks for the same anchor on the default-locale sibling of the target.
        """
        locale, _ = UrlUtils.split_locale(target)
        if not locale or locale.lower() == page.default_locale.lower():
            return None

        sibling = self.index.lookup(UrlUtils.with_locale(target, page.default_locale))
        if sibling is None or not sibling.exists:
            return None

        match = sibling.find_anchor(fragment)
        if match is None:
            return None
        return f"{sibling.path}#{match.lower()}"
