# src/auditor/services/source_position_service.py
import bisect
import html
import logging
import re
from collections import Counter
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

Position = Tuple[int, int]

# Markdown link text allowing one level of nested brackets.
_MD_TEXT = r"\[(?:[^\[\]]|\[[^\[\]]*\])*\]"
_MD_TITLE = r"""(?:\s+(?:"[^"]*"|'[^']*'|\([^)]*\)))?"""


class SourcePositionService:
    """
    Locates hrefs, srcs and macro calls in the original document source.

    Every lookup for the same (kind, needle) consumes the next match, so a
    value repeated in the source maps each occurrence to its own line and
    column. Lines and columns are 1-based.
    """

    def __init__(self, source: str, markup: str = "html"):
        self.source = source or ""
        self.markup = markup
        self._line_starts = [0] + [m.end() for m in re.finditer(r"\n", self.source)]
        self._matches: Dict[Tuple[str, str], List[Position]] = {}
        self._consumed: Counter = Counter()

    def locate(self, needle: str, kind: str = "href") -> Optional[Position]:
        """
        Returns the position of the next unconsumed occurrence of `needle`.

        Args:
            needle: The exact value as it appears in the rendered tree.
            kind: 'href', 'src' or 'macro'.
        """
        if not needle:
            return None

        key = (kind, needle)
        if key not in self._matches:
            self._matches[key] = self._find_all(needle, kind)

        index = self._consumed[key]
        self._consumed[key] += 1

        matches = self._matches[key]
        if index < len(matches):
            return matches[index]
        return None

    def position_of(self, offset: int) -> Position:
        """Converts a character offset into a (line, column) pair."""
        line_index = bisect.bisect_right(self._line_starts, offset) - 1
        return line_index + 1, offset - self._line_starts[line_index] + 1

    # --- Matching ---

    def _find_all(self, needle: str, kind: str) -> List[Position]:
        if kind == "macro":
            offsets = [m.start() for m in re.finditer(re.escape(needle), self.source)]
            return [self.position_of(o) for o in offsets]

        offsets = set()
        variants = {needle, html.escape(needle, quote=False)}
        for variant in variants:
            escaped = re.escape(variant)
            if self.markup == "markdown":
                offsets.update(self._markdown_offsets(escaped, image=(kind == "src")))
                offsets.update(self._reference_offsets(escaped, image=(kind == "src")))
            offsets.update(self._attribute_offsets(escaped, kind))

        return [self.position_of(o) for o in sorted(offsets)]

    def _attribute_offsets(self, escaped: str, attribute: str) -> List[int]:
        """Offsets of attribute values, quoted or not."""
        quoted = re.compile(
            rf"\b{attribute}\s*=\s*(?P<q>[\"'])(?P<v>{escaped})(?P=q)", re.IGNORECASE
        )
        bare = re.compile(rf"\b{attribute}\s*=\s*(?P<v>{escaped})(?=[\s>])", re.IGNORECASE)
        offsets = [m.start("v") for m in quoted.finditer(self.source)]
        offsets.extend(m.start("v") for m in bare.finditer(self.source))
        return offsets

    def _markdown_offsets(self, escaped: str, image: bool) -> List[int]:
        """Offsets of the opening '[' (links) or '!' (images) of inline markdown links."""
        if image:
            pattern = rf"!{_MD_TEXT}\(\s*<?{escaped}>?{_MD_TITLE}\s*\)"
        else:
            pattern = rf"(?<!!){_MD_TEXT}\(\s*<?{escaped}>?{_MD_TITLE}\s*\)"
        return [m.start() for m in re.finditer(pattern, self.source)]

    def _reference_offsets(self, escaped: str, image: bool) -> List[int]:
        """
        Offsets of reference-style uses ([text][label], [label][], [label])
        whose label is defined with this target ([label]: target).
        """
        definition = re.compile(
            rf"^[ ]{{0,3}}\[(?P<label>[^\]]+)\]:[ \t]*<?{escaped}>?{_MD_TITLE}[ \t]*$", re.MULTILINE
        )
        bang = "!" if image else "(?<!!)"
        offsets: List[int] = []
        for label in {m.group("label").strip() for m in definition.finditer(self.source)}:
            name = re.escape(label)
            uses = (
                rf"{bang}{_MD_TEXT}\[{name}\]",
                rf"{bang}\[{name}\]\[\]",
                rf"(?<!\]){bang}\[{name}\](?![\[(:])",
            )
            for pattern in uses:
                offsets.extend(m.start() for m in re.finditer(pattern, self.source, re.IGNORECASE))
        return offsets
