# src/corpus/services/url_index_service.py
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from corpus.model import CorpusDocument, RedirectRecord, UrlIndexEntry, Resolution
from corpus.services.redirect_resolver_service import RedirectResolverService
from corpus.utils.url_utils import UrlUtils
from docbuild.exceptions import IndexUnavailable

logger = logging.getLogger(__name__)


class UrlIndex:
    """
    Process-wide, read-only mapping from site paths to document descriptors.

    Built once from the full corpus before any document is resolved. Keys are
    lowercased paths without trailing slash; entries keep canonical casing.
    """

    def __init__(
            self,
            entries: Dict[str, UrlIndexEntry],
            default_locale: str = "en-US",
            translations: Optional[Dict[str, List[Tuple[str, str, str]]]] = None,
    ):
        self._entries = entries
        self.default_locale = default_locale
        # slug (lowercase) -> [(locale, url, title)]
        self._translations = translations or {}

    # --- Construction ---

    @classmethod
    def build(
            cls,
            documents: Iterable,
            redirects: Iterable = (),
            default_locale: str = "en-US",
            max_redirect_depth: int = 10,
    ) -> "UrlIndex":
        """
        Scans the corpus into an index.

        Args:
            documents: CorpusDocument objects or dicts with the same fields.
            redirects: RedirectRecord objects, dicts, or (from, to) tuples.
            default_locale: The site's default locale.
            max_redirect_depth: Bound for redirect-chain following.

        Raises:
            IndexUnavailable: If the corpus input is missing or invalid.
        """
        if documents is None:
            raise IndexUnavailable("No corpus supplied")

        try:
            docs = [d if isinstance(d, CorpusDocument) else CorpusDocument.model_validate(d) for d in documents]
            redirect_records = [cls._coerce_redirect(r) for r in (redirects or [])]
        except (ValidationError, TypeError, ValueError) as e:
            raise IndexUnavailable(f"Invalid corpus input: {e}") from e

        entries: Dict[str, UrlIndexEntry] = {}
        translations: Dict[str, List[Tuple[str, str, str]]] = defaultdict(list)

        for doc in docs:
            key = UrlUtils.index_key(doc.url)
            if key in entries:
                logger.warning("Duplicate document in corpus: %s", doc.url)
            entries[key] = UrlIndexEntry(
                locale=doc.locale,
                path=doc.url,
                exists=True,
                title=doc.title,
                anchors=tuple(doc.anchors) if doc.anchors is not None else None,
            )
            translations[doc.slug.lower()].append((doc.locale, doc.url, doc.title))

            for file_name in doc.files:
                file_path = f"{doc.url}/{file_name.strip('/')}"
                entries[UrlUtils.index_key(file_path)] = UrlIndexEntry(
                    locale=doc.locale, path=file_path, exists=True, is_attachment=True
                )

        redirect_map: Dict[str, str] = {}
        for record in redirect_records:
            redirect_map[UrlUtils.index_key(record.from_url)] = record.to_url

        resolver = RedirectResolverService(redirect_map, max_redirects=max_redirect_depth)

        for record in redirect_records:
            key = UrlUtils.index_key(record.from_url)
            if key in entries:
                logger.warning("Redirect source is also a document, keeping the document: %s", record.from_url)
                continue

            final_url, _ = resolver.resolve_final_url(record.from_url)
            target = cls._canonical_target(final_url, entries)
            locale, _ = UrlUtils.split_locale(record.from_url)
            entries[key] = UrlIndexEntry(
                locale=locale or default_locale,
                path=record.from_url,
                exists=False,
                redirect_target=target,
            )

        logger.info(
            "URL index built: %d documents, %d redirects, %d entries total.",
            len(docs), len(redirect_records), len(entries)
        )
        return cls(entries, default_locale=default_locale, translations=dict(translations))

    @staticmethod
    def _coerce_redirect(raw) -> RedirectRecord:
        if isinstance(raw, RedirectRecord):
            return raw
        if isinstance(raw, (tuple, list)) and len(raw) == 2:
            return RedirectRecord(from_url=raw[0], to_url=raw[1])
        return RedirectRecord.model_validate(raw)

    @staticmethod
    def _canonical_target(final_url: Optional[str], entries: Dict[str, UrlIndexEntry]) -> Optional[str]:
        """Maps a redirect chain's end to a safe target, or None."""
        if final_url is None:
            return None
        if final_url.startswith(("http://", "https://")):
            return final_url

        path, _, fragment = final_url.partition("#")
        entry = entries.get(UrlUtils.index_key(path))
        if entry is None or not entry.exists:
            logger.debug("Redirect chain ends at an unknown page: %s", final_url)
            return None
        return entry.path + (f"#{fragment}" if fragment else "")

    # --- Lookups ---

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, url: str) -> Optional[UrlIndexEntry]:
        """Returns the raw entry for a site path, case-insensitively."""
        path = url.split("#", 1)[0].split("?", 1)[0]
        return self._entries.get(UrlUtils.index_key(path))

    def resolve(self, locale: str, path: str) -> Resolution:
        """
        Resolves a site path in the given locale.

        The locale segment of `path` is replaced by `locale`. A redirect entry
        counts as found only when its chain ends at a known page.
        """
        url = UrlUtils.with_locale(path, locale)
        entry = self.lookup(url)
        if entry is None:
            return Resolution(found=False)
        if entry.exists:
            return Resolution(found=True, canonical_path=entry.path, entry=entry)
        if entry.redirect_target:
            target_entry = self.lookup(entry.redirect_target)
            return Resolution(
                found=True,
                canonical_path=entry.path,
                redirected_to=entry.redirect_target,
                entry=target_entry,
            )
        return Resolution(found=False, canonical_path=entry.path, entry=entry)

    def resolve_url(self, url: str) -> Resolution:
        """Resolves a site path in its own locale."""
        locale, _ = UrlUtils.split_locale(url)
        if locale is None:
            return Resolution(found=False)
        return self.resolve(locale, url)

    def title_of(self, url: str) -> Optional[str]:
        entry = self.lookup(url)
        return entry.title if entry and entry.exists else None

    def translations_of(self, slug: str, exclude_locale: Optional[str] = None) -> List[Tuple[str, str, str]]:
        """
        Lists (locale, url, title) of documents sharing `slug`, case-insensitively.
        """
        rows = self._translations.get(slug.strip("/").lower(), [])
        return [row for row in rows if row[0] != exclude_locale]
