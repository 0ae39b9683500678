# src/docbuild/services/document_assembly_service.py
import logging
from typing import List

from auditor.model import DocumentFlaws
from corpus.services.url_index_service import UrlIndex
from docbuild.core.services.l10n_service import LocaleStrings
from docbuild.model import BuildSettings, Document, OtherTranslation, SourceDocument
from extractor.model import Section

logger = logging.getLogger(__name__)


class DocumentAssemblyService:
    """Puts the per-document record together from its parts."""

    def __init__(self, index: UrlIndex, settings: BuildSettings, strings: LocaleStrings):
        self.index = index
        self.settings = settings
        self.strings = strings

    def page_title(self, source: SourceDocument) -> str:
        """
        'Title | Site' for top-level documents. Deeper documents also name
        their two-segment ancestor: 'Title - Ancestor | Site'.
        """
        parts = source.slug.split("/")
        if len(parts) >= 3:
            ancestor_url = f"/{source.locale}/docs/{'/'.join(parts[:2])}"
            ancestor_title = self.index.title_of(ancestor_url)
            if ancestor_title and ancestor_title != source.title:
                return f"{source.title} - {ancestor_title} | {self.settings.site_name}"
        return f"{source.title} | {self.settings.site_name}"

    def other_translations(self, source: SourceDocument) -> List[OtherTranslation]:
        """Same slug in other locales: the default locale first, the rest alphabetically."""
        rows = self.index.translations_of(source.slug, exclude_locale=source.locale)
        default = self.settings.default_locale.lower()
        rows = sorted(rows, key=lambda row: (row[0].lower() != default, row[0].lower()))
        return [
            OtherTranslation(locale=locale, native=self.strings.native_name(locale), title=title)
            for locale, _, title in rows
        ]

    def assemble(self, source: SourceDocument, body: List[Section], flaws: DocumentFlaws) -> Document:
        return Document(
            title=source.title,
            page_title=self.page_title(source),
            summary=source.summary,
            mdn_url=source.url,
            locale=source.locale,
            is_translated=source.locale.lower() != self.settings.default_locale.lower(),
            other_translations=self.other_translations(source),
            source=source.source,
            modified=source.modified,
            body=body,
            flaws=flaws,
        )
