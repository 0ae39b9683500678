# src/docbuild/services/document_build_service.py
import logging
from typing import Optional

from auditor.context.audit_context import AuditContext, ImageProber, PageContext
from auditor.dom.builder import DOMBuilder
from auditor.dom.qngine import QNGINE
from corpus.services.url_index_service import UrlIndex
from docbuild.core.services.l10n_service import LocaleStrings
from docbuild.model import BuildSettings, BuiltDocument, SourceDocument
from docbuild.services.document_assembly_service import DocumentAssemblyService
from docbuild.services.html_render_service import HtmlRenderService
from extractor.services.section_extract_service import SectionExtractService

logger = logging.getLogger(__name__)


class DocumentBuildService:
    """
    The per-document pipeline: normalize the rendered tree, audit links,
    anchors and images, split the body into sections, finish the HTML and
    assemble the record.

    Holds only read-only shared state, so one instance serves every document
    handled by a process.
    """

    def __init__(
            self,
            index: UrlIndex,
            settings: BuildSettings,
            strings: LocaleStrings,
            image_prober: Optional[ImageProber] = None,
    ):
        self.index = index
        self.settings = settings
        self.strings = strings
        self.image_prober = image_prober

        self.builder = DOMBuilder()
        self.engine = QNGINE()
        self.sections = SectionExtractService()
        self.renderer = HtmlRenderService()
        self.assembler = DocumentAssemblyService(index, settings, strings)

    def build(self, source: SourceDocument) -> BuiltDocument:
        """
        Builds one document.

        Raises:
            ParseFailure: If the document's rendered tree cannot be normalized.
        """
        doc = self.builder.parse_doc(source)

        page = PageContext(url=source.url, locale=source.locale, default_locale=self.settings.default_locale)
        ctx = AuditContext(page, self.index, self.settings, self.strings, image_prober=self.image_prober)
        flaws = self.engine.run_audit(doc, ctx)

        root = doc.root
        self.renderer.finish_body(doc.soup, root)
        body = self.sections.extract(root, url=source.url)
        self.renderer.add_heading_anchors(doc.soup, root)

        record = self.assembler.assemble(source, body, flaws)
        if flaws.total:
            logger.debug(f"{source.url}: {len(flaws.broken_links)} broken link(s), {len(flaws.images)} image flaw(s)")
        return BuiltDocument(doc=record, html=doc.render())
