# src/auditor/context/audit_context.py
import logging
from typing import Callable, Optional, Set, Tuple

from pydantic import BaseModel, Field

from auditor.services.anchor_normalizer_service import AnchorNormalizerService
from auditor.services.image_resolver_service import ImageResolverService
from auditor.services.link_resolver_service import LinkResolverService
from auditor.services.locale_fallback_service import LocaleFallbackService
from corpus.services.url_index_service import UrlIndex
from docbuild.core.services.l10n_service import LocaleStrings
from docbuild.model import BuildSettings

logger = logging.getLogger(__name__)

# Returns (width, height) for a site file path, or None when unknown.
ImageProber = Callable[[str], Optional[Tuple[int, int]]]


class PageContext(BaseModel):
    """What the resolvers need to know about the document being audited."""
    url: str
    locale: str
    default_locale: str = "en-US"
    # Every id present in the document, filled in by the anchor normalizer.
    anchors: Set[str] = Field(default_factory=set)

    @property
    def is_translated(self) -> bool:
        return self.locale.lower() != self.default_locale.lower()


class AuditContext:
    """
    Per-document state shared by all audit rules: the page, the shared
    read-only index, settings and localization tables, and the services
    built on top of them.
    """

    def __init__(
            self,
            page: PageContext,
            index: UrlIndex,
            settings: BuildSettings,
            strings: LocaleStrings,
            image_prober: Optional[ImageProber] = None,
    ):
        self.page = page
        self.index = index
        self.settings = settings
        self.strings = strings
        self.image_prober = image_prober

        self.link_resolver = LinkResolverService(index, settings.https_upgrade, settings.own_domains)
        self.locale_fallback = LocaleFallbackService(index, strings)
        self.anchor_normalizer = AnchorNormalizerService(index)
        self.image_resolver = ImageResolverService(index, settings.https_upgrade, settings.own_domains)

    def probe_image(self, file_path: str) -> Optional[Tuple[int, int]]:
        """Asks the image prober for pixel dimensions; failures are logged, not raised."""
        if not self.image_prober or not file_path:
            return None
        try:
            return self.image_prober(file_path)
        except Exception as e:
            logger.warning("Image probing failed for %s: %s", file_path, e)
            return None
