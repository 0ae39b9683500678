# src/auditor/services/image_resolver_service.py
import logging
from typing import Iterable
from urllib.parse import unquote

from auditor.model import FlawCode, ImageDecision
from corpus.services.url_index_service import UrlIndex
from corpus.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)


class ImageResolverService:
    """
    Checks <img> sources: external images are reported per occurrence, local
    files must exist as attachments of the document (or of its default-locale
    counterpart when the document is translated).
    """

    def __init__(self, index: UrlIndex, upgrade_policy, own_domains: Iterable[str]):
        self.index = index
        self.upgrade_policy = upgrade_policy
        self.own_domains = list(own_domains)

    def resolve(self, src: str, page) -> ImageDecision:
        stripped = (src or "").strip()
        if not stripped:
            return ImageDecision(
                src="",
                code=FlawCode.EMPTY_IMAGE_SRC,
                explanation="Empty img 'src' attribute",
            )

        # Inline data: images are never looked up
        if UrlUtils.is_passthrough(stripped):
            return ImageDecision(src=src)

        try:
            parsed = UrlUtils.split_href(stripped)
        except ValueError as e:
            logger.debug("Unparseable image src %r on %s: %s", src, page.url, e)
            return self._not_found(src)

        if UrlUtils.is_absolute(parsed):
            host = parsed.hostname or ""
            if UrlUtils.host_matches(host, self.own_domains):
                path = unquote(parsed.path or "/")
                entry = self.index.lookup(path)
                if entry is not None and entry.exists:
                    return ImageDecision(
                        src=src,
                        code=FlawCode.OWN_DOMAIN,
                        explanation="Can be made a relative link",
                        suggestion=entry.path,
                        file_path=entry.path,
                    )
                return self._not_found(src)

            if parsed.scheme == "http" and self.upgrade_policy.allows(host):
                return ImageDecision(
                    src=src,
                    code=FlawCode.HTTP_UPGRADE,
                    explanation="Is currently http:// but can become https://",
                    suggestion="https" + stripped[len("http"):],
                    external_image=True,
                )

            return ImageDecision(
                src=src,
                code=FlawCode.EXTERNAL_IMAGE,
                explanation="External image URL",
                external_image=True,
            )

        path = unquote(parsed.path)
        if not path.startswith("/"):
            path = UrlUtils.absolutize(page.url, path)

        entry = self.index.lookup(path)
        if entry is None and page.is_translated:
            entry = self.index.lookup(UrlUtils.with_locale(path, page.default_locale))
            if entry is not None:
                logger.debug("Image %s on %s served from %s", path, page.url, page.default_locale)

        if entry is None or not entry.exists:
            return self._not_found(src)

        # The rendered src stays in the document's own locale.
        return ImageDecision(src=path, file_path=entry.path)

    @staticmethod
    def _not_found(src: str) -> ImageDecision:
        return ImageDecision(
            src=src,
            code=FlawCode.IMAGE_NOT_FOUND,
            explanation="File not present on disk",
        )
