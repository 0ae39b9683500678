# src/auditor/services/link_resolver_service.py
import logging
from typing import Iterable, Optional
from urllib.parse import SplitResult, unquote

from auditor.model import FlawCode, LinkDecision, LinkMarker
from corpus.services.url_index_service import UrlIndex
from corpus.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)


class LinkResolverService:
    """
    Classifies a single href against the URL index.

    Decision order, first match wins: malformed URL, upgradeable http://
    link, absolute link into the site itself, self-reference, wrong case or
    missing locale prefix, redirect, unresolvable. Anything else resolves
    cleanly. The service is stateless; all per-document state comes in
    through the page context.
    """

    def __init__(self, index: UrlIndex, upgrade_policy, own_domains: Iterable[str]):
        self.index = index
        self.upgrade_policy = upgrade_policy
        self.own_domains = list(own_domains)

    def resolve(self, href: str, page) -> LinkDecision:
        """
        Resolves a raw href found on `page`.

        Args:
            href: The href exactly as found on the element.
            page: The PageContext of the current document.

        Returns:
            LinkDecision: The href to render, a render marker, and an optional flaw.
        """
        stripped = (href or "").strip()

        # Empty hrefs and non-web schemes are not ours to judge
        if not stripped or UrlUtils.is_passthrough(stripped):
            return LinkDecision(href=href)

        try:
            parsed = UrlUtils.split_href(stripped)
        except ValueError as e:
            logger.debug("Not a valid link URL %r on %s: %s", href, page.url, e)
            return LinkDecision(
                href=None,
                code=FlawCode.NOT_VALID_URL,
                explanation="Not a valid link URL",
                marker=LinkMarker.INVALID,
            )

        if parsed.scheme and parsed.scheme not in ("http", "https"):
            return LinkDecision(href=href)

        if UrlUtils.is_absolute(parsed):
            return self._resolve_absolute(stripped, parsed, page)

        if stripped.startswith("#"):
            return LinkDecision(href=stripped, fragment=parsed.fragment, anchor_target=page.url)

        return self._resolve_internal(stripped, parsed, page)

    # --- External and own-domain absolute URLs ---

    def _resolve_absolute(self, href: str, parsed: SplitResult, page) -> LinkDecision:
        host = parsed.hostname or ""

        if UrlUtils.host_matches(host, self.own_domains):
            path = unquote(parsed.path or "/")
            if path.startswith("/docs/"):
                path = f"/{page.locale}{path}"
            resolution = self.index.resolve_url(path)
            if resolution.found:
                suggestion = UrlUtils.with_suffix(resolution.target, parsed.query, parsed.fragment)
                return LinkDecision(
                    href=href,
                    code=FlawCode.OWN_DOMAIN,
                    explanation="Can be made a relative link",
                    suggestion=suggestion,
                )
            return LinkDecision(
                href=href,
                code=FlawCode.UNRESOLVED,
                explanation=f"Can't resolve {href}",
            )

        if parsed.scheme == "http" and self.upgrade_policy.allows(host):
            return LinkDecision(
                href=href,
                code=FlawCode.HTTP_UPGRADE,
                explanation="Is currently http:// but can become https://",
                suggestion="https" + href[len("http"):],
                marker=LinkMarker.EXTERNAL,
            )

        return LinkDecision(href=href, marker=LinkMarker.EXTERNAL)

    # --- Site paths ---

    def _resolve_internal(self, href: str, parsed: SplitResult, page) -> LinkDecision:
        path = unquote(parsed.path)
        is_relative = not path.startswith("/")
        if is_relative:
            path = UrlUtils.absolutize(page.url, path)

        missing_prefix = path.startswith("/docs/")
        if missing_prefix:
            path = f"/{page.locale}{path}"

        query, fragment = parsed.query, parsed.fragment

        # Self-reference
        if UrlUtils.index_key(path) == UrlUtils.index_key(page.url):
            if fragment:
                return LinkDecision(
                    href=href,
                    code=FlawCode.SELF_LINK_ANCHOR,
                    explanation="No need for the pathname in anchor links if it's the same page",
                    suggestion=f"#{fragment}",
                    marker=LinkMarker.SELF,
                    fragment=fragment,
                )
            return LinkDecision(
                href=href,
                code=FlawCode.SELF_LINK,
                explanation="Link points to the page it's already on",
                marker=LinkMarker.SELF,
            )

        resolution = self.index.resolve_url(path)

        if resolution.found and resolution.redirected_to:
            return LinkDecision(
                href=href,
                code=FlawCode.REDIRECTED,
                explanation=f"Can't resolve {href}",
                suggestion=UrlUtils.with_suffix(resolution.redirected_to, query, fragment, lowercase_fragment=True),
                query=query,
                fragment=fragment,
            )

        if resolution.found:
            canonical = resolution.canonical_path
            if missing_prefix or canonical != UrlUtils.strip_trailing_slash(path):
                return LinkDecision(
                    href=href,
                    code=FlawCode.WRONG_CASE,
                    explanation=f"Can't resolve {href}",
                    suggestion=canonical + UrlUtils.build_suffix(query, fragment, lowercase_fragment=True),
                    query=query,
                    fragment=fragment,
                )

            rendered = path + UrlUtils.build_suffix(query, fragment) if is_relative else href
            entry = resolution.entry
            return LinkDecision(
                href=rendered,
                query=query,
                fragment=fragment,
                anchor_target=canonical if entry is not None and not entry.is_attachment else None,
            )

        locale, _ = UrlUtils.split_locale(path)
        fallback_path: Optional[str] = None
        if page.is_translated and locale and locale.lower() == page.locale.lower():
            fallback_path = path

        return LinkDecision(
            href=href,
            code=FlawCode.UNRESOLVED,
            explanation=f"Can't resolve {href}",
            marker=LinkMarker.NOT_CREATED,
            query=query,
            fragment=fragment,
            fallback_path=fallback_path,
        )
