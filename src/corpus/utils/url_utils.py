# src/corpus/utils/url_utils.py
import re
import logging
from typing import Optional, Tuple
from urllib.parse import urlsplit, urljoin, SplitResult

logger = logging.getLogger(__name__)

# Hostnames: dot separated labels of letters, digits, hyphens (IDN allowed).
_HOST_PATTERN = re.compile(r"^(?:[\w-]+\.)*[\w-]+\.?$", re.UNICODE)

# Schemes that are never resolved against the site.
PASSTHROUGH_SCHEMES = ("mailto", "tel", "javascript", "data", "irc", "news", "ftp", "sms")


class UrlUtils:
    """A collection of static methods for site URL parsing and manipulation."""

    @staticmethod
    def split_href(href: str) -> SplitResult:
        """
        Splits a raw href into its URL components.

        Raises:
            ValueError: If the href cannot be parsed as a URL or path.
        """
        if any(ch in href for ch in ("\n", "\r", "\t")):
            raise ValueError(f"Control characters in URL: {href!r}")

        parsed = urlsplit(href)

        if parsed.scheme in ("http", "https") or href.startswith("//"):
            UrlUtils.validate_absolute(parsed)
        return parsed

    @staticmethod
    def validate_absolute(parsed: SplitResult) -> None:
        """Checks that an absolute http(s) URL has a usable host and port."""
        if not parsed.netloc:
            raise ValueError("Absolute URL without a host")

        hostname = parsed.hostname
        if not hostname or not _HOST_PATTERN.match(hostname):
            raise ValueError(f"Invalid hostname: {hostname!r}")

        # Accessing .port raises ValueError on non-numeric or out of range ports
        _ = parsed.port

    @staticmethod
    def is_absolute(parsed: SplitResult) -> bool:
        """True for scheme-qualified or protocol-relative URLs."""
        return bool(parsed.scheme) or bool(parsed.netloc)

    @staticmethod
    def is_passthrough(href: str) -> bool:
        """True for hrefs with a non-web scheme (mailto:, tel:, ...)."""
        scheme, sep, _ = href.partition(":")
        return bool(sep) and scheme.lower() in PASSTHROUGH_SCHEMES

    @staticmethod
    def strip_trailing_slash(path: str) -> str:
        """Removes trailing slashes, keeping a lone '/'."""
        stripped = path.rstrip("/")
        return stripped or "/"

    @staticmethod
    def index_key(path: str) -> str:
        """The case-insensitive lookup key used by the URL index."""
        return UrlUtils.strip_trailing_slash(path).lower()

    @staticmethod
    def absolutize(doc_url: str, href: str) -> str:
        """
        Resolves a document-relative href against the document's own folder.

        Documents are served without a trailing slash, so 'dino.svg' on
        '/en-US/docs/Web/Images/Linked_to' must become
        '/en-US/docs/Web/Images/Linked_to/dino.svg'.
        """
        return urljoin(UrlUtils.strip_trailing_slash(doc_url) + "/", href)

    @staticmethod
    def split_locale(path: str) -> Tuple[Optional[str], str]:
        """
        Splits a site path into its locale segment and the remainder.

        '/en-US/docs/Web' -> ('en-US', 'docs/Web')
        """
        parts = path.lstrip("/").split("/", 1)
        if len(parts) < 2 or not parts[0]:
            return None, path.lstrip("/")
        return parts[0], parts[1]

    @staticmethod
    def with_locale(path: str, locale: str) -> str:
        """Replaces the locale segment of a site path."""
        _, rest = UrlUtils.split_locale(path)
        return f"/{locale}/{rest}"

    @staticmethod
    def build_suffix(query: str, fragment: str, lowercase_fragment: bool = False) -> str:
        """Re-assembles the '?query#fragment' tail of a URL."""
        suffix = ""
        if query:
            suffix += f"?{query}"
        if fragment:
            suffix += "#" + (fragment.lower() if lowercase_fragment else fragment)
        return suffix

    @staticmethod
    def with_suffix(target: str, query: str, fragment: str, lowercase_fragment: bool = False) -> str:
        """
        Appends a link's '?query#fragment' to a resolved target path. A target
        that carries its own fragment keeps it only when the link has none.
        """
        path, _, target_fragment = target.partition("#")
        suffix = UrlUtils.build_suffix(query, fragment, lowercase_fragment=lowercase_fragment)
        if not fragment and target_fragment:
            suffix += f"#{target_fragment}"
        return path + suffix

    @staticmethod
    def host_matches(host: str, candidates) -> bool:
        """
        Checks if a host equals one of the candidates or is a subdomain of one.
        A leading 'www.' on either side is ignored.
        """
        host = host.lower().removeprefix("www.")
        for candidate in candidates:
            candidate = candidate.lower().removeprefix("www.")
            if host == candidate or host.endswith(f".{candidate}"):
                return True
        return False
