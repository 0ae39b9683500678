# src/corpus/services/redirect_resolver_service.py
import logging
from typing import Dict, Optional, Tuple

from corpus.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)


class RedirectResolverService:
    """
    Determines the final endpoint of a redirect chain.

    The redirect map is keyed case-insensitively (see `UrlUtils.index_key`).
    Each call keeps its own visited-set, so nothing is shared between lookups.
    """

    def __init__(self, redirect_map: Dict[str, str], max_redirects: int = 10):
        self.redirect_map = redirect_map
        self.max_redirects = max_redirects

    def resolve_final_url(self, initial_url: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Follows redirects for a given URL and returns the final URL.

        Args:
            initial_url: The URL to start with.

        Returns:
            Tuple[Optional[str], Optional[str]]: The final URL and an error message (if any).
            A cycle or a chain longer than `max_redirects` yields (None, message).
        """
        current = initial_url
        visited = {UrlUtils.index_key(current)}
        hops = 0

        while True:
            key = UrlUtils.index_key(current)
            target = self.redirect_map.get(key)
            if target is None:
                break

            hops += 1
            if hops > self.max_redirects:
                error_message = f"Redirect chain exceeds {self.max_redirects} hops"
                logger.warning("Error resolving redirect %s: %s", initial_url, error_message)
                return None, error_message

            # External targets end the chain.
            if target.startswith(("http://", "https://")):
                current = target
                break

            target_key = UrlUtils.index_key(target)
            if target_key in visited:
                error_message = f"Redirect cycle at {target}"
                logger.warning("Error resolving redirect %s: %s", initial_url, error_message)
                return None, error_message

            visited.add(target_key)
            current = target

        if hops:
            logger.debug("Redirect resolved after %d hops: %s -> %s", hops, initial_url, current)
        return current, None
