# src/corpus/model.py (Corpus Layer)
import logging
from typing import Optional, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class CorpusDocument(BaseModel):
    """
    A known document as listed by the content loader.
    Only the bits the URL index needs: where it lives and what it contains.
    """
    locale: str
    slug: str
    title: str = ""
    # Heading ids of the document, when the loader has them.
    anchors: Optional[List[str]] = None
    # Attachment file names living in the document's folder.
    files: List[str] = Field(default_factory=list)

    @field_validator("slug", mode="before")
    @classmethod
    def _normalize_slug(cls, v):
        if v is None:
            raise ValueError("slug is required")
        s = str(v).strip().strip("/")
        if not s:
            raise ValueError("slug cannot be empty")
        return s

    @field_validator("locale", mode="before")
    @classmethod
    def _normalize_locale(cls, v):
        s = str(v or "").strip()
        if not s:
            raise ValueError("locale cannot be empty")
        return s

    @property
    def url(self) -> str:
        return f"/{self.locale}/docs/{self.slug}"


class RedirectRecord(BaseModel):
    """A single moved-page pointer. `to_url` may be an absolute external URL."""
    from_url: str
    to_url: str

    @field_validator("from_url", "to_url", mode="before")
    @classmethod
    def _strip(cls, v):
        s = str(v or "").strip()
        if not s:
            raise ValueError("redirect URLs cannot be empty")
        return s


class UrlIndexEntry(BaseModel):
    """
    One immutable row of the URL index.
    `path` always holds the canonical casing; lookups are case-insensitive.
    """
    model_config = ConfigDict(frozen=True)

    locale: str
    path: str
    exists: bool
    redirect_target: Optional[str] = None
    title: str = ""
    is_attachment: bool = False
    anchors: Optional[Tuple[str, ...]] = None

    def find_anchor(self, fragment: str) -> Optional[str]:
        """Returns the anchor matching `fragment` case-insensitively, if any."""
        if self.anchors is None:
            return None
        wanted = fragment.lower()
        for anchor in self.anchors:
            if anchor.lower() == wanted:
                return anchor
        return None


class Resolution(BaseModel):
    """Result of `UrlIndex.resolve`."""
    model_config = ConfigDict(frozen=True)

    found: bool
    canonical_path: Optional[str] = None
    redirected_to: Optional[str] = None
    entry: Optional[UrlIndexEntry] = None

    @property
    def target(self) -> Optional[str]:
        """The path a link should point at: the redirect target or the canonical path."""
        return self.redirected_to or self.canonical_path
