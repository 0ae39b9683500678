from enum import Enum
from typing import Optional, List

from pydantic import BaseModel, Field


class BrokenLinkFlaw(BaseModel):
    """
    A single broken link or broken anchor occurrence.
    `line`/`column` point into the original document source.
    """
    id: str
    href: str
    line: Optional[int] = None
    column: Optional[int] = None
    explanation: str
    suggestion: Optional[str] = None
    fixable: bool = False


class ImageFlaw(BaseModel):
    """A single problematic <img> occurrence. Repeated sources are never merged."""
    id: str
    src: str
    line: Optional[int] = None
    column: Optional[int] = None
    explanation: str
    suggestion: Optional[str] = None
    fixable: bool = False
    external_image: bool = False


class DocumentFlaws(BaseModel):
    """All flaws of one document, per category, in document order."""
    broken_links: List[BrokenLinkFlaw] = Field(default_factory=list)
    images: List[ImageFlaw] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.broken_links) + len(self.images)


class FlawCode:
    """Machine-readable flaw codes, one per explanation."""
    NOT_VALID_URL = "NOT_VALID_URL"
    HTTP_UPGRADE = "HTTP_UPGRADE"
    OWN_DOMAIN = "OWN_DOMAIN"
    SELF_LINK = "SELF_LINK"
    SELF_LINK_ANCHOR = "SELF_LINK_ANCHOR"
    WRONG_CASE = "WRONG_CASE"
    REDIRECTED = "REDIRECTED"
    UNRESOLVED = "UNRESOLVED"
    ANCHOR_NOT_LOWERCASE = "ANCHOR_NOT_LOWERCASE"
    ANCHOR_UNRESOLVED = "ANCHOR_UNRESOLVED"
    EMPTY_IMAGE_SRC = "EMPTY_IMAGE_SRC"
    EXTERNAL_IMAGE = "EXTERNAL_IMAGE"
    IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"


class LinkMarker(str, Enum):
    """How a link is rendered to make its state visible."""
    EXTERNAL = "external"
    SELF = "self"
    NOT_CREATED = "page-not-created"
    LOCALE_FALLBACK = "locale-fallback"
    INVALID = "invalid"


class LinkDecision(BaseModel):
    """
    Outcome of resolving one link: what to render and, optionally, a flaw.
    `href` of None renders the link inert.
    """
    href: Optional[str]
    code: Optional[str] = None
    explanation: Optional[str] = None
    suggestion: Optional[str] = None
    marker: Optional[LinkMarker] = None
    title: Optional[str] = None

    query: str = ""
    fragment: str = ""
    # Site path whose anchors the fragment is checked against.
    anchor_target: Optional[str] = None
    # Unresolved path in the document's own locale, eligible for default-locale fallback.
    fallback_path: Optional[str] = None

    @property
    def has_flaw(self) -> bool:
        return self.explanation is not None

    @property
    def fixable(self) -> bool:
        return self.suggestion is not None


class ImageDecision(BaseModel):
    """Outcome of checking one <img>: the src to render and, optionally, a flaw."""
    src: str
    code: Optional[str] = None
    explanation: Optional[str] = None
    suggestion: Optional[str] = None
    external_image: bool = False
    # Site path of the local file, used for dimension probing.
    file_path: Optional[str] = None

    @property
    def has_flaw(self) -> bool:
        return self.explanation is not None
