# src/auditor/dom/models.py
from typing import Any, List, Optional

from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel, ConfigDict, Field

from .core import SourceNode


class NormalizedDocument(BaseModel):
    """
    Represents a parsed document.

    Holds the mutable rendered tree and the flat, document-ordered list of
    typed nodes found in it. Resolution decisions are applied to the tree
    through each node's element reference.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    url: str
    locale: str
    nodes: List[SourceNode] = Field(default_factory=list)
    soup: Optional[BeautifulSoup] = Field(default=None, exclude=True, repr=False)

    def of_kind(self, kind: str) -> List[Any]:
        return [n for n in self.nodes if n.kind == kind]

    @property
    def links(self) -> List[Any]:
        return self.of_kind("link")

    @property
    def images(self) -> List[Any]:
        return self.of_kind("image")

    @property
    def headings(self) -> List[Any]:
        return self.of_kind("heading")

    @property
    def root(self) -> Optional[Tag]:
        """The element whose children form the article body."""
        if self.soup is None:
            return None
        return self.soup.body or self.soup

    def render(self) -> str:
        """Serializes the (possibly rewritten) article body."""
        root = self.root
        if root is None:
            return ""
        return root.decode_contents() if root is not self.soup else str(self.soup)
