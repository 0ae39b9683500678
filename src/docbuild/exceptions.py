# src/docbuild/exceptions.py
"""
Build-level exceptions.

Only structural failures are raised: a document whose source tree cannot be
normalized (`ParseFailure`, fatal for that document) and a URL index that
cannot be built (`IndexUnavailable`, fatal for the whole build). Problems
with individual links, anchors and images never raise; they become flaws.
"""
from typing import Optional


class BuildError(Exception):
    """Base class for build errors. Carries the document URL when known."""

    def __init__(self, message: Optional[str] = None, *, url: Optional[str] = None):
        super().__init__(message or "")
        self.url = url

    def __str__(self) -> str:
        base = super().__str__()
        if self.url:
            return f"{base} (url={self.url})"
        return base


class ParseFailure(BuildError):
    """The document's rendered tree is malformed; only this document fails."""


class IndexUnavailable(BuildError):
    """The URL index could not be built; resolution cannot proceed."""
