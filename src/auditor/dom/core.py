from typing import Any, List, Callable, Type, Optional, Set, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field
from bs4 import Tag


def audit_spec(codes: List[str]):
    """
    Decorator to declare which flaw codes a specific audit rule function returns.
    Facilitates auto-discovery by the DOMRegistry.
    """
    def decorator(func):
        func.defined_codes = codes
        return func
    return decorator


def add_class(tag: Tag, *names: str) -> None:
    """Adds CSS classes to an element, keeping existing ones and their order."""
    existing = tag.get("class") or []
    if isinstance(existing, str):
        existing = existing.split()
    classes = list(existing)
    for name in names:
        if name and name not in classes:
            classes.append(name)
    tag["class"] = classes


class SourceNode(BaseModel):
    """
    Base data model for a typed node of the normalized document.

    Keeps a reference to the bs4 element it was built from so that resolution
    decisions can be applied to the rendered tree. The reference is never
    serialized.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    kind: str
    node_id: str = ""
    line: Optional[int] = None
    column: Optional[int] = None
    element: Optional[Tag] = Field(default=None, exclude=True, repr=False)

    def source_needle(self) -> Optional[Tuple[str, str]]:
        """
        (needle, kind) to look up in the original source, or None when the
        node is located by its position in the rendered tree.
        """
        return None


class AuditResult(BaseModel):
    """A flaw finding produced by an audit rule, before the aggregator gives it an id."""
    category: str  # 'broken_links' or 'images'
    code: str
    subject: str  # the href or src as written
    explanation: str
    suggestion: Optional[str] = None
    external_image: bool = False

    @property
    def fixable(self) -> bool:
        return self.suggestion is not None


class ElementDefinition:
    """
    Configuration object binding HTML tags to a node model, parser, and rules.
    """

    def __init__(
            self,
            tag_names: Sequence[str],
            model: Type[SourceNode],
            parser: Callable[[Tag], Optional[SourceNode]],
            audit_rules: Optional[List[Callable[[Any, Any], List[AuditResult]]]] = None,
            possible_codes: Optional[List[str]] = None,
            matcher: Optional[Callable[[Tag], bool]] = None,
            priority: int = 0,
    ):
        self.tag_names = list(tag_names)
        self.model = model
        self.parser = parser
        self.audit_rules = audit_rules or []
        self.matcher = matcher
        self.priority = priority

        # --- Auto-Discovery of Flaw Codes ---
        final_codes: Set[str] = set(possible_codes or [])

        for rule in self.audit_rules:
            if hasattr(rule, 'defined_codes'):
                final_codes.update(rule.defined_codes)

        self.codes = sorted(list(final_codes))

    def accepts(self, tag: Tag) -> bool:
        """True if this definition applies to the given element."""
        if tag.name not in self.tag_names:
            return False
        return self.matcher(tag) if self.matcher else True
