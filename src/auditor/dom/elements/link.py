from typing import List, Optional, Tuple

from bs4 import Tag

from auditor.model import FlawCode, LinkDecision, LinkMarker
from ..core import SourceNode, ElementDefinition, AuditResult, audit_spec, add_class


class LinkNode(SourceNode):
    """
    Data model for anchor (<a href>) tags.
    `macro_source` holds the macro call that generated the link, if any.
    """
    kind: str = "link"
    href: str = ""
    text: str = ""
    macro_source: Optional[str] = None

    def source_needle(self) -> Optional[Tuple[str, str]]:
        if self.macro_source:
            return self.macro_source, "macro"
        if self.href:
            return self.href, "href"
        return None


def parse_link(tag: Tag) -> Optional[LinkNode]:
    """Parses an <a> tag into a LinkNode. Anchors without href (<a name>) are not links."""
    if not tag.has_attr("href"):
        return None
    return LinkNode(
        href=tag.get("href") or "",
        text=tag.get_text(" ", strip=True)[:50],
        macro_source=tag.get("data-flaw-src"),
        element=tag,
    )


def apply_link_decision(node: LinkNode, decision: LinkDecision, ctx) -> None:
    """Mirrors a link decision onto the rendered element."""
    tag = node.element
    if tag is None:
        return

    if decision.href is None:
        # Invalid URLs render inert
        del tag["href"]
    else:
        href = decision.href
        if node.macro_source and decision.suggestion and decision.code in (FlawCode.REDIRECTED, FlawCode.WRONG_CASE):
            href = decision.suggestion
        if href.startswith(("/", "#")):
            href = ctx.anchor_normalizer.lowercase_fragment(href)
        tag["href"] = href

    marker = decision.marker
    if marker == LinkMarker.EXTERNAL:
        add_class(tag, "external")
        tag["target"] = "_blank"
    elif marker == LinkMarker.SELF:
        tag["aria-current"] = "page"
    elif marker == LinkMarker.NOT_CREATED:
        add_class(tag, LinkMarker.NOT_CREATED.value)
        tag["title"] = ctx.strings.get(ctx.page.locale, "page_not_created")
    elif marker == LinkMarker.LOCALE_FALLBACK:
        add_class(tag, ctx.settings.fallback_class)
        if decision.title:
            tag["title"] = decision.title


# --- AUDIT RULES ---


@audit_spec(codes=[
    FlawCode.NOT_VALID_URL, FlawCode.HTTP_UPGRADE, FlawCode.OWN_DOMAIN,
    FlawCode.SELF_LINK, FlawCode.SELF_LINK_ANCHOR, FlawCode.WRONG_CASE,
    FlawCode.REDIRECTED, FlawCode.UNRESOLVED,
    FlawCode.ANCHOR_NOT_LOWERCASE, FlawCode.ANCHOR_UNRESOLVED,
])
def check_link(node: LinkNode, ctx) -> List[AuditResult]:
    """
    Resolves the link, lets the locale fallback refine unresolved targets,
    checks the fragment, and applies the outcome to the rendered element.
    """
    decision = ctx.link_resolver.resolve(node.href, ctx.page)
    decision = ctx.locale_fallback.refine(decision, ctx.page)
    decision = ctx.anchor_normalizer.check_fragment(node.href, decision, ctx.page)

    apply_link_decision(node, decision, ctx)

    if not decision.has_flaw:
        return []
    return [AuditResult(
        category="broken_links",
        code=decision.code,
        subject=node.href,
        explanation=decision.explanation,
        suggestion=decision.suggestion,
    )]


# --- ELEMENT DEFINITION ---

DEFINITION = ElementDefinition(
    tag_names=["a"],
    model=LinkNode,
    parser=parse_link,
    audit_rules=[check_link],
)
