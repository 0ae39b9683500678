from typing import List, Optional, Tuple

from bs4 import Tag

from auditor.model import FlawCode
from ..core import SourceNode, ElementDefinition, AuditResult, audit_spec


class ImageNode(SourceNode):
    kind: str = "image"
    src: str = ""

    def source_needle(self) -> Optional[Tuple[str, str]]:
        return (self.src, "src") if self.src else None


def parse_image(tag: Tag) -> ImageNode:
    return ImageNode(src=tag.get("src") or "", element=tag)


# --- RULES ---

@audit_spec(codes=[
    FlawCode.EMPTY_IMAGE_SRC, FlawCode.HTTP_UPGRADE, FlawCode.OWN_DOMAIN,
    FlawCode.EXTERNAL_IMAGE, FlawCode.IMAGE_NOT_FOUND,
])
def check_image(node: ImageNode, ctx) -> List[AuditResult]:
    decision = ctx.image_resolver.resolve(node.src, ctx.page)

    tag = node.element
    if tag is not None:
        tag["loading"] = "lazy"
        if decision.file_path and not decision.has_flaw:
            tag["src"] = decision.src

        # Only fill in what the author left out
        if decision.file_path and not (tag.get("width") and tag.get("height")):
            size = ctx.probe_image(decision.file_path)
            if size:
                width, height = size
                if not tag.get("width"):
                    tag["width"] = str(width)
                if not tag.get("height"):
                    tag["height"] = str(height)

    if not decision.has_flaw:
        return []
    return [AuditResult(
        category="images",
        code=decision.code,
        subject=node.src,
        explanation=decision.explanation,
        suggestion=decision.suggestion,
        external_image=decision.external_image,
    )]


# --- DEFINITION ---
DEFINITION = ElementDefinition(
    tag_names=["img"],
    model=ImageNode,
    parser=parse_image,
    audit_rules=[check_image],
)
