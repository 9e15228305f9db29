from __future__ import annotations

from typing import Any, Dict

from ..formats import text_body
from .base import ShapeExtractor


def _has_text_body(node: Any) -> bool:
    if not getattr(node, "has_text_frame", False):
        return False
    el = getattr(node, "_element", None)
    if el is None:
        return True
    # Shape.text_frame adds an empty p:txBody when there is none
    return getattr(el, "txBody", None) is not None


class TextExtractor(ShapeExtractor):
    """Text boxes, and auto shapes or placeholders that carry a text body."""

    name = "TextExtractor"
    version = "1.1.0"
    supported_types = frozenset({"TextBox", "AutoShape", "Placeholder"})
    shape_type = "TextBox"

    def can_handle(self, node: Any) -> bool:
        try:
            return super().can_handle(node) and _has_text_body(node)
        except Exception:
            return False

    def output_type(self, node: Any) -> str:
        return self.bridge.type_tag(node)

    def default_payload(self) -> Dict[str, Any]:
        return {"text": "", "textFrame": {"text": "", "paragraphs": []}}

    def _extract(self, node, options, context) -> Dict[str, Any]:
        tag = self.output_type(node)
        body = text_body(node.text_frame, context.theme_colors)
        out: Dict[str, Any] = {
            "shapeType": tag,
            **self.basic_properties(node, context),
            "text": body["text"],
            "textFrame": body,
        }

        if tag == "AutoShape":
            try:
                out["autoShapeType"] = node.auto_shape_type.name
            except Exception:
                pass
        elif tag == "Placeholder":
            try:
                pf = node.placeholder_format
                out["placeholder"] = {"type": getattr(pf.type, "name", str(pf.type)), "idx": int(pf.idx)}
            except Exception:
                pass
        return out
