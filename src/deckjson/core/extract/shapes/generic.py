from __future__ import annotations

from typing import Any, Dict

from .base import ShapeExtractor


class GenericExtractor(ShapeExtractor):
    """Fallback for any node: common properties only.

    Registered last. A shape type the pipeline has never seen still gets a
    schema entry instead of failing the slide.
    """

    name = "GenericExtractor"
    supported_types = frozenset({"*"})
    shape_type = "Unknown"

    def can_handle(self, node: Any) -> bool:
        return True

    def output_type(self, node: Any) -> str:
        return self.bridge.type_tag(node)

    def _extract(self, node, options, context) -> Dict[str, Any]:
        return {
            "shapeType": self.output_type(node),
            **self.basic_properties(node, context),
        }
