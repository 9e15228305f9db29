from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .base import ShapeExtractor

if TYPE_CHECKING:
    from ..dispatch import ShapeDispatcher


class GroupExtractor(ShapeExtractor):
    """Group shapes. Children go back through the dispatcher, so nested
    pictures, charts and groups are handled exactly like top-level ones."""

    name = "GroupExtractor"
    version = "1.0.1"
    supported_types = frozenset({"Group"})
    shape_type = "Group"

    def __init__(self, bridge, dispatcher: Optional["ShapeDispatcher"] = None) -> None:
        super().__init__(bridge)
        self.dispatcher = dispatcher

    def default_payload(self) -> Dict[str, Any]:
        return {"groupProperties": {"shapes": []}}

    def _extract(self, node, options, context) -> Dict[str, Any]:
        if self.dispatcher is None:
            raise RuntimeError("group extractor is not bound to a dispatcher")

        children: List[Dict[str, Any]] = []
        for i, child in enumerate(self.bridge.shapes(node)):
            children.append(self.dispatcher.dispatch(child, options, context, i))

        return {
            "shapeType": self.shape_type,
            **self.basic_properties(node, context),
            "groupProperties": {"shapes": children},
        }
