"""Priority-ordered extractor registry.

The first extractor whose ``can_handle`` accepts a node wins, so the list
runs from most specific to the generic fallback.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from .bridge import EngineBridge
from .context import ExtractionContext
from .options import ExtractionOptions
from .schema import UNKNOWN_SHAPE_TYPE
from .shapes import (
    ChartExtractor,
    GenericExtractor,
    GroupExtractor,
    MediaExtractor,
    OleObjectExtractor,
    PictureExtractor,
    ShapeExtractor,
    SmartArtExtractor,
    TableExtractor,
    TextExtractor,
)

logger = logging.getLogger(__name__)


class ShapeDispatcher:
    def __init__(self, bridge: EngineBridge, extractors: Iterable[ShapeExtractor] = ()) -> None:
        self.bridge = bridge
        self.extractors: List[ShapeExtractor] = list(extractors)

    def register(self, extractor: ShapeExtractor, *, before: Optional[str] = None) -> None:
        """Append an extractor, or insert it ahead of the one named ``before``."""
        if before is not None:
            for i, ex in enumerate(self.extractors):
                if ex.name == before:
                    self.extractors.insert(i, extractor)
                    return
            raise KeyError(f"no extractor named {before!r}")
        self.extractors.append(extractor)

    def select(self, node: Any) -> Optional[ShapeExtractor]:
        for ex in self.extractors:
            if ex.can_handle(node):
                return ex
        return None

    def dispatch(
        self,
        node: Any,
        options: ExtractionOptions,
        context: ExtractionContext,
        index: int,
    ) -> Dict[str, Any]:
        """Schema entry for one shape. Never raises for a node-level fault."""
        with context.at(f"shape[{index}]"):
            tag = self.bridge.type_tag(node)
            if tag == "Picture":
                # counted on sight; a failed picture still leaves a Picture placeholder
                context.stats.bump("image_count")

            extractor = self.select(node)
            if extractor is None:
                message = f"no extractor accepts shape type {tag}"
                logger.warning("%s at %s", message, context.path)
                context.record_error(context.path, "ShapeDispatcher", message)
                shape: Dict[str, Any] = {
                    "shapeType": UNKNOWN_SHAPE_TYPE,
                    "extractionError": {"extractor": None, "message": message},
                }
            else:
                result = extractor.extract(node, options, context)
                if result.ok:
                    shape = dict(result.data)
                else:
                    shape = dict(result.data or {"shapeType": extractor.shape_type})
                    shape["extractionError"] = {"extractor": extractor.name, "message": result.message}
                    context.record_error(context.path, extractor.name, result.message)

            shape.setdefault("shapeType", UNKNOWN_SHAPE_TYPE)
            shape["zOrder"] = index
            return shape

    def describe(self) -> List[Dict[str, Any]]:
        return [ex.metadata() for ex in self.extractors]


def build_default_dispatcher(bridge: EngineBridge) -> ShapeDispatcher:
    dispatcher = ShapeDispatcher(bridge)
    for ex in (
        ChartExtractor(bridge),
        TableExtractor(bridge),
        PictureExtractor(bridge),
        GroupExtractor(bridge, dispatcher),
        TextExtractor(bridge),
        MediaExtractor(bridge),
        OleObjectExtractor(bridge),
        SmartArtExtractor(bridge),
        GenericExtractor(bridge),
    ):
        dispatcher.register(ex)
    return dispatcher
