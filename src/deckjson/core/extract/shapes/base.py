"""Base contract shared by every shape extractor.

``ShapeExtractor.extract`` is the fault boundary of a single shape: whatever
goes wrong inside ``_extract`` is logged and returned as a ``Failure`` that
carries a typed default payload, so the caller can keep going with the
sibling shapes.
"""
from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, FrozenSet

from ..formats import effects_from_sppr, emu, fill_from_parent, line_from_sppr
from ..options import ExtractionOptions
from ..result import ExtractionResult, Failure, Success, elapsed_since

if TYPE_CHECKING:
    from ..bridge import EngineBridge
    from ..context import ExtractionContext

logger = logging.getLogger(__name__)

SIMPLE = "simple"
COMPLEX = "complex"


class ShapeExtractor(ABC):
    name: str = "ShapeExtractor"
    version: str = "1.0.0"
    supported_types: FrozenSet[str] = frozenset()
    # diagnostics only, never used for dispatch
    complexity: str = SIMPLE
    # shapeType marker written to the schema
    shape_type: str = "Unknown"

    def __init__(self, bridge: "EngineBridge") -> None:
        self.bridge = bridge

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def can_handle(self, node: Any) -> bool:
        try:
            return self.bridge.type_tag(node) in self.supported_types
        except Exception:
            return False

    def extract(self, node: Any, options: ExtractionOptions, context: "ExtractionContext") -> ExtractionResult:
        start = time.perf_counter()
        if not self.can_handle(node):
            message = f"shape is not a valid {self.shape_type} node"
            elapsed = elapsed_since(start)
            self.log_failure("extract", message, elapsed, context.path)
            return Failure(message, elapsed, data=self.failure_payload(node, context))

        try:
            data = self._extract(node, options, context)
        except Exception as exc:
            elapsed = elapsed_since(start)
            self.log_failure("extract", exc, elapsed, context.path)
            return Failure(str(exc) or type(exc).__name__, elapsed, data=self.failure_payload(node, context))

        elapsed = elapsed_since(start)
        self.log_success("extract", elapsed)
        return Success(data, elapsed)

    @abstractmethod
    def _extract(self, node: Any, options: ExtractionOptions, context: "ExtractionContext") -> Dict[str, Any]:
        """Build the schema Shape for a node this extractor can handle."""

    def default_payload(self) -> Dict[str, Any]:
        """Type-specific payload used when extraction fails."""
        return {}

    def output_type(self, node: Any) -> str:
        return self.shape_type

    def failure_payload(self, node: Any, context: "ExtractionContext") -> Dict[str, Any]:
        try:
            shape_type = self.output_type(node)
        except Exception:
            shape_type = self.shape_type
        return {
            "shapeType": shape_type,
            **self.basic_properties(node, context),
            **self.default_payload(),
        }

    def metadata(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "supportedShapeTypes": sorted(self.supported_types),
            "complexity": self.complexity,
        }

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def basic_properties(self, node: Any, context: "ExtractionContext") -> Dict[str, Any]:
        """Common properties, read the same way for every shape kind.

        Every field falls back to its default on its own, so this never
        raises on a malformed node.
        """
        theme = context.theme_colors
        props: Dict[str, Any] = {"id": "", "name": "", "hidden": False}

        try:
            props["id"] = str(node.shape_id)
        except Exception:
            pass
        try:
            props["name"] = str(node.name or "")
        except Exception:
            pass

        geometry = {"x": 0, "y": 0, "width": 0, "height": 0, "rotation": 0.0}
        for key, attr in (("x", "left"), ("y", "top"), ("width", "width"), ("height", "height")):
            try:
                geometry[key] = emu(getattr(node, attr, 0), clamp=key in ("width", "height"))
            except Exception:
                pass
        try:
            geometry["rotation"] = float(getattr(node, "rotation", 0) or 0)
        except Exception:
            pass
        props["geometry"] = geometry

        element = getattr(node, "_element", None)
        try:
            cNvPr = element._nvXxPr.cNvPr
            props["hidden"] = str(cNvPr.get("hidden", "0")).lower() in ("1", "true")
            descr = cNvPr.get("descr")
            if descr:
                props["alternativeText"] = descr
        except Exception:
            pass

        sppr = None
        try:
            sppr = getattr(element, "spPr", None)
        except Exception:
            pass
        if sppr is not None:
            try:
                fill = fill_from_parent(sppr, theme)
                if fill is not None:
                    props["fillFormat"] = fill
            except Exception:
                pass
            try:
                line = line_from_sppr(sppr, theme)
                if line is not None:
                    props["lineFormat"] = line
            except Exception:
                pass
            try:
                effects = effects_from_sppr(sppr)
                if effects:
                    props["effects"] = effects
            except Exception:
                pass

        try:
            action = node.click_action
            address = action.hyperlink.address
            if address:
                props["hyperlink"] = {"address": address, "action": getattr(action.action, "name", str(action.action))}
        except Exception:
            pass

        return props

    def log_success(self, what: str, elapsed_ms: float) -> None:
        logger.debug("%s - %s successful (%.1fms)", self.name, what, elapsed_ms)

    def log_failure(self, what: str, error: Any, elapsed_ms: float, path: str = "") -> None:
        logger.warning(
            "%s - %s failed at %s after %.1fms: %s",
            self.name,
            what,
            path or "-",
            elapsed_ms,
            error,
            exc_info=isinstance(error, BaseException) and logger.isEnabledFor(logging.DEBUG),
        )
