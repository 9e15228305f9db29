"""Adapter between the pipeline and the python-pptx object model.

The bridge is process-wide and read-only once initialized. Only its
one-time initialization is serialized; conversions never lock against
each other after that.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import DocumentOpenError

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"

# MSO_SHAPE_TYPE member name -> native type tag. Looked up by name so members
# missing from an installed python-pptx release are skipped.
_TAG_BY_MEMBER: Dict[str, str] = {
    "AUTO_SHAPE": "AutoShape",
    "CALLOUT": "AutoShape",
    "TEXT_BOX": "TextBox",
    "PLACEHOLDER": "Placeholder",
    "PICTURE": "Picture",
    "LINKED_PICTURE": "Picture",
    "TABLE": "Table",
    "CHART": "Chart",
    "GROUP": "Group",
    "LINE": "Line",
    "FREEFORM": "Freeform",
    "MEDIA": "Media",
    "WEB_VIDEO": "Media",
    "EMBEDDED_OLE_OBJECT": "OleObject",
    "LINKED_OLE_OBJECT": "OleObject",
    "OLE_CONTROL_OBJECT": "OleObject",
    "IGX_GRAPHIC": "SmartArt",
    "DIAGRAM": "SmartArt",
}

_DIAGRAM_URI_SUFFIX = "/drawingml/2006/diagram"


class EngineBridge:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._initialized = False
        self._tags: Dict[Any, str] = {}
        self._presentation_factory: Any = None
        self._qn: Any = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            from pptx import Presentation
            from pptx.enum.shapes import MSO_SHAPE_TYPE
            from pptx.oxml.ns import qn

            tags: Dict[Any, str] = {}
            for member_name, tag in _TAG_BY_MEMBER.items():
                member = getattr(MSO_SHAPE_TYPE, member_name, None)
                if member is not None:
                    tags[member] = tag
            self._tags = tags
            self._presentation_factory = Presentation
            self._qn = qn
            self._initialized = True
            logger.debug("engine bridge initialized (%d shape type tags)", len(tags))

    def open_document(self, path: str | Path) -> Any:
        self.initialize()
        p = Path(path)
        if not p.exists():
            raise DocumentOpenError(f"input not found: {p}")
        try:
            return self._presentation_factory(str(p))
        except Exception as exc:
            raise DocumentOpenError(f"failed to open presentation: {p}", exc) from exc

    def slides(self, document: Any) -> List[Any]:
        return list(document.slides)

    def shapes(self, container: Any) -> List[Any]:
        """Shapes of a slide or group, in z-order (back to front)."""
        return list(container.shapes)

    def type_tag(self, shape: Any) -> str:
        """Native type tag for a shape; ``Unknown`` for anything unreadable."""
        self.initialize()
        try:
            if getattr(shape, "has_chart", False):
                return "Chart"
            if getattr(shape, "has_table", False):
                return "Table"
            st = shape.shape_type
            tag = self._tags.get(st) if st is not None else None
            el = getattr(shape, "_element", None)
            if el is not None and tag in ("Picture", "Placeholder") and self._is_audio_pic(el):
                return "Media"
            if tag == "Placeholder" and el is not None and el.tag == self._qn("p:pic"):
                return "Picture"
            if tag is None and el is not None and self._is_diagram_frame(el):
                return "SmartArt"
        except Exception:
            return UNKNOWN
        return tag or UNKNOWN

    def _is_audio_pic(self, el: Any) -> bool:
        # python-pptx has no audio proxy; an audio p:pic reads as a Picture
        return el.find(".//" + self._qn("a:audioFile")) is not None

    def _is_diagram_frame(self, el: Any) -> bool:
        try:
            for gd in el.iter(self._qn("a:graphicData")):
                return str(gd.get("uri", "")).endswith(_DIAGRAM_URI_SUFFIX)
        except Exception:
            return False
        return False


_default_bridge: Optional[EngineBridge] = None
_default_lock = threading.Lock()


def get_bridge() -> EngineBridge:
    """Shared process-wide bridge."""
    global _default_bridge
    if _default_bridge is None:
        with _default_lock:
            if _default_bridge is None:
                _default_bridge = EngineBridge()
    return _default_bridge
