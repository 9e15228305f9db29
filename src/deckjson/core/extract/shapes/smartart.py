"""SmartArt diagrams.

A diagram frame only references its parts (``dgm:relIds``); the node text
lives in the diagram data part as ``dgm:pt`` points, and the tree shape in
its ``parOf`` connections.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pptx.oxml import parse_xml
from pptx.oxml.ns import qn

from .base import COMPLEX, ShapeExtractor

logger = logging.getLogger(__name__)

_DGM_NS = "http://schemas.openxmlformats.org/drawingml/2006/diagram"
_NS = {"dgm": _DGM_NS, "a": "http://schemas.openxmlformats.org/drawingml/2006/main"}

# dgm:relIds attribute -> output key of the definition it points at
_DEFINITION_RELS = (("lo", "layout"), ("qs", "quickStyle"), ("cs", "colorStyle"))

# point types that carry user content
_CONTENT_POINTS = ("node", "asst")


def _dgm(tag: str) -> str:
    return f"{{{_DGM_NS}}}{tag}"


def diagram_nodes(data_root: Any) -> List[Dict[str, Any]]:
    """Content points of a diagram data model with text and tree level."""
    points = data_root.findall("dgm:ptLst/dgm:pt", _NS)
    kinds = {pt.get("modelId"): pt.get("type", "node") for pt in points}

    parent_of: Dict[str, str] = {}
    for cxn in data_root.findall("dgm:cxnLst/dgm:cxn", _NS):
        if cxn.get("type", "parOf") == "parOf" and cxn.get("destId"):
            parent_of[cxn.get("destId")] = cxn.get("srcId")

    def level(model_id: str) -> int:
        depth = 0
        seen = {model_id}
        parent = parent_of.get(model_id)
        while parent is not None and parent not in seen and kinds.get(parent) in _CONTENT_POINTS:
            depth += 1
            seen.add(parent)
            parent = parent_of.get(parent)
        return depth

    nodes: List[Dict[str, Any]] = []
    for pt in points:
        if pt.get("type", "node") not in _CONTENT_POINTS:
            continue
        paragraphs = []
        for p in pt.iterfind("dgm:t/a:p", _NS):
            paragraphs.append("".join(t.text or "" for t in p.iterfind(".//a:t", _NS)))
        nodes.append(
            {
                "id": pt.get("modelId"),
                "text": "\n".join(paragraphs),
                "level": level(pt.get("modelId")),
                "position": len(nodes),
            }
        )
    return nodes


class SmartArtExtractor(ShapeExtractor):
    name = "SmartArtExtractor"
    version = "1.0.0"
    supported_types = frozenset({"SmartArt"})
    complexity = COMPLEX
    shape_type = "SmartArt"

    def default_payload(self) -> Dict[str, Any]:
        return {"smartArtProperties": {"layout": None, "nodes": []}}

    def _extract(self, node, options, context) -> Dict[str, Any]:
        rel_ids = next(node._element.iter(_dgm("relIds")), None)
        if rel_ids is None:
            raise ValueError("diagram frame has no dgm:relIds")

        data_rid = rel_ids.get(qn("r:dm"))
        data_part = node.part.related_part(data_rid)
        props: Dict[str, Any] = {
            "layout": None,
            "nodes": diagram_nodes(parse_xml(data_part.blob)),
        }
        for attr, key in _DEFINITION_RELS:
            unique_id = self._definition_id(node, rel_ids.get(qn(f"r:{attr}")))
            if unique_id is not None or key == "layout":
                props[key] = unique_id

        text = "\n".join(n["text"] for n in props["nodes"] if n["text"])
        return {
            "shapeType": self.shape_type,
            **self.basic_properties(node, context),
            "text": text,
            "smartArtProperties": props,
        }

    def _definition_id(self, node: Any, rid: Optional[str]) -> Optional[str]:
        if not rid:
            return None
        try:
            root = parse_xml(node.part.related_part(rid).blob)
        except Exception as exc:
            logger.debug("%s - diagram definition %s unreadable: %s", self.name, rid, exc)
            return None
        return root.get("uniqueId")
