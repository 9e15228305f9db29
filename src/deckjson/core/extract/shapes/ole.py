from __future__ import annotations

import hashlib
from typing import Any, Dict

from .base import COMPLEX, ShapeExtractor


class OleObjectExtractor(ShapeExtractor):
    """Embedded or linked OLE objects (Excel sheets, Word documents, ...)."""

    name = "OleObjectExtractor"
    version = "1.0.0"
    supported_types = frozenset({"OleObject"})
    complexity = COMPLEX
    shape_type = "OleObject"

    def default_payload(self) -> Dict[str, Any]:
        return {"oleObjectProperties": {"embedded": False}}

    def _extract(self, node, options, context) -> Dict[str, Any]:
        ole = node.ole_format
        graphic_data = node._element.graphicData
        embedded = bool(graphic_data.is_embedded_ole_obj)

        props: Dict[str, Any] = {
            "progId": ole.prog_id,
            "embedded": embedded,
            "showAsIcon": bool(ole.show_as_icon),
        }

        rid = graphic_data.blob_rId
        if rid and rid in node.part.rels:
            rel = node.part.rels[rid]
            if rel.is_external:
                props["linkPath"] = rel.target_ref
            else:
                part = rel.target_part
                blob = part.blob
                sha = hashlib.sha256(blob).hexdigest()
                props.update(
                    {
                        "sha256": sha,
                        "contentType": part.content_type,
                        "byteSize": len(blob),
                        "filename": part.partname.filename,
                    }
                )
                if options.include_assets:
                    context.register_asset(
                        sha,
                        {"ext": part.partname.ext, "contentType": part.content_type, "byteSize": len(blob)},
                    )

        return {
            "shapeType": self.shape_type,
            **self.basic_properties(node, context),
            "oleObjectProperties": props,
        }
