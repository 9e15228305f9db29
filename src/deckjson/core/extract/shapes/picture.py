from __future__ import annotations

import base64
import hashlib
from typing import Any, Dict

from .base import ShapeExtractor


def image_properties(image: Any, options, context) -> Dict[str, Any]:
    """Properties of an embedded python-pptx Image; registers it as an asset."""
    blob = image.blob
    sha = hashlib.sha256(blob).hexdigest()
    props: Dict[str, Any] = {
        "embedded": True,
        "sha256": sha,
        "ext": image.ext,
        "contentType": image.content_type,
        "byteSize": len(blob),
    }
    try:
        if image.filename:
            props["filename"] = image.filename
    except Exception:
        pass
    try:
        w, h = image.size
        props["sizePx"] = {"width": int(w), "height": int(h)}
    except Exception:
        pass

    if options.include_assets:
        context.register_asset(
            sha,
            {"ext": image.ext, "contentType": image.content_type, "byteSize": len(blob)},
        )
    if options.embeds_image_data:
        props["imageData"] = base64.b64encode(blob).decode("ascii")
    return props


class PictureExtractor(ShapeExtractor):
    name = "PictureExtractor"
    version = "1.2.0"
    supported_types = frozenset({"Picture"})
    shape_type = "Picture"

    def default_payload(self) -> Dict[str, Any]:
        return {"pictureProperties": {"embedded": False}}

    def _extract(self, node, options, context) -> Dict[str, Any]:
        try:
            image = node.image
        except ValueError:
            # linked picture: python-pptx raises when there is no embedded blob
            image = None
        except KeyError:
            image = None

        if image is None:
            props: Dict[str, Any] = {"embedded": False}
        else:
            props = image_properties(image, options, context)

        crop = {}
        for side in ("left", "top", "right", "bottom"):
            try:
                crop[side] = float(getattr(node, f"crop_{side}") or 0.0)
            except Exception:
                crop[side] = 0.0
        if any(v != 0.0 for v in crop.values()):
            props["crop"] = crop

        return {
            "shapeType": self.shape_type,
            **self.basic_properties(node, context),
            "pictureProperties": props,
        }
