"""Video and audio frames.

python-pptx reads a video ``p:pic`` as a ``Movie`` and an audio one as a
plain ``Picture``; both carry a poster image plus a relationship to the
media part (embedded) or to an external file (linked). Playback settings
live in the slide timing tree, keyed by shape id.
"""
from __future__ import annotations

import hashlib
import logging
from typing import Any, Dict, Optional

from pptx.oxml.ns import qn

from ..formats import local_name
from .base import COMPLEX, ShapeExtractor
from .picture import image_properties

logger = logging.getLogger(__name__)

_P14_MEDIA = "{http://schemas.microsoft.com/office/powerpoint/2010/main}media"

_MEDIA_FILE_TAGS = {
    "videoFile": "video",
    "quickTimeFile": "video",
    "audioFile": "audio",
    "wavAudioFile": "audio",
}


class MediaExtractor(ShapeExtractor):
    name = "MediaExtractor"
    version = "1.0.0"
    supported_types = frozenset({"Media"})
    complexity = COMPLEX
    shape_type = "Media"

    def default_payload(self) -> Dict[str, Any]:
        return {"mediaProperties": {"mediaType": "unknown", "embedded": False}}

    def _extract(self, node, options, context) -> Dict[str, Any]:
        el = node._element
        props: Dict[str, Any] = {"mediaType": "unknown", "embedded": False}

        ref = self._media_file_ref(el)
        if ref is not None:
            props["mediaType"] = _MEDIA_FILE_TAGS[local_name(ref.tag)]
            props.update(self._media_target(node, el, ref, options, context))

        props.update(self.playback(node))

        try:
            poster = self._poster(node)
        except Exception as exc:
            logger.debug("%s - poster frame unreadable: %s", self.name, exc)
            poster = None
        if poster is not None:
            props["poster"] = image_properties(poster, options, context)

        return {
            "shapeType": self.shape_type,
            **self.basic_properties(node, context),
            "mediaProperties": props,
        }

    @staticmethod
    def _media_file_ref(el: Any) -> Optional[Any]:
        nv_pr = el.find(qn("p:nvPicPr") + "/" + qn("p:nvPr"))
        if nv_pr is None:
            return None
        for child in nv_pr:
            if local_name(child.tag) in _MEDIA_FILE_TAGS:
                return child
        return None

    def _media_target(self, node: Any, el: Any, ref: Any, options, context) -> Dict[str, Any]:
        rels = node.part.rels
        rids = []
        for media in el.iter(_P14_MEDIA):
            rids.append(media.get(qn("r:embed")))
        rids.append(ref.get(qn("r:link")) or ref.get(qn("r:embed")))

        out: Dict[str, Any] = {}
        for rid in rids:
            if not rid or rid not in rels:
                continue
            rel = rels[rid]
            if rel.is_external:
                out.setdefault("linkPath", rel.target_ref)
                continue
            part = rel.target_part
            blob = part.blob
            sha = hashlib.sha256(blob).hexdigest()
            out.update(
                {
                    "embedded": True,
                    "sha256": sha,
                    "contentType": part.content_type,
                    "byteSize": len(blob),
                    "filename": part.partname.filename,
                }
            )
            out.pop("linkPath", None)
            if options.include_assets:
                context.register_asset(
                    sha,
                    {"ext": part.partname.ext, "contentType": part.content_type, "byteSize": len(blob)},
                )
            break
        return out

    @staticmethod
    def _poster(node: Any) -> Any:
        poster = getattr(node, "poster_frame", None)
        if poster is not None:
            return poster
        rid = node._element.blip_rId
        if rid is None:
            return None
        return node.part.get_image(rid)

    @staticmethod
    def playback(node: Any) -> Dict[str, Any]:
        """Volume, mute and loop from the slide timing tree (empty when absent)."""
        out: Dict[str, Any] = {}
        try:
            spid = str(node.shape_id)
            sld = node.part._element
        except Exception:
            return out

        for media_node in sld.iter(qn("p:cMediaNode")):
            target = media_node.find(qn("p:tgtEl") + "/" + qn("p:spTgt"))
            if target is None or target.get("spid") != spid:
                continue
            vol = media_node.get("vol")
            if vol is not None:
                try:
                    out["volume"] = max(0, min(100000, int(vol))) / 100000.0
                except ValueError:
                    pass
            out["muted"] = media_node.get("mute") in ("1", "true")
            ctn = media_node.find(qn("p:cTn"))
            out["loop"] = ctn is not None and ctn.get("repeatCount") == "indefinite"
            parent = media_node.getparent()
            if parent is not None and local_name(parent.tag) == "video":
                out["fullScreen"] = parent.get("fullScrn") in ("1", "true")
            break
        return out
