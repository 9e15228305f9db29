"""Slide-level extraction: attributes, optional sections and the shape list."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.oxml import parse_xml
from pptx.oxml.ns import qn

from .context import ExtractionContext
from .dispatch import ShapeDispatcher
from .formats import fill_from_parent, local_name, norm_text
from .options import ExtractionOptions

logger = logging.getLogger(__name__)


def _int_or_none(v: Any) -> Optional[int]:
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def load_comment_authors(presentation: Any) -> Dict[str, Dict[str, str]]:
    """Classic comment authors keyed by author id (empty when there are none)."""
    out: Dict[str, Dict[str, str]] = {}
    for rel in presentation.part.rels.values():
        if rel.reltype != RT.COMMENT_AUTHORS or rel.is_external:
            continue
        root = parse_xml(rel.target_part.blob)
        for author in root.iter(qn("p:cmAuthor")):
            out[str(author.get("id"))] = {
                "name": author.get("name", ""),
                "initials": author.get("initials", ""),
            }
    return out


class SlideExtractor:
    name = "SlideExtractor"

    def __init__(self, dispatcher: ShapeDispatcher) -> None:
        self.dispatcher = dispatcher
        self.bridge = dispatcher.bridge

    def extract(self, slide: Any, index: int, options: ExtractionOptions, context: ExtractionContext) -> Dict[str, Any]:
        """Schema entry for one slide; ``index`` is 1-based."""
        with context.at(f"slide[{index}]"):
            entry = self.attributes(slide, index, options, context)

            if options.include_notes:
                entry["notes"] = self._attr("notes", lambda: self.notes(slide), None, context)

            shapes: List[Dict[str, Any]] = []
            native = self._attr("shapes", lambda: self.bridge.shapes(slide), [], context)
            for i, shape in enumerate(native):
                shapes.append(self.dispatcher.dispatch(shape, options, context, i))
                context.stats.bump("shape_count")
            entry["shapes"] = shapes

            if options.include_animations:
                animations = self._attr("animations", lambda: self.animations(slide), [], context)
                context.stats.bump("animation_count", len(animations))
                entry["animations"] = animations

            if options.include_comments:
                entry["comments"] = self._attr("comments", lambda: self.comments(slide, context), [], context)

        context.stats.bump("slide_count")
        return entry

    def attributes(self, slide: Any, index: int, options: ExtractionOptions, context: ExtractionContext) -> Dict[str, Any]:
        theme = context.theme_colors
        return {
            "slideId": self._attr("slideId", lambda: int(slide.slide_id), None, context),
            "index": index,
            "name": self._attr("name", lambda: slide.name or f"Slide {index}", f"Slide {index}", context),
            "hidden": self._attr("hidden", lambda: slide._element.get("show") in ("0", "false"), False, context),
            "layoutName": self._attr("layoutName", lambda: slide.slide_layout.name or None, None, context),
            "background": self._attr("background", lambda: self.background(slide, theme), None, context),
            "transition": self._attr("transition", lambda: self.transition(slide), None, context),
        }

    def _attr(self, key: str, call: Callable[[], Any], default: Any, context: ExtractionContext) -> Any:
        try:
            return call()
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            path = f"{context.path}/{key}"
            logger.warning("%s - %s failed at %s: %s", self.name, key, path, message)
            context.record_error(path, self.name, f"{key}: {message}")
            return default

    # ------------------------------------------------------------------
    # Attribute readers
    # ------------------------------------------------------------------

    @staticmethod
    def background(slide: Any, theme: Dict[str, str]) -> Optional[Dict[str, Any]]:
        # Slide.background adds p:bg; read cSld directly
        bg = slide._element.cSld.find(qn("p:bg"))
        if bg is None:
            return None
        bg_pr = bg.find(qn("p:bgPr"))
        if bg_pr is not None:
            return fill_from_parent(bg_pr, theme)
        bg_ref = bg.find(qn("p:bgRef"))
        if bg_ref is not None:
            return {"type": "themeReference", "index": _int_or_none(bg_ref.get("idx"))}
        return None

    @staticmethod
    def transition(slide: Any) -> Optional[Dict[str, Any]]:
        # may sit inside mc:AlternateContent; the first p:transition is the preferred choice
        tr = next(slide._element.iter(qn("p:transition")), None)
        if tr is None:
            return None
        kinds = [local_name(child.tag) for child in tr if isinstance(child.tag, str)]
        kinds = [k for k in kinds if k not in ("sndAc", "extLst")]
        adv_after = tr.get("advTm")
        return {
            "type": kinds[0] if kinds else None,
            "speed": tr.get("spd"),
            "advanceOnClick": tr.get("advClick", "1") in ("1", "true"),
            "advanceAfterMs": _int_or_none(adv_after),
        }

    @staticmethod
    def notes(slide: Any) -> Optional[str]:
        # Slide.notes_slide creates a notes part when there is none
        if not slide.has_notes_slide:
            return None
        tf = slide.notes_slide.notes_text_frame
        if tf is None:
            return None
        return norm_text(tf.text) or None

    @staticmethod
    def animations(slide: Any) -> List[Dict[str, Any]]:
        timing = slide._element.find(qn("p:timing"))
        if timing is None:
            return []

        out: List[Dict[str, Any]] = []
        for ctn in timing.iter(qn("p:cTn")):
            preset_class = ctn.get("presetClass")
            if preset_class is None:
                continue
            delay = None
            st = ctn.find(qn("p:stCondLst"))
            if st is not None:
                cond = st.find(qn("p:cond"))
                if cond is not None:
                    delay = _int_or_none(cond.get("delay"))
            target = next(ctn.iter(qn("p:spTgt")), None)
            duration = _int_or_none(ctn.get("dur"))
            if duration is None:
                # effect nodes usually carry dur on their first behavior
                inner = next((c for c in ctn.iter(qn("p:cTn")) if c is not ctn and c.get("dur")), None)
                duration = _int_or_none(inner.get("dur")) if inner is not None else None
            out.append(
                {
                    "index": len(out),
                    "presetClass": preset_class,
                    "presetId": _int_or_none(ctn.get("presetID")),
                    "presetSubtype": _int_or_none(ctn.get("presetSubtype")),
                    "durationMs": duration,
                    "delayMs": delay,
                    "targetShapeId": target.get("spid") if target is not None else None,
                }
            )
        return out

    @staticmethod
    def comments(slide: Any, context: ExtractionContext) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        for rel in slide.part.rels.values():
            if rel.reltype != RT.COMMENTS or rel.is_external:
                continue
            root = parse_xml(rel.target_part.blob)
            for cm in root.iter(qn("p:cm")):
                author = context.comment_authors.get(str(cm.get("authorId")), {})
                text_el = cm.find(qn("p:text"))
                pos = cm.find(qn("p:pos"))
                out.append(
                    {
                        "author": author.get("name"),
                        "initials": author.get("initials"),
                        "text": norm_text(text_el.text or "") if text_el is not None else "",
                        "createdAt": cm.get("dt"),
                        "position": (
                            {"x": _int_or_none(pos.get("x")), "y": _int_or_none(pos.get("y"))}
                            if pos is not None
                            else None
                        ),
                    }
                )
        return out
