"""Document-level traversal.

``convert`` walks every slide of an opened presentation in order, hands each
shape to the dispatcher and returns the assembled universal schema together
with the processing statistics. The schema is only returned once every
slide has been traversed; per-node faults are recorded on the context and
never abort the run.
"""
from __future__ import annotations

import logging
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .bridge import EngineBridge, get_bridge
from .context import ExtractionContext, RunState
from .dispatch import ShapeDispatcher, build_default_dispatcher
from .errors import DocumentOpenError
from .formats import emu, load_theme_colors, slugify_ascii
from .options import ExtractionOptions
from .schema import SCHEMA_VERSION, ConversionOutput, ProcessingStats
from .slides import SlideExtractor, load_comment_authors

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 10

_CORE_FIELDS = (
    ("title", "title"),
    ("author", "author"),
    ("subject", "subject"),
    ("keywords", "keywords"),
    ("comments", "comments"),
    ("category", "category"),
    ("lastModifiedBy", "last_modified_by"),
    ("revision", "revision"),
    ("created", "created"),
    ("modified", "modified"),
    ("lastPrinted", "last_printed"),
)

OptionsLike = Union[ExtractionOptions, Mapping[str, Any], None]


def _coerce_options(options: OptionsLike) -> ExtractionOptions:
    if isinstance(options, ExtractionOptions):
        return options
    return ExtractionOptions.from_mapping(options)


def document_properties(document: Any, slide_count: int) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    cp = document.core_properties
    for key, attr in _CORE_FIELDS:
        try:
            v = getattr(cp, attr)
        except Exception:
            v = None
        if isinstance(v, datetime):
            v = v.isoformat()
        elif isinstance(v, str):
            v = v or None
        out[key] = v
    out["slideCount"] = slide_count
    return out


def document_id(document: Any, fallback: Optional[str] = None) -> str:
    if fallback:
        return slugify_ascii(fallback)
    try:
        title = document.core_properties.title
    except Exception:
        title = None
    return slugify_ascii(title or "document")


class DocumentConverter:
    def __init__(self, bridge: Optional[EngineBridge] = None, dispatcher: Optional[ShapeDispatcher] = None) -> None:
        self.bridge = bridge or get_bridge()
        self.bridge.initialize()
        self.dispatcher = dispatcher or build_default_dispatcher(self.bridge)
        self.slide_extractor = SlideExtractor(self.dispatcher)

    def convert(
        self,
        document: Any,
        options: OptionsLike = None,
        *,
        request_id: Optional[str] = None,
        deadline: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        document_name: Optional[str] = None,
    ) -> ConversionOutput:
        opts = _coerce_options(options)
        context = ExtractionContext(options=opts, bridge=self.bridge, deadline=deadline, cancel_event=cancel_event)
        if request_id:
            context.request_id = request_id

        try:
            slides = self.bridge.slides(document)
        except Exception as exc:
            raise DocumentOpenError("failed to enumerate slides", exc) from exc

        context.theme_colors = load_theme_colors(document)
        if opts.include_comments:
            try:
                context.comment_authors = load_comment_authors(document)
            except Exception as exc:
                logger.warning("comment authors unreadable: %s", exc)
                context.record_error("document/commentAuthors", "DocumentConverter", str(exc))

        total = len(slides)
        logger.info("conversion %s started: %d slides, options=%s", context.request_id, total, opts.to_dict())
        start = time.perf_counter()

        context.transition(RunState.TRAVERSING)
        slide_entries: List[Dict[str, Any]] = []
        for i, slide in enumerate(slides, start=1):
            context.check_cancelled()
            slide_entries.append(self.slide_extractor.extract(slide, i, opts, context))
            if i % PROGRESS_EVERY == 0:
                logger.info("conversion %s: %d/%d slides", context.request_id, i, total)

        context.transition(RunState.AGGREGATING)
        schema: Dict[str, Any] = {
            "version": SCHEMA_VERSION,
            "documentId": document_id(document, document_name),
            "slideSize": {
                "width": emu(getattr(document, "slide_width", 0), clamp=True),
                "height": emu(getattr(document, "slide_height", 0), clamp=True),
            },
        }
        if opts.include_metadata:
            try:
                schema["documentProperties"] = document_properties(document, total)
            except Exception as exc:
                logger.warning("document properties unreadable: %s", exc)
                context.record_error("document/properties", "DocumentConverter", str(exc))
                schema["documentProperties"] = {"slideCount": total}
        if opts.include_assets:
            schema["assets"] = list(context.assets.values())
        schema["slides"] = slide_entries

        elapsed_ms = round((time.perf_counter() - start) * 1000.0, 3)
        stats = ProcessingStats(
            slide_count=context.stats.slide_count,
            shape_count=context.stats.shape_count,
            image_count=context.stats.image_count,
            animation_count=context.stats.animation_count,
            error_count=len(context.errors),
            conversion_time_ms=elapsed_ms,
        )
        context.transition(RunState.COMPLETED)
        logger.info(
            "conversion %s completed: slides=%d shapes=%d images=%d errors=%d (%.1fms)",
            context.request_id,
            stats.slide_count,
            stats.shape_count,
            stats.image_count,
            stats.error_count,
            elapsed_ms,
        )
        return ConversionOutput(schema=schema, stats=stats, errors=list(context.errors))


def convert(
    document: Any,
    options: OptionsLike = None,
    *,
    bridge: Optional[EngineBridge] = None,
    request_id: Optional[str] = None,
    deadline: Optional[float] = None,
    cancel_event: Optional[threading.Event] = None,
) -> ConversionOutput:
    return DocumentConverter(bridge).convert(
        document,
        options,
        request_id=request_id,
        deadline=deadline,
        cancel_event=cancel_event,
    )


def convert_file(path: Union[str, Path], options: OptionsLike = None, **kw: Any) -> ConversionOutput:
    """Open a .pptx through the bridge and convert it.

    Raises ``DocumentOpenError`` before any traversal if the file cannot be
    opened.
    """
    bridge = kw.pop("bridge", None) or get_bridge()
    document = bridge.open_document(path)
    return DocumentConverter(bridge).convert(document, options, document_name=Path(path).stem, **kw)
