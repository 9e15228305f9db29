"""Axis descriptors. Only requested with includeMetadata."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pptx.chart.axis import CategoryAxis, DateAxis, ValueAxis
from pptx.oxml.ns import qn

from ...formats import local_name, norm_text

logger = logging.getLogger(__name__)

_AXIS_KINDS = {
    "catAx": ("category", CategoryAxis),
    "dateAx": ("date", DateAxis),
    "valAx": ("value", ValueAxis),
    "serAx": ("series", None),
}


def _enum_name(v: Any) -> Optional[str]:
    if v is None:
        return None
    return getattr(v, "name", str(v))


class ChartAxesExtractor:
    name = "ChartAxesExtractor"

    def extract(self, chart: Any, options, context) -> List[Dict[str, Any]]:
        plot_area = chart._chartSpace.chart.plotArea
        out: List[Dict[str, Any]] = []
        for el in plot_area.iterchildren():
            kind = local_name(el.tag)
            if kind not in _AXIS_KINDS:
                continue
            axis_kind, wrapper = _AXIS_KINDS[kind]
            entry: Dict[str, Any] = {"type": kind, "axisKind": axis_kind, "axisId": None}
            try:
                entry.update(self.axis(el, wrapper))
            except Exception as exc:
                logger.warning("axis %s unreadable: %s", kind, exc)
            out.append(entry)
        return out

    def axis(self, el: Any, wrapper: Any) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        ax_id = el.find(qn("c:axId"))
        if ax_id is not None:
            out["axisId"] = ax_id.get("val")

        delete = el.find(qn("c:delete"))
        out["visible"] = not (delete is not None and delete.get("val", "1") in ("1", "true"))

        if wrapper is None:
            return out

        axis = wrapper(el)
        out["title"] = None
        # axis.axis_title adds c:title when there is none
        if axis.has_title and axis.axis_title.has_text_frame:
            out["title"] = norm_text(axis.axis_title.text_frame.text) or None

        out["min"] = axis.minimum_scale
        out["max"] = axis.maximum_scale
        if isinstance(axis, ValueAxis):
            out["majorUnit"] = axis.major_unit
            out["minorUnit"] = axis.minor_unit
        out["gridlines"] = {"major": bool(axis.has_major_gridlines), "minor": bool(axis.has_minor_gridlines)}
        out["numberFormat"] = axis.tick_labels.number_format
        out["majorTickMark"] = _enum_name(axis.major_tick_mark)
        out["tickLabelPosition"] = _enum_name(axis.tick_label_position)
        return out
