"""Chart classification, legend/data-table flags, title and categories."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pptx.oxml.ns import qn

from ...formats import fill_from_parent, line_from_sppr, norm_text

logger = logging.getLogger(__name__)

# first token of an XL_CHART_TYPE member name -> chart family
_FAMILY_BY_TOKEN: Dict[str, str] = {
    "COLUMN": "Column",
    "BAR": "Bar",
    "LINE": "Line",
    "PIE": "Pie",
    "XY": "Scatter",
    "AREA": "Area",
    "DOUGHNUT": "Doughnut",
    "RADAR": "Radar",
    "SURFACE": "Surface",
    "BUBBLE": "Bubble",
    "STOCK": "Stock",
}

_SOLID_TOKENS = ("CONE", "CYLINDER", "PYRAMID")


def chart_family(type_name: Optional[str]) -> str:
    """Map e.g. ``THREE_D_COLUMN_CLUSTERED`` to ``Column``."""
    if not type_name:
        return "Unknown"
    name = type_name.upper()
    if name.startswith("THREE_D_"):
        name = name[len("THREE_D_"):]
    if name.endswith("_OF_PIE"):
        return "Pie"
    token = name.split("_", 1)[0]
    if token in _SOLID_TOKENS:
        return "Bar" if "_BAR" in name else "Column"
    return _FAMILY_BY_TOKEN.get(token, "Unknown")


class ChartMetadataExtractor:
    name = "ChartMetadataExtractor"

    def extract(self, chart: Any, options, context) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "chartType": "Unknown",
            "title": None,
            "hasLegend": False,
            "hasDataTable": False,
            "categories": [],
        }

        try:
            type_name = chart.chart_type.name
            out["chartType"] = chart_family(type_name)
            out["chartTypeDetail"] = type_name
        except Exception as exc:
            logger.debug("chart type unavailable: %s", exc)

        try:
            out["hasLegend"] = bool(chart.has_legend)
        except Exception:
            pass
        try:
            out["hasDataTable"] = any(True for _ in chart._chartSpace.iter(qn("c:dTable")))
        except Exception:
            pass
        try:
            out["title"] = self.title(chart)
        except Exception:
            pass

        try:
            out["categories"] = self.categories(chart)
        except Exception as exc:
            logger.debug("chart categories unavailable: %s", exc)

        if options.include_metadata:
            try:
                out["plotArea"] = self.plot_area(chart, context.theme_colors)
            except Exception as exc:
                path = f"{context.path}/chart.plotArea"
                logger.warning("plot area unreadable at %s: %s", path, exc)
                context.record_error(path, self.name, f"plotArea: {exc}")
                out["plotArea"] = None
        return out

    @staticmethod
    def title(chart: Any) -> Optional[str]:
        # Chart.chart_title adds c:title when there is none
        if not chart.has_title:
            return None
        ct = chart.chart_title
        if not ct.has_text_frame:
            return None
        return norm_text(ct.text_frame.text) or None

    @staticmethod
    def categories(chart: Any) -> List[str]:
        plots = chart.plots
        if len(plots) == 0:
            return []
        return ["" if c is None else str(c) for c in plots[0].categories]

    @staticmethod
    def plot_area(chart: Any, theme: Dict[str, str]) -> Dict[str, Any]:
        plot_area = chart._chartSpace.chart.plotArea
        out: Dict[str, Any] = {"layout": None}

        manual = plot_area.find(qn("c:layout") + "/" + qn("c:manualLayout"))
        if manual is not None:
            layout: Dict[str, Any] = {}
            for key in ("x", "y", "w", "h"):
                el = manual.find(qn(f"c:{key}"))
                if el is not None and el.get("val") is not None:
                    try:
                        layout[key] = float(el.get("val"))
                    except ValueError:
                        continue
            target = manual.find(qn("c:layoutTarget"))
            if target is not None:
                layout["target"] = target.get("val")
            out["layout"] = layout or None

        sppr = plot_area.find(qn("c:spPr"))
        if sppr is not None:
            fill = fill_from_parent(sppr, theme)
            if fill is not None:
                out["fillFormat"] = fill
            line = line_from_sppr(sppr, theme)
            if line is not None:
                out["lineFormat"] = line
        return out
