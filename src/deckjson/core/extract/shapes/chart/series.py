"""Ordered series with values and format."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pptx.oxml.ns import qn

from ...formats import fill_from_parent, line_from_sppr

logger = logging.getLogger(__name__)


def _float_or_none(v: Any) -> Optional[float]:
    if v is None:
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def values_from_xml(ser: Any) -> List[Optional[float]]:
    """Read the numCache of c:val (or c:yVal) point by point.

    Missing or unparseable points become None, so a half-broken cache still
    yields the points that are readable.
    """
    ref = ser.find(qn("c:val"))
    if ref is None:
        ref = ser.find(qn("c:yVal"))
    if ref is None:
        return []
    cache = None
    for tag in ("c:numRef/c:numCache", "c:numLit"):
        path = "/".join(qn(t) for t in tag.split("/"))
        cache = ref.find(path)
        if cache is not None:
            break
    if cache is None:
        return []

    pts: Dict[int, Optional[float]] = {}
    for pt in cache.findall(qn("c:pt")):
        try:
            idx = int(pt.get("idx"))
        except (TypeError, ValueError):
            continue
        v = pt.find(qn("c:v"))
        pts[idx] = _float_or_none(v.text if v is not None else None)

    count = cache.find(qn("c:ptCount"))
    try:
        n = int(count.get("val")) if count is not None else 0
    except (TypeError, ValueError):
        n = 0
    n = max(n, max(pts) + 1 if pts else 0)
    return [pts.get(i) for i in range(n)]


class ChartSeriesExtractor:
    name = "ChartSeriesExtractor"

    def extract(self, chart: Any, options, context) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        for i, series in enumerate(chart.series):
            try:
                entry = self.series(series, i)
            except Exception as exc:
                logger.warning("series %d unreadable, emitting placeholder: %s", i, exc)
                out.append({"index": i, "name": f"Series_{i + 1}", "values": []})
                continue

            try:
                fmt = self.series_format(series._element, context.theme_colors)
            except Exception as exc:
                path = f"{context.path}/chart.series[{i}].format"
                logger.warning("series %d format unreadable at %s: %s", i, path, exc)
                context.record_error(path, self.name, f"format: {exc}")
                fmt = None
            if fmt:
                entry["format"] = fmt
            out.append(entry)
        return out

    def series(self, series: Any, i: int) -> Dict[str, Any]:
        ser = series._element
        name = ""
        try:
            name = series.name or ""
        except Exception:
            pass

        try:
            values = [_float_or_none(v) for v in series.values]
        except Exception:
            values = values_from_xml(ser)

        return {
            "index": i,
            "name": name or f"Series_{i + 1}",
            "values": values,
        }

    @staticmethod
    def series_format(ser: Any, theme: Dict[str, str]) -> Dict[str, Any]:
        # series.format adds c:spPr when missing
        sppr = ser.find(qn("c:spPr"))
        fmt: Dict[str, Any] = {}
        if sppr is None:
            return fmt
        fill = fill_from_parent(sppr, theme)
        if fill is not None:
            fmt["fill"] = fill
        line = line_from_sppr(sppr, theme)
        if line is not None:
            fmt["line"] = line
        return fmt
