from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from ...schema import empty_chart_payload
from ..base import COMPLEX, ShapeExtractor
from .axes import ChartAxesExtractor
from .metadata import ChartMetadataExtractor
from .series import ChartSeriesExtractor

logger = logging.getLogger(__name__)


class ChartExtractor(ShapeExtractor):
    """Composes the chart payload from the series, axes and metadata
    sub-extractors.

    Each sub-extractor call is isolated on its own: a failing slice falls
    back to its empty default and the other slices are kept. The composer
    never reorders what the sub-extractors return.
    """

    name = "ChartExtractor"
    version = "2.0.0"
    supported_types = frozenset({"Chart"})
    complexity = COMPLEX
    shape_type = "Chart"

    def __init__(
        self,
        bridge,
        *,
        series: Optional[ChartSeriesExtractor] = None,
        axes: Optional[ChartAxesExtractor] = None,
        metadata: Optional[ChartMetadataExtractor] = None,
    ) -> None:
        super().__init__(bridge)
        self.series = series or ChartSeriesExtractor()
        self.axes = axes or ChartAxesExtractor()
        self.metadata_extractor = metadata or ChartMetadataExtractor()

    def default_payload(self) -> Dict[str, Any]:
        return {"chartProperties": empty_chart_payload()}

    def _extract(self, node, options, context) -> Dict[str, Any]:
        basic = self.basic_properties(node, context)
        chart = self._chart_data(node)

        props = empty_chart_payload()
        props.update(
            self._isolated("metadata", lambda: self.metadata_extractor.extract(chart, options, context), {}, context)
        )
        props["series"] = self._isolated("series", lambda: self.series.extract(chart, options, context), [], context)
        if options.include_metadata:
            props["axes"] = self._isolated("axes", lambda: self.axes.extract(chart, options, context), [], context)

        return {
            "shapeType": self.shape_type,
            **basic,
            "chartProperties": props,
        }

    @staticmethod
    def _chart_data(node: Any) -> Any:
        chart = getattr(node, "chart", None)
        if chart is None:
            raise ValueError("chart shape has no chart data")
        return chart

    def _isolated(self, slice_name: str, call: Callable[[], Any], default: Any, context) -> Any:
        try:
            return call()
        except Exception as exc:
            path = f"{context.path}/chart.{slice_name}"
            message = str(exc) or type(exc).__name__
            logger.warning("%s - %s slice failed at %s: %s", self.name, slice_name, path, message)
            context.record_error(path, self.name, f"{slice_name}: {message}")
            return default
