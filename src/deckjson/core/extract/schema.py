"""Universal schema constants and output records."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .context import NodeError

SCHEMA_VERSION = "1.0"

# shapeType of nodes no extractor recognizes
UNKNOWN_SHAPE_TYPE = "Unknown"


def empty_chart_payload() -> Dict[str, Any]:
    return {
        "chartType": "Unknown",
        "title": None,
        "hasLegend": False,
        "hasDataTable": False,
        "categories": [],
        "series": [],
    }


@dataclass(frozen=True)
class ProcessingStats:
    slide_count: int
    shape_count: int
    image_count: int
    animation_count: int
    error_count: int
    conversion_time_ms: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slideCount": self.slide_count,
            "shapeCount": self.shape_count,
            "imageCount": self.image_count,
            "animationCount": self.animation_count,
            "errorCount": self.error_count,
            "conversionTimeMs": self.conversion_time_ms,
        }


@dataclass
class ConversionOutput:
    schema: Dict[str, Any]
    stats: ProcessingStats
    errors: List[NodeError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": self.schema,
            "stats": self.stats.to_dict(),
            "errors": [e.to_dict() for e in self.errors],
        }
