from .axes import ChartAxesExtractor
from .extractor import ChartExtractor
from .metadata import ChartMetadataExtractor, chart_family
from .series import ChartSeriesExtractor

__all__ = [
    "ChartAxesExtractor",
    "ChartExtractor",
    "ChartMetadataExtractor",
    "ChartSeriesExtractor",
    "chart_family",
]
