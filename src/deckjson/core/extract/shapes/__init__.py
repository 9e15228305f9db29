from .base import COMPLEX, SIMPLE, ShapeExtractor
from .chart import ChartExtractor
from .generic import GenericExtractor
from .group import GroupExtractor
from .media import MediaExtractor
from .ole import OleObjectExtractor
from .picture import PictureExtractor
from .smartart import SmartArtExtractor
from .table import TableExtractor
from .text import TextExtractor

__all__ = [
    "COMPLEX",
    "SIMPLE",
    "ChartExtractor",
    "GenericExtractor",
    "GroupExtractor",
    "MediaExtractor",
    "OleObjectExtractor",
    "PictureExtractor",
    "ShapeExtractor",
    "SmartArtExtractor",
    "TableExtractor",
    "TextExtractor",
]
