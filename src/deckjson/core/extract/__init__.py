from .bridge import EngineBridge, get_bridge
from .context import ExtractionContext, NodeError, RunState
from .converter import DocumentConverter, convert, convert_file
from .dispatch import ShapeDispatcher, build_default_dispatcher
from .errors import ConversionCancelledError, ConversionError, DocumentOpenError, SchemaVersionError
from .options import ExtractionOptions
from .result import ExtractionResult, Failure, Success
from .schema import SCHEMA_VERSION, ConversionOutput, ProcessingStats

__all__ = [
    "SCHEMA_VERSION",
    "ConversionCancelledError",
    "ConversionError",
    "ConversionOutput",
    "DocumentConverter",
    "DocumentOpenError",
    "EngineBridge",
    "ExtractionContext",
    "ExtractionOptions",
    "ExtractionResult",
    "Failure",
    "NodeError",
    "ProcessingStats",
    "RunState",
    "SchemaVersionError",
    "ShapeDispatcher",
    "Success",
    "build_default_dispatcher",
    "convert",
    "convert_file",
    "get_bridge",
]
