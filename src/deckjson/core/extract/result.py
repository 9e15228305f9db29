"""Success/failure envelope returned by every extractor."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class Success:
    data: Dict[str, Any]
    elapsed_ms: float

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    message: str
    elapsed_ms: float
    # typed default payload to place in the schema instead of the real one
    data: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return False


ExtractionResult = Union[Success, Failure]


def elapsed_since(start: float) -> float:
    """Milliseconds since a ``time.perf_counter()`` reading."""
    return round((time.perf_counter() - start) * 1000.0, 3)
