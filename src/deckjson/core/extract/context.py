"""Per-run extraction state.

One ``ExtractionContext`` is created per conversion request and discarded
when the request ends. It is never shared between concurrent runs.
"""
from __future__ import annotations

import enum
import logging
import threading
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

from .errors import ConversionCancelledError
from .options import ExtractionOptions

if TYPE_CHECKING:
    from .bridge import EngineBridge

logger = logging.getLogger(__name__)


class RunState(str, enum.Enum):
    IDLE = "idle"
    TRAVERSING = "traversing"
    AGGREGATING = "aggregating"
    COMPLETED = "completed"


@dataclass
class RunCounters:
    """Monotonic counters. Only ``bump`` changes them."""

    slide_count: int = 0
    shape_count: int = 0
    image_count: int = 0
    animation_count: int = 0

    def bump(self, name: str, n: int = 1) -> None:
        if n < 0:
            raise ValueError(f"counter {name} cannot decrease (n={n})")
        setattr(self, name, getattr(self, name) + n)


@dataclass(frozen=True)
class NodeError:
    path: str
    extractor: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "extractor": self.extractor, "message": self.message}


@dataclass
class ExtractionContext:
    options: ExtractionOptions
    bridge: "EngineBridge"
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    theme_colors: Dict[str, str] = field(default_factory=dict)
    deadline: Optional[float] = None  # time.monotonic() value
    cancel_event: Optional[threading.Event] = None
    comment_authors: Dict[str, Dict[str, str]] = field(default_factory=dict)

    stats: RunCounters = field(default_factory=RunCounters)
    errors: List[NodeError] = field(default_factory=list)
    assets: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    state: RunState = RunState.IDLE
    _path: List[str] = field(default_factory=list, repr=False)

    @property
    def path(self) -> str:
        return "/".join(self._path)

    @contextmanager
    def at(self, segment: str) -> Iterator[None]:
        """Scope diagnostics to a node, e.g. ``slide[3]/shape[2]``."""
        self._path.append(segment)
        try:
            yield
        finally:
            self._path.pop()

    def transition(self, state: RunState) -> None:
        logger.debug("run %s: %s -> %s", self.request_id, self.state.value, state.value)
        self.state = state

    def record_error(self, path: str, extractor: str, message: str) -> None:
        self.errors.append(NodeError(path=path, extractor=extractor, message=message))

    def register_asset(self, sha256: str, info: Dict[str, Any]) -> None:
        # first occurrence wins; dict keeps insertion order
        if sha256 not in self.assets:
            self.assets[sha256] = {"sha256": sha256, **info}

    def check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ConversionCancelledError(f"conversion {self.request_id} was cancelled")
        if self.deadline is not None and time.monotonic() > self.deadline:
            raise ConversionCancelledError(f"conversion {self.request_id} exceeded its deadline")
