from __future__ import annotations

import threading
import time

import pytest

from deckjson.core.extract.bridge import EngineBridge
from deckjson.core.extract.context import ExtractionContext, RunCounters, RunState
from deckjson.core.extract.errors import ConversionCancelledError
from deckjson.core.extract.options import ExtractionOptions
from deckjson.core.extract.result import Failure, Success


def test_option_defaults():
    o = ExtractionOptions()
    assert o.include_assets is True
    assert o.include_metadata is False
    assert o.include_notes is True
    assert o.embeds_image_data is False


def test_from_mapping_accepts_camel_and_snake_case():
    o = ExtractionOptions.from_mapping({"includeMetadata": True, "include_comments": "yes"})
    assert o.include_metadata is True
    assert o.include_comments is True


def test_from_mapping_is_permissive():
    o = ExtractionOptions.from_mapping({"renderThumbnails": True, "includeAnimations": None, "extractImages": "false"})
    assert o == ExtractionOptions()
    assert ExtractionOptions.from_mapping(None) == ExtractionOptions()


def test_from_mapping_with_base():
    base = ExtractionOptions(include_metadata=True)
    o = ExtractionOptions.from_mapping({"extractImages": "1"}, base=base)
    assert o.include_metadata is True
    assert o.embeds_image_data is True
    assert ExtractionOptions(extract_images=True, include_assets=False).embeds_image_data is False


def test_to_dict_uses_camel_case():
    d = ExtractionOptions().to_dict()
    assert d["includeAssets"] is True
    assert set(d) == {
        "includeAssets",
        "includeMetadata",
        "includeAnimations",
        "includeComments",
        "extractImages",
        "includeNotes",
    }


def test_counters_never_decrease():
    c = RunCounters()
    c.bump("shape_count")
    c.bump("shape_count", 2)
    assert c.shape_count == 3
    with pytest.raises(ValueError):
        c.bump("shape_count", -1)
    assert c.shape_count == 3


def _ctx(**kw):
    return ExtractionContext(options=ExtractionOptions(), bridge=EngineBridge(), **kw)


def test_context_path_scoping():
    ctx = _ctx()
    with ctx.at("slide[1]"):
        with ctx.at("shape[0]"):
            assert ctx.path == "slide[1]/shape[0]"
        assert ctx.path == "slide[1]"
    assert ctx.path == ""


def test_context_is_per_run():
    a, b = _ctx(), _ctx()
    a.record_error("slide[1]", "X", "boom")
    assert b.errors == []
    assert a.request_id != b.request_id
    assert a.state is RunState.IDLE


def test_register_asset_first_wins():
    ctx = _ctx()
    ctx.register_asset("abc", {"ext": "png"})
    ctx.register_asset("abc", {"ext": "jpg"})
    assert ctx.assets == {"abc": {"sha256": "abc", "ext": "png"}}


def test_check_cancelled():
    ev = threading.Event()
    ctx = _ctx(cancel_event=ev)
    ctx.check_cancelled()
    ev.set()
    with pytest.raises(ConversionCancelledError):
        ctx.check_cancelled()

    late = _ctx(deadline=time.monotonic() - 1.0)
    with pytest.raises(ConversionCancelledError):
        late.check_cancelled()


def test_result_envelope():
    ok = Success({"shapeType": "TextBox"}, 1.5)
    bad = Failure("boom", 0.2)
    assert ok.ok and not bad.ok
    assert bad.data is None
