from __future__ import annotations

from types import SimpleNamespace

import pytest
from pptx.opc.constants import RELATIONSHIP_TYPE as RT
from pptx.oxml import parse_xml
from pptx.oxml.ns import nsdecls

from deckjson.core.extract.bridge import EngineBridge
from deckjson.core.extract.context import ExtractionContext
from deckjson.core.extract.dispatch import build_default_dispatcher
from deckjson.core.extract.options import ExtractionOptions
from deckjson.core.extract.slides import SlideExtractor, load_comment_authors
from builders import BLANK_LAYOUT, add_textbox

COMMENTS_XML = (
    "<p:cmLst %s>"
    '<p:cm authorId="0" dt="2024-03-01T10:00:00.000" idx="1"><p:pos x="10" y="20"/><p:text>Check  this</p:text></p:cm>'
    '<p:cm authorId="7" idx="2"><p:text>orphan</p:text></p:cm>'
    "</p:cmLst>"
) % nsdecls("p")

AUTHORS_XML = (
    '<p:cmAuthorLst %s><p:cmAuthor id="0" name="Ana Silva" initials="AS" lastIdx="1" clrIdx="0"/></p:cmAuthorLst>'
) % nsdecls("p")


def _rels(reltype, blob):
    rel = SimpleNamespace(reltype=reltype, is_external=False, target_part=SimpleNamespace(blob=blob.encode("utf-8")))
    return SimpleNamespace(rels={"rId9": rel})


class NoLayout:
    """Real slide whose layout part cannot be resolved."""

    def __init__(self, slide):
        self._slide = slide

    def __getattr__(self, name):
        return getattr(self._slide, name)

    @property
    def slide_layout(self):
        raise KeyError("slideLayout part missing")


@pytest.fixture
def bridge():
    return EngineBridge()


@pytest.fixture
def slide(blank_prs):
    return blank_prs.slides.add_slide(blank_prs.slide_layouts[BLANK_LAYOUT])


def _ctx(bridge, **opts):
    return ExtractionContext(options=ExtractionOptions(**opts), bridge=bridge)


def test_attribute_fault_is_isolated(bridge, slide):
    add_textbox(slide, "still here")
    ctx = _ctx(bridge)
    entry = SlideExtractor(build_default_dispatcher(bridge)).extract(NoLayout(slide), 1, ctx.options, ctx)

    assert entry["layoutName"] is None
    assert entry["name"] == "Slide 1"
    assert entry["shapes"][0]["text"] == "still here"
    assert [e.path for e in ctx.errors] == ["slide[1]/layoutName"]
    assert ctx.stats.slide_count == 1


def test_theme_reference_background(bridge, slide):
    bg = parse_xml('<p:bg %s><p:bgRef idx="1001"><a:schemeClr val="bg1"/></p:bgRef></p:bg>' % nsdecls("p", "a"))
    slide._element.cSld.insert(0, bg)
    assert SlideExtractor.background(slide, {}) == {"type": "themeReference", "index": 1001}


def test_notes_are_optional(bridge, slide):
    slide.notes_slide.notes_text_frame.text = "say hi"
    dispatcher = build_default_dispatcher(bridge)

    ctx = _ctx(bridge)
    assert SlideExtractor(dispatcher).extract(slide, 1, ctx.options, ctx)["notes"] == "say hi"

    ctx = _ctx(bridge, include_notes=False)
    assert "notes" not in SlideExtractor(dispatcher).extract(slide, 1, ctx.options, ctx)


def test_comments(bridge):
    ctx = _ctx(bridge, include_comments=True)
    ctx.comment_authors = {"0": {"name": "Ana Silva", "initials": "AS"}}
    fake_slide = SimpleNamespace(part=_rels(RT.COMMENTS, COMMENTS_XML))

    comments = SlideExtractor.comments(fake_slide, ctx)
    assert comments == [
        {
            "author": "Ana Silva",
            "initials": "AS",
            "text": "Check this",
            "createdAt": "2024-03-01T10:00:00.000",
            "position": {"x": 10, "y": 20},
        },
        {"author": None, "initials": None, "text": "orphan", "createdAt": None, "position": None},
    ]


def test_comment_authors():
    prs = SimpleNamespace(part=_rels(RT.COMMENT_AUTHORS, AUTHORS_XML))
    assert load_comment_authors(prs) == {"0": {"name": "Ana Silva", "initials": "AS"}}


def test_no_timing_means_no_animations(slide):
    assert SlideExtractor.animations(slide) == []
