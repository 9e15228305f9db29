from __future__ import annotations

import pytest
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.util import Inches

from builders import BLANK_LAYOUT, add_chart, add_picture, add_table, add_textbox


@pytest.fixture
def blank_prs():
    return Presentation()


@pytest.fixture
def rich_deck(tmp_path):
    """Two slides: text + chart + table + picture + group, then a hidden one."""
    prs = Presentation()
    layout = prs.slide_layouts[BLANK_LAYOUT]

    s1 = prs.slides.add_slide(layout)
    add_textbox(s1, "Quarterly results", bold=True)
    add_chart(s1)
    add_table(s1)
    add_picture(s1.shapes)
    group = s1.shapes.add_group_shape()
    add_picture(group.shapes)
    group.shapes.add_textbox(Inches(3), Inches(3), Inches(2), Inches(1)).text_frame.text = "inside"
    s1.background.fill.solid()
    s1.background.fill.fore_color.rgb = RGBColor(0xFF, 0x00, 0x00)
    s1.notes_slide.notes_text_frame.text = "Speaker notes"

    s2 = prs.slides.add_slide(layout)
    add_textbox(s2, "Backup")
    s2._element.set("show", "0")

    path = tmp_path / "rich deck.pptx"
    prs.save(str(path))
    return path


@pytest.fixture
def three_slide_prs():
    """Empty slide, a chart slide (2 series x 4 points), an empty slide."""
    prs = Presentation()
    layout = prs.slide_layouts[BLANK_LAYOUT]
    prs.slides.add_slide(layout)
    add_chart(prs.slides.add_slide(layout))
    prs.slides.add_slide(layout)
    return prs
