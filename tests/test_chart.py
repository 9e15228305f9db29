from __future__ import annotations

import pytest
from pptx.oxml import parse_xml

from deckjson.core.extract import convert
from deckjson.core.extract.bridge import EngineBridge
from deckjson.core.extract.context import ExtractionContext
from deckjson.core.extract.options import ExtractionOptions
from deckjson.core.extract.shapes.chart import (
    ChartExtractor,
    ChartSeriesExtractor,
    chart_family,
)
from deckjson.core.extract.shapes.chart.series import values_from_xml
from builders import BLANK_LAYOUT, add_bad_gradient, add_chart, add_plot_area_sppr
from fakes import BrokenChartFrame, ExplodingMetadata, ExplodingSeries

SER_XML = (
    '<c:ser xmlns:c="http://schemas.openxmlformats.org/drawingml/2006/chart">'
    "<c:idx val=\"0\"/><c:order val=\"0\"/>"
    "<c:val><c:numRef><c:f>Sheet1!$B$2:$B$5</c:f><c:numCache>"
    "<c:formatCode>General</c:formatCode><c:ptCount val=\"4\"/>"
    "<c:pt idx=\"0\"><c:v>1.5</c:v></c:pt>"
    "<c:pt idx=\"1\"><c:v>oops</c:v></c:pt>"
    "<c:pt idx=\"3\"><c:v>4</c:v></c:pt>"
    "</c:numCache></c:numRef></c:val></c:ser>"
)


@pytest.fixture
def bridge():
    return EngineBridge()


@pytest.fixture
def chart_frame(blank_prs):
    slide = blank_prs.slides.add_slide(blank_prs.slide_layouts[BLANK_LAYOUT])
    return add_chart(slide)


def _ctx(bridge, **opts):
    return ExtractionContext(options=ExtractionOptions(**opts), bridge=bridge)


@pytest.mark.parametrize(
    "name,family",
    [
        ("COLUMN_CLUSTERED", "Column"),
        ("THREE_D_COLUMN_STACKED", "Column"),
        ("BAR_STACKED_100", "Bar"),
        ("CYLINDER_BAR_CLUSTERED", "Bar"),
        ("PYRAMID_COL", "Column"),
        ("LINE_MARKERS", "Line"),
        ("THREE_D_PIE", "Pie"),
        ("BAR_OF_PIE", "Pie"),
        ("XY_SCATTER_LINES", "Scatter"),
        ("DOUGHNUT_EXPLODED", "Doughnut"),
        ("STOCK_HLC", "Stock"),
        ("SOMETHING_NEW", "Unknown"),
        (None, "Unknown"),
    ],
)
def test_chart_family(name, family):
    assert chart_family(name) == family


def test_chart_payload(bridge, chart_frame):
    ctx = _ctx(bridge)
    result = ChartExtractor(bridge).extract(chart_frame, ctx.options, ctx)

    assert result.ok
    props = result.data["chartProperties"]
    assert props["chartType"] == "Column"
    assert props["chartTypeDetail"] == "COLUMN_CLUSTERED"
    assert props["categories"] == ["Q1", "Q2", "Q3", "Q4"]
    assert [s["name"] for s in props["series"]] == ["Sales", "Costs"]
    assert props["series"][0]["values"] == [1.0, 2.0, 3.0, 4.0]
    assert "axes" not in props
    assert "plotArea" not in props
    assert ctx.errors == []


def test_axes_and_plot_area_with_metadata(bridge, chart_frame):
    ctx = _ctx(bridge, include_metadata=True)
    props = ChartExtractor(bridge).extract(chart_frame, ctx.options, ctx).data["chartProperties"]

    kinds = sorted(a["axisKind"] for a in props["axes"])
    assert kinds == ["category", "value"]
    value_axis = next(a for a in props["axes"] if a["axisKind"] == "value")
    assert value_axis["visible"] is True
    assert "majorUnit" in value_axis
    assert "layout" in props["plotArea"]


def test_series_fault_keeps_categories_and_metadata(bridge, chart_frame):
    ctx = _ctx(bridge)
    extractor = ChartExtractor(bridge, series=ExplodingSeries())
    result = extractor.extract(chart_frame, ctx.options, ctx)

    assert result.ok
    props = result.data["chartProperties"]
    assert props["series"] == []
    assert props["categories"] == ["Q1", "Q2", "Q3", "Q4"]
    assert props["chartType"] == "Column"
    assert len(ctx.errors) == 1
    assert ctx.errors[0].path.endswith("chart.series")
    assert ctx.errors[0].extractor == "ChartExtractor"


def test_metadata_fault_keeps_series(bridge, chart_frame):
    ctx = _ctx(bridge)
    props = (
        ChartExtractor(bridge, metadata=ExplodingMetadata())
        .extract(chart_frame, ctx.options, ctx)
        .data["chartProperties"]
    )
    assert props["chartType"] == "Unknown"
    assert props["categories"] == []
    assert len(props["series"]) == 2


def test_missing_chart_data_is_a_typed_failure(bridge):
    ctx = _ctx(bridge)
    result = ChartExtractor(bridge).extract(BrokenChartFrame(), ctx.options, ctx)

    assert not result.ok
    assert "corrupt chart part" in result.message
    assert result.data["shapeType"] == "Chart"
    props = result.data["chartProperties"]
    assert props["chartType"] == "Unknown"
    assert props["series"] == [] and props["categories"] == []


def test_values_from_partial_cache():
    ser = parse_xml(SER_XML)
    assert values_from_xml(ser) == [1.5, None, None, 4.0]


def test_series_with_unreadable_values_is_kept():
    class HalfBrokenSeries:
        name = "Partial"

        def __init__(self, element):
            self._element = element

        @property
        def values(self):
            raise ValueError("bad cache")

    class FakeChart:
        series = [HalfBrokenSeries(parse_xml(SER_XML)), object()]

    ctx = ExtractionContext(options=ExtractionOptions(), bridge=EngineBridge())
    series = ChartSeriesExtractor().extract(FakeChart(), ctx.options, ctx)

    assert series[0]["name"] == "Partial"
    assert series[0]["values"] == [1.5, None, None, 4.0]
    assert series[1] == {"index": 1, "name": "Series_2", "values": []}


def test_chart_extractor_is_complex(bridge):
    assert ChartExtractor(bridge).metadata()["complexity"] == "complex"


def _chart_shape(output):
    return next(s for s in output.schema["slides"][0]["shapes"] if s["shapeType"] == "Chart")


def test_bad_gradient_angle_on_series_keeps_name_and_values(bridge, chart_frame):
    add_bad_gradient(chart_frame.chart.plots[0].series[0]._element.get_or_add_spPr())
    ctx = _ctx(bridge)
    series = ChartExtractor(bridge).extract(chart_frame, ctx.options, ctx).data["chartProperties"]["series"]

    assert series[0]["name"] == "Sales"
    assert series[0]["values"] == [1.0, 2.0, 3.0, 4.0]
    fill = series[0]["format"]["fill"]
    assert fill["type"] == "gradient"
    assert "angle" not in fill
    assert [s["colorRgb"] for s in fill["stops"]] == ["FF0000", "0000FF"]
    assert ctx.errors == []


def test_series_format_fault_drops_only_the_format(bridge, chart_frame, monkeypatch):
    def unreadable(*args, **kwargs):
        raise ValueError("unreadable fill")

    add_bad_gradient(chart_frame.chart.plots[0].series[0]._element.get_or_add_spPr())
    monkeypatch.setattr("deckjson.core.extract.shapes.chart.series.fill_from_parent", unreadable)
    ctx = _ctx(bridge)
    series = ChartExtractor(bridge).extract(chart_frame, ctx.options, ctx).data["chartProperties"]["series"]

    assert series[0] == {"index": 0, "name": "Sales", "values": [1.0, 2.0, 3.0, 4.0]}
    assert series[1]["name"] == "Costs"
    assert len(ctx.errors) == 1
    assert ctx.errors[0].path.endswith("chart.series[0].format")
    assert ctx.errors[0].extractor == "ChartSeriesExtractor"


def test_bad_plot_area_fill_does_not_change_other_fields(blank_prs):
    slide = blank_prs.slides.add_slide(blank_prs.slide_layouts[BLANK_LAYOUT])
    frame = add_chart(slide)
    add_bad_gradient(add_plot_area_sppr(frame.chart))

    off = _chart_shape(convert(blank_prs, {"includeMetadata": False}))["chartProperties"]
    on_output = convert(blank_prs, {"includeMetadata": True})
    on = _chart_shape(on_output)["chartProperties"]

    assert on["chartType"] == off["chartType"] == "Column"
    assert on["categories"] == off["categories"] == ["Q1", "Q2", "Q3", "Q4"]
    assert on["series"] == off["series"]
    assert on["plotArea"]["fillFormat"]["type"] == "gradient"
    assert not [e for e in on_output.errors if "chart" in e.path]


def test_plot_area_fault_keeps_the_rest_of_the_metadata(bridge, chart_frame, monkeypatch):
    def unreadable(*args, **kwargs):
        raise ValueError("unreadable fill")

    add_bad_gradient(add_plot_area_sppr(chart_frame.chart))
    monkeypatch.setattr("deckjson.core.extract.shapes.chart.metadata.fill_from_parent", unreadable)
    ctx = _ctx(bridge, include_metadata=True)
    props = ChartExtractor(bridge).extract(chart_frame, ctx.options, ctx).data["chartProperties"]

    assert props["plotArea"] is None
    assert props["chartType"] == "Column"
    assert props["categories"] == ["Q1", "Q2", "Q3", "Q4"]
    assert len(props["axes"]) == 2
    assert [e.path.rsplit("/", 1)[-1] for e in ctx.errors] == ["chart.plotArea"]
    assert ctx.errors[0].extractor == "ChartMetadataExtractor"
