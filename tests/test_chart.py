"""
Test cases for the chart renderer and latest-value summary
"""
from zoneinfo import ZoneInfo

from envmonitor.generators import NO_DATA, ChartRenderer, hex_to_rgb, latest_displayable, to_rgba, value_range
from envmonitor.models import ChartPoint, MetricSeries, MetricType, ServiceConfig

from fakes import make_series

TOKYO = ZoneInfo("Asia/Tokyo")


def points(*pairs):
    return [ChartPoint(time=t, value=v) for t, v in pairs]


def test_latest_value_when_last_point_present():
    series = points((0, 20.1), (300000, None), (600000, 20.4))

    assert latest_displayable(series) == "20.4"


def test_latest_value_skips_trailing_gaps():
    series = points((0, 20.1), (300000, None), (600000, None))

    assert latest_displayable(series) == "20.1"


def test_latest_value_placeholder_when_all_gaps():
    assert latest_displayable(points((0, None), (300000, None))) == NO_DATA
    assert latest_displayable([]) == NO_DATA


def test_latest_value_is_one_decimal():
    assert latest_displayable(points((0, 20))) == "20.0"
    assert latest_displayable(points((0, 1013.26))) == "1013.3"


def test_value_range_ignores_gaps():
    low, high = value_range(points((0, 1012.0), (1, None), (2, 1014.0)))

    assert 1011.0 < low < 1012.0
    assert 1014.0 < high < 1015.0


def test_value_range_of_flat_series_is_padded():
    low, high = value_range(points((0, 50.0), (1, 50.0)))

    assert low < 50.0 < high


def test_value_range_none_without_values():
    assert value_range(points((0, None))) is None
    assert value_range([]) is None


def test_colors():
    assert hex_to_rgb("#8884d8") == (136, 132, 216)
    assert hex_to_rgb("#fff") == (255, 255, 255)
    assert to_rgba("#ff7300") == "rgba(255, 115, 0, 0.3)"


def test_render_keeps_gaps_as_none():
    renderer = ChartRenderer(TOKYO)
    series = make_series(MetricType.TEMPERATURE, [20.1, None, 20.4])

    panel = renderer.render("Temperature", series, "#8884d8", "rgba(136, 132, 216, 0.3)", "℃")
    trace = panel.figure.data[0]

    assert list(trace.y) == [20.1, None, 20.4]
    assert trace.connectgaps is False
    assert trace.fill == "tozeroy"
    assert trace.line.color == "#8884d8"
    assert trace.fillcolor == "rgba(136, 132, 216, 0.3)"


def test_render_axes_and_tooltip():
    renderer = ChartRenderer(TOKYO)
    series = MetricSeries(
        metric=MetricType.PRESSURE,
        points=points((0, 1012.9), (300000, 1013.1)),
    )

    panel = renderer.render("Pressure", series, "#82ca9d", "rgba(130, 202, 157, 0.3)", "hPa")
    figure = panel.figure
    trace = figure.data[0]

    assert figure.layout.xaxis.type == "date"
    assert figure.layout.xaxis.tickformat == "%H:%M"
    assert figure.layout.xaxis.range is not None
    assert figure.layout.yaxis.ticksuffix == "hPa"
    assert figure.layout.yaxis.range[0] > 1000
    assert list(trace.customdata) == ["1970-01-01 09:00:00", "1970-01-01 09:05:00"]
    assert "%{customdata}" in trace.hovertemplate
    assert "%{y:.1f}hPa" in trace.hovertemplate


def test_panel_summary():
    renderer = ChartRenderer(TOKYO)

    panel = renderer.render(
        "Temperature", make_series(MetricType.TEMPERATURE, [20.1, None]), "#8884d8", "rgba(0, 0, 0, 0.3)", "℃"
    )
    assert panel.has_data
    assert panel.latest_label == "20.1℃"

    empty = renderer.render(
        "Humidity", MetricSeries.empty(MetricType.HUMIDITY), "#ff7300", "rgba(0, 0, 0, 0.3)", "%"
    )
    assert not empty.has_data
    assert empty.latest == NO_DATA
    assert empty.figure.layout.yaxis.range is None


def test_render_style_derives_fill_from_stroke():
    config = ServiceConfig.create_default()
    style = config.get_metric_style(MetricType.HUMIDITY)

    panel = ChartRenderer(TOKYO).render_style(style, make_series(MetricType.HUMIDITY, [45.0]))

    assert panel.title == "Humidity"
    assert panel.unit == "%"
    assert panel.fill_color == "rgba(255, 115, 0, 0.3)"


def test_panel_html_fragment():
    panel = ChartRenderer(TOKYO).render(
        "Temperature", make_series(MetricType.TEMPERATURE, [20.1]), "#8884d8", "rgba(0, 0, 0, 0.3)", "℃"
    )

    html = panel.to_html(div_id="chart-temperature")

    assert 'id="chart-temperature"' in html
    assert "<html>" not in html
