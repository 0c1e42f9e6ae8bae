"""Tests for the chart registry, data sets and explorations in `data_explorer.exploration`."""

import datetime as dt

import altair as alt
import pytest

from data_explorer import exploration
from data_explorer.exploration import (
    DataSet,
    Exploration,
    _deregister as deregister,
    _ensure_chart_registry_loaded,
    explorer_chart,
    get_chart_meta,
    matching_charts,
    registry,
    registry_meta,
)
from data_explorer.series import DataSeries


def _ds(name, values, **spec):
    return DataSeries(name, values, {"name": name, **spec})


@pytest.fixture
def quant():
    return _ds("size", [1.0, 2.5, 3.0, 4.5])


@pytest.fixture
def quant2():
    return _ds("weight", [10, 12, 9, 15])


@pytest.fixture
def cat():
    return _ds("color", ["red", "blue", "red", "green"])


@pytest.fixture
def temporal():
    return _ds("day", [dt.date(2024, 1, d) for d in [1, 2, 4, 8]])


@pytest.fixture
def registry_guard():
    """Preserve the global chart registry around tests that register temporary charts."""
    _ensure_chart_registry_loaded()
    snapshot_registry = registry.copy()
    snapshot_meta = registry_meta.copy()
    try:
        yield
    finally:
        registry.clear()
        registry.update(snapshot_registry)
        registry_meta.clear()
        registry_meta.update(snapshot_meta)


class TestMatchingCharts:
    def test_univariate(self, quant, cat, temporal):
        assert matching_charts([quant]) == ["histogram", "box_plot"]
        assert matching_charts([cat]) == ["bar_frequencies"]
        assert matching_charts([temporal]) == ["timeline_histogram"]

    def test_bivariate(self, quant, quant2, cat, temporal):
        assert matching_charts([quant, quant2]) == ["scatterplot"]
        assert matching_charts([quant, cat]) == ["grouped_box_plot"]
        assert matching_charts([cat, quant]) == ["grouped_box_plot"]
        assert matching_charts([cat, _ds("shape", ["a", "b", "a", "b"])]) == ["contingency_heatmap", "stacked_bars"]
        assert matching_charts([temporal, quant]) == ["time_series"]
        assert matching_charts([cat, temporal]) == ["category_timeline"]

    def test_multivariate(self, quant, quant2, cat):
        third = _ds("height", [5, 6, 7, 1])
        assert matching_charts([quant, quant2, third]) == ["parallel_coordinates", "scatterplot_matrix"]
        assert matching_charts([quant, cat, quant2]) == ["colored_scatterplot"]
        assert matching_charts([quant, cat, quant2, third]) == []

    def test_constant_series_has_no_charts(self, quant):
        constant = _ds("flag", ["x", "x", "x", "x"])
        assert matching_charts([constant]) == []
        assert matching_charts([quant, constant]) == []

    def test_too_many_categories(self, quant):
        ids = _ds("id", ["a", "b", "c", "d"], max_distinct_values=3)
        assert matching_charts([ids]) == []
        assert matching_charts([ids, quant]) == []

    def test_empty(self):
        assert matching_charts([]) == []

    def test_single_series_multivariate(self, quant, quant2):
        assert matching_charts([quant], arity="multivariate") == []
        assert matching_charts([quant], arity="univariate") == ["histogram", "box_plot"]
        assert matching_charts([quant, quant2], arity="multivariate") == ["scatterplot"]

    def test_registered_chart_is_matched(self, registry_guard, cat):
        @explorer_chart("pie", accepts=["categorical"], priority=100)
        def _pie(ci):
            return alt.Chart(ci.data).mark_arc()

        assert matching_charts([cat]) == ["pie", "bar_frequencies"]
        assert get_chart_meta("pie").priority == 100
        deregister("pie")
        assert get_chart_meta("pie") is None

    def test_declared_args_must_match_signature(self, registry_guard):
        with pytest.raises(ValueError, match="do not match declared"):

            @explorer_chart("bad", args={"bins": 10})
            def _bad(ci, maxbins=10):
                return None


class TestExploration:
    def test_data_set(self, quant, cat):
        data_set = DataSet([quant, cat], "color vs. size")
        assert data_set.names == ["size", "color"]
        assert data_set.data_types == ["quantitative", "categorical"]
        assert data_set.number_of_values == 4
        assert list(data_set.to_frame().columns) == ["size", "color"]

    def test_to_frame_escapes_labels(self):
        data_set = DataSet([_ds("Release (v1.2)", [1, 2])], "Release (v1.2)")
        assert list(data_set.to_frame().columns) == ["Release (v1․2)"]

    def test_exploration_flags(self, quant):
        e = Exploration("size", DataSet([quant], "size"), False, arity="univariate")
        assert e.render_charts() is False
        assert e.charts == ["histogram", "box_plot"]
        assert e.number_of_values == 4
        assert e.to_dict() == {
            "title": "size",
            "arity": "univariate",
            "series": ["size"],
            "render_charts": False,
            "charts": ["histogram", "box_plot"],
        }

    def test_render_univariate(self, cat):
        chart = Exploration("color", DataSet([cat], "color"), True).render(width=200)
        assert isinstance(chart, alt.VConcatChart)
        spec = chart.to_dict()
        assert spec["title"]["text"] == "color"
        assert len(spec["vconcat"]) == 1

    def test_render_bivariate_with_note(self, quant):
        noted = _ds("weight", [10, 12, 9, 15], note="kg")
        chart = Exploration("size vs. weight", DataSet([quant, noted], "size vs. weight"), True).render()
        spec = chart.to_dict()
        assert spec["title"]["subtitle"] == ["kg"]

    def test_render_chart_args(self, quant, monkeypatch):
        seen = {}
        original = exploration.registry["histogram"]

        def spy(ci, maxbins=30):
            seen["maxbins"] = maxbins
            return original(ci, maxbins=maxbins)

        monkeypatch.setitem(exploration.registry, "histogram", spy)
        Exploration("size", DataSet([quant], "size"), True).render(chart_args={"histogram": {"maxbins": 5}})
        assert seen["maxbins"] == 5

    def test_render_without_charts(self):
        constant = _ds("flag", ["x", "x"])
        assert Exploration("flag", DataSet([constant], "flag"), True).render() is None
