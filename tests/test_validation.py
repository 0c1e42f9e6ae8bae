"""Tests for validation models in `data_explorer.validation`."""

import pytest
from pydantic import ValidationError

from data_explorer.validation import (
    ChartMeta,
    ExplorerConfig,
    RenderPlan,
    SeriesSpec,
    ensure_render_plan,
    ensure_series_spec,
    group_key,
    hard_validate,
)


class TestSeriesSpec:
    def test_defaults(self):
        spec = SeriesSpec(name="x")
        assert spec.univariate is True
        assert spec.bivariate is False
        assert spec.multivariate is None
        assert spec.max_distinct_values == 20
        assert spec.multivariate_groups() == []

    @pytest.mark.parametrize(
        "multivariate, groups",
        [
            ("g1", ["g1"]),
            (["g1", "g2"], ["g1", "g2"]),
            (3, ["3"]),
            (0, ["0"]),
            ([0, 1], ["0", "1"]),
            (True, ["True"]),
            (["a", "", None, False, "b"], ["a", "b"]),
            (False, []),
            ("", []),
        ],
    )
    def test_multivariate_groups(self, multivariate, groups):
        assert SeriesSpec(name="x", multivariate=multivariate).multivariate_groups() == groups

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            SeriesSpec(name="x", colour="red")

    def test_data_method_excludes_column(self):
        with pytest.raises(ValidationError, match="data_method cannot be combined"):
            SeriesSpec(name="x", data_method=lambda r: r, column="y")

    def test_max_distinct_values_positive(self):
        with pytest.raises(ValidationError):
            SeriesSpec(name="x", max_distinct_values=0)

    def test_extractors(self):
        assert SeriesSpec(name="a").extractor()({"a": 1}) == 1
        assert SeriesSpec(name="a", column="b").extractor()({"b": 2}) == 2
        assert SeriesSpec(name="a", data_method=lambda r: r * 2).extractor()(3) == 6
        assert SeriesSpec(name="a", column="b", transform="v.upper()").extractor()({"b": "x"}) == "X"
        assert SeriesSpec(name="a", transform="record['b'] + v").extractor()({"a": 1, "b": 2}) == 3

    def test_ensure_series_spec(self):
        spec = SeriesSpec(name="x")
        assert ensure_series_spec(spec) is spec
        assert ensure_series_spec({"name": "y", "note": "n"}).note == "n"


class TestRenderPlan:
    def test_order_insensitive_match(self):
        plan = RenderPlan(bivariate={"1": ["B", "A"]})
        assert plan.requests("bivariate", ["A", "B"])
        assert plan.requests("bivariate", ["B", "A"])
        assert not plan.requests("bivariate", ["A", "C"])
        assert not plan.requests("univariate", ["A"])

    def test_univariate_match(self):
        plan = RenderPlan(univariate={"dom-id": ["Hour of day"]})
        assert plan.requests("univariate", ["Hour of day"])
        assert not plan.requests("univariate", ["Hour"])

    @pytest.mark.parametrize("arity", ["multivariate", "trivariate", None])
    def test_unknown_arity_raises(self, arity):
        with pytest.raises(ValueError, match="type of analysis"):
            RenderPlan().requests(arity, ["A"])

    def test_default(self):
        plan = RenderPlan.default(["A", "B"])
        assert plan.univariate == {"A": ["A"], "B": ["B"]}
        assert plan.bivariate == {}

    def test_ensure_render_plan(self):
        assert ensure_render_plan(None, ["A"]).univariate == {"A": ["A"]}
        plan = ensure_render_plan({"univariate": None, "bivariate": {1: ["A", "B"]}}, ["A"])
        assert plan.univariate == {}
        assert plan.requests("bivariate", ["B", "A"])

    def test_multivariate_section_rejected(self):
        with pytest.raises(ValidationError):
            RenderPlan.model_validate({"multivariate": {"1": ["A", "B"]}})

    def test_group_key(self):
        assert group_key(["b", "a"]) == group_key(["a", "b"]) == ("a", "b")


class TestChartMeta:
    def test_requires_sorted(self):
        meta = ChartMeta(name="c", n_series=(2, 2), requires=["quantitative", "categorical"])
        assert meta.requires == ["categorical", "quantitative"]

    def test_requires_must_fit_n_series(self):
        with pytest.raises(ValidationError, match="does not fit"):
            ChartMeta(name="c", n_series=(1, 1), requires=["quantitative", "categorical"])


class TestExplorerConfig:
    def test_constants_are_replaced(self):
        config = ExplorerConfig.model_validate(
            {
                "constants": {"small": 5},
                "file": "data.csv",
                "series": [{"name": "x", "max_distinct_values": "small"}],
            }
        )
        assert config.series[0].max_distinct_values == 5
        assert config.explorations_to_render is None

    def test_requires_series(self):
        with pytest.raises(ValidationError, match="At least one series"):
            hard_validate({"file": "data.csv", "series": []})

    def test_rejects_callables(self):
        with pytest.raises(ValidationError, match="column/transform"):
            ExplorerConfig.model_validate({"file": "d.csv", "series": [{"name": "x", "data_method": len}]})
