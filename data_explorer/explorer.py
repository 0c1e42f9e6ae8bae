"""Data Explorer
---------------

Builds the catalog of explorations for a dataset. This is what you use to
explore your data:

    de = DataExplorer(records, [{"name": "Hour", "data_method": lambda r: r.hour}, ...])
    for e in de.explorations_with_charts_to_render():
        e.render()

Construction is a single pass:

1. every series is extracted once into a read-only cache
2. univariate groupings: one per series
3. bivariate groupings: every unordered pair within the implicit "default" group
4. multivariate groupings: one per group named in the specs' `multivariate` field

Each grouping becomes an `Exploration` whose `render_charts` flag says whether
the caller asked for it in the render plan. Multivariate explorations are only
ever created on request and are therefore always rendered.
"""

from __future__ import annotations

__all__ = [
    "DataExplorer",
    "Grouping",
    "unique_specs",
    "group_title",
    "univariate_groupings",
    "bivariate_groupings",
    "multivariate_groupings",
]

import itertools as it
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from data_explorer import utils
from data_explorer.exploration import DataSet, Exploration
from data_explorer.series import DataSeries, build_series_cache
from data_explorer.validation import (
    Arity,
    RenderPlan,
    SeriesSpec,
    ensure_render_plan,
    ensure_series_spec,
)

logger = logging.getLogger(__name__)

# All series are candidates for bivariate analysis, as members of this one implicit group
DEFAULT_BIVARIATE_GROUP = "default"

TITLE_SEPARATOR = " vs. "

SpecInput = Union[SeriesSpec, Mapping[str, Any]]


@dataclass(frozen=True)
class Grouping:
    """A candidate exploration: the specs it shows and how it is titled."""

    arity: Arity
    specs: Tuple[SeriesSpec, ...]
    title: str

    @property
    def names(self) -> List[str]:
        return [s.name for s in self.specs]


def unique_specs(specs: Sequence[Optional[SeriesSpec]]) -> List[SeriesSpec]:
    """Drop empty entries and repeated names, keeping the first occurrence."""
    return utils.unique_by(specs, key=lambda s: s.name)


def group_title(specs: Sequence[SeriesSpec]) -> str:
    """Names sorted and joined, e.g. ``"Month vs. Weekday"``."""
    return TITLE_SEPARATOR.join(sorted(s.name for s in specs))


def univariate_groupings(specs: Sequence[SeriesSpec]) -> List[Grouping]:
    """One grouping per series, whatever its `univariate` flag says."""
    return [Grouping("univariate", (s,), s.name) for s in unique_specs(specs)]


def bivariate_groupings(specs: Sequence[SeriesSpec]) -> List[Grouping]:
    """Every unordered pair of series, within each bivariate group.

    The `bivariate` flag of a spec does not remove it from the default group.
    """

    groups: Dict[str, List[SeriesSpec]] = {DEFAULT_BIVARIATE_GROUP: list(specs)}

    res = []
    for gk, g_specs in groups.items():
        if not gk:
            continue
        for pair in it.combinations(unique_specs(g_specs), 2):
            res.append(Grouping("bivariate", pair, group_title(pair)))
    return res


def multivariate_groupings(specs: Sequence[SeriesSpec]) -> List[Grouping]:
    """One grouping per multivariate group named in the specs, in order of first mention."""

    groups: Dict[str, List[SeriesSpec]] = {}
    for spec in specs:
        for gk in spec.multivariate_groups():
            groups.setdefault(gk, []).append(spec)

    res = []
    for gk, g_specs in groups.items():
        if not gk:
            continue
        members = tuple(unique_specs(g_specs))
        res.append(Grouping("multivariate", members, group_title(members)))
    return res


class DataExplorer:
    """Catalog of all univariate, bivariate and multivariate explorations of a dataset.

    Args:
        data_collection: Records (rows of data). Each record is passed to the specs' `data_method`,
            or indexed with their `column`. A DataFrame is turned into one dict per row.
        data_series_specs: One `SeriesSpec` (or dict of its fields) per data series.
        explorations_to_render: Which explorations to render fully, e.g.
            ``{"univariate": {"1": ["Hour of day"]}, "bivariate": {"1": ["Context", "Year"]}}``.
            Defaults to the univariate exploration of every series.
    """

    def __init__(
        self,
        data_collection: Union[Sequence[Any], pd.DataFrame],
        data_series_specs: Sequence[SpecInput],
        explorations_to_render: Union[RenderPlan, Mapping[str, Any], None] = None,
    ):
        if isinstance(data_collection, pd.DataFrame):
            data_collection = data_collection.to_dict(orient="records")

        specs = [ensure_series_spec(s) for s in data_series_specs if s]
        self.data_series_names: List[str] = [s.name for s in unique_specs(specs)]

        self._cached_data_series = build_series_cache(data_collection, specs)
        self._render_plan = ensure_render_plan(explorations_to_render, self.data_series_names)

        explorations: List[Exploration] = []
        for g in univariate_groupings(specs):
            explorations.append(self._build_exploration(g, self._render_plan.requests("univariate", g.names)))
        for g in bivariate_groupings(specs):
            explorations.append(self._build_exploration(g, self._render_plan.requests("bivariate", g.names)))
        for g in multivariate_groupings(specs):
            explorations.append(self._build_exploration(g, True))
        self._explorations = tuple(explorations)

        logger.debug(
            f"Built {len(self._explorations)} explorations for {len(self.data_series_names)} series, "
            f"{sum(e.render_charts() for e in self._explorations)} to render"
        )

    def _build_exploration(self, grouping: Grouping, render_charts: bool) -> Exploration:
        data_set = DataSet([self._cached_data_series[n] for n in grouping.names], grouping.title)
        return Exploration(grouping.title, data_set, render_charts, arity=grouping.arity)

    @property
    def explorations(self) -> Tuple[Exploration, ...]:
        return self._explorations

    @property
    def data_series(self) -> Mapping[str, DataSeries]:
        """The read-only series cache, by name."""
        return self._cached_data_series

    def render_plan(self) -> RenderPlan:
        """The plan in effect: the one supplied, or the default one."""
        return self._render_plan.model_copy(deep=True)

    def explorations_with_charts_available(self) -> List[Exploration]:
        return [e for e in self._explorations if e.charts]

    def explorations_with_charts_to_render(self) -> List[Exploration]:
        return [e for e in self.explorations_with_charts_available() if e.render_charts()]

    def explorations_with_no_charts_available(self) -> List[Exploration]:
        return [e for e in self._explorations if not e.charts]

    def number_of_values(self) -> int:
        """Number of records, as seen by the first exploration."""
        if not self._explorations:
            raise ValueError("No explorations available: provide at least one data series")
        return self._explorations[0].number_of_values

    def catalog(self) -> List[Dict[str, Any]]:
        """Plain description of every exploration, in construction order."""
        return [e.to_dict() for e in self._explorations]
