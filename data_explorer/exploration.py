"""Explorations
-------------

The rendering side of an exploration:

- a chart registry populated by `@explorer_chart(...)` in `data_explorer.charts`
- `matching_charts`, which decides which registered charts apply to a data set
  based on the number and data types of its series
- `DataSet` (the grouped series of one exploration) and `Exploration` (a titled
  data set plus the flag saying whether it should be rendered)

The explorer only ever asks an exploration whether it has any charts; drawing
them is done here with Altair.
"""

from __future__ import annotations

__all__ = ["DataSet", "Exploration", "explorer_chart", "matching_charts", "get_chart_meta", "ChartInput"]

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, cast

import altair as alt
import pandas as pd

from data_explorer import utils
from data_explorer.series import DataSeries
from data_explorer.validation import Arity, ChartMeta, DataType

logger = logging.getLogger(__name__)

AltairChart = alt.Chart | alt.LayerChart | alt.FacetChart | alt.VConcatChart | alt.HConcatChart

# Multivariate explorations with fewer series get no charts
MIN_MULTIVARIATE_SERIES = 2


@dataclass
class ChartInput:
    """Structured container passed to individual chart builders."""

    data: pd.DataFrame  # One column per series, vega-safe column names
    cols: List[str]  # Column names in data, in data set order
    data_types: List[DataType]  # Data type of each column
    title: str
    width: int = 400
    notes: List[str] = field(default_factory=list)

    def cols_of(self, data_type: DataType) -> List[str]:
        return [c for c, dt in zip(self.cols, self.data_types) if dt == data_type]


# --------------------------------------------------------
#          CHART REGISTRY
# --------------------------------------------------------

registry: Dict[str, Callable[..., Any]] = {}
registry_meta: Dict[str, ChartMeta] = {}
_registry_bootstrapped = False


def _ensure_chart_registry_loaded() -> None:
    """Import the charts module lazily to populate the registry."""
    global _registry_bootstrapped
    if _registry_bootstrapped:
        return
    import data_explorer.charts  # noqa: F401

    _registry_bootstrapped = True


def _ensure_chart_args_sync(func: Callable[..., Any], decorator_kwargs: Dict[str, Any]) -> None:
    """Verify that declared args match the builder signature."""

    declared = set(cast(dict[str, object], decorator_kwargs.get("args") or {}).keys())
    params = list(inspect.signature(func).parameters.values())[1:]
    seen = {p.name for p in params if p.kind in (p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY)}
    if seen != declared:
        raise ValueError(f"Chart '{func.__name__}' signature args {sorted(seen)} do not match declared {sorted(declared)}")


def explorer_chart(chart_name: str, **r_kwargs: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Register a chart builder inside the global chart registry."""

    def _decorator(gfunc: Callable[..., Any]) -> Callable[..., Any]:
        _ensure_chart_args_sync(gfunc, r_kwargs)
        registry[chart_name] = gfunc
        registry_meta[chart_name] = ChartMeta.model_validate({"name": chart_name, **r_kwargs})
        return gfunc

    return _decorator


def _deregister(chart_name: str) -> None:
    """Remove a chart from the registry (used in tests)."""

    del registry[chart_name]
    del registry_meta[chart_name]


def get_chart_meta(chart_name: str) -> ChartMeta | None:
    """Return a copy of the registry metadata entry for ``chart_name``."""

    _ensure_chart_registry_loaded()
    if chart_name not in registry_meta:
        return None
    return registry_meta[chart_name].model_copy(deep=True)


def _chart_applies(meta: ChartMeta, data_series: Sequence[DataSeries]) -> bool:
    n = len(data_series)
    lo, hi = meta.n_series
    if n < lo or (hi is not None and n > hi):
        return False

    types = [ds.data_type for ds in data_series]
    if meta.requires is not None and sorted(types) != meta.requires:
        return False
    if meta.requires is None and any(t not in meta.accepts for t in types):
        return False

    if meta.categorical_limit and any(ds.is_too_many_categories for ds in data_series):
        return False
    return True


def matching_charts(data_series: Sequence[DataSeries], arity: Arity | None = None) -> List[str]:
    """Names of the registered charts that can show ``data_series``, highest priority first.

    Nothing can be shown if any of the series is constant, or for a multivariate
    exploration with fewer than two series.
    """

    _ensure_chart_registry_loaded()
    if not data_series or not all(ds.has_variance for ds in data_series):
        return []
    if arity == "multivariate" and len(data_series) < MIN_MULTIVARIATE_SERIES:
        return []
    metas = [m for m in registry_meta.values() if _chart_applies(m, data_series)]
    return [m.name for m in sorted(metas, key=lambda m: (-m.priority, m.name))]


# --------------------------------------------------------
#          DATA SETS & EXPLORATIONS
# --------------------------------------------------------


class DataSet:
    """The series of one exploration, in grouping order."""

    def __init__(self, data_series: Sequence[DataSeries], title: str):
        self.data_series = list(data_series)
        self.title = title

    def __repr__(self) -> str:
        return f"DataSet({self.title!r}, {self.names})"

    @property
    def names(self) -> List[str]:
        return [ds.name for ds in self.data_series]

    @property
    def data_types(self) -> List[DataType]:
        return [ds.data_type for ds in self.data_series]

    @property
    def number_of_values(self) -> int:
        return self.data_series[0].number_of_values

    def to_frame(self) -> pd.DataFrame:
        """One column per series, named with vega-safe labels."""
        return pd.DataFrame({utils.escape_vega_label(ds.name): ds.series.to_numpy() for ds in self.data_series})


class Exploration:
    """A titled data set, the charts that can show it, and whether to render them."""

    def __init__(self, title: str, data_set: DataSet, render_charts: bool, arity: Arity | None = None):
        self.title = title
        self.data_set = data_set
        self._render_charts = bool(render_charts)
        self.arity = arity
        self.charts = matching_charts(data_set.data_series, arity)

    def __repr__(self) -> str:
        return f"Exploration({self.title!r}, render_charts={self._render_charts}, charts={self.charts})"

    def render_charts(self) -> bool:
        return self._render_charts

    @property
    def number_of_values(self) -> int:
        return self.data_set.number_of_values

    def chart_input(self, width: int = 400) -> ChartInput:
        return ChartInput(
            data=self.data_set.to_frame(),
            cols=[utils.escape_vega_label(n) for n in self.data_set.names],
            data_types=self.data_set.data_types,
            title=self.title,
            width=width,
            notes=[ds.note for ds in self.data_set.data_series if ds.note],
        )

    def render(self, width: int = 400, chart_args: Optional[Dict[str, Dict[str, Any]]] = None) -> AltairChart | None:
        """Build all applicable charts, stacked vertically. None if there are none."""

        if not self.charts:
            return None
        chart_args = chart_args or {}
        ci = self.chart_input(width)
        built = []
        for name in self.charts:
            meta = registry_meta[name]
            kwargs = {**meta.args, **chart_args.get(name, {})}
            built.append(registry[name](ci, **kwargs))
        logger.debug(f"Rendered {len(built)} charts for {self.title}")

        title: Dict[str, Any] = {"text": self.title}
        if ci.notes:
            title["subtitle"] = ci.notes
        return alt.vconcat(*built).properties(title=alt.TitleParams(**title))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "arity": self.arity,
            "series": self.data_set.names,
            "render_charts": self._render_charts,
            "charts": list(self.charts),
        }
