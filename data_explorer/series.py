"""Data Series
-----------

One typed column of the explored dataset, and the cache that holds them.

`build_series_cache` applies each spec's extractor to every record exactly
once and returns a read-only mapping from series name to `DataSeries`. Every
exploration that uses a series shares the same cached object.
"""

from __future__ import annotations

__all__ = ["DataSeries", "build_series_cache", "infer_data_type"]

import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np
import pandas as pd
import scipy.stats as sps

from data_explorer.utils import GREATER_ZERO, is_numeric_value, is_temporal_value, warn
from data_explorer.validation import DataType, SeriesSpec, ensure_series_spec

logger = logging.getLogger(__name__)


def _is_missing(v: object) -> bool:
    return v is None or (pd.api.types.is_scalar(v) and bool(pd.isna(v)))


def infer_data_type(values: Sequence[Any]) -> DataType:
    """Infer the data type from the python values of a series.

    Missing values are ignored. A series with no values at all is categorical.
    """

    present = [v for v in values if not _is_missing(v)]
    if present and all(is_temporal_value(v) for v in present):
        return "temporal"
    if present and all(is_numeric_value(v) for v in present):
        return "quantitative"
    return "categorical"


class DataSeries:
    """Values of one series in record order, together with the spec they came from."""

    def __init__(self, name: str, values: Sequence[Any], spec: SeriesSpec | Mapping[str, Any]):
        self.name = name
        self.spec = ensure_series_spec(spec)
        self._values = tuple(values)
        self.data_type: DataType = infer_data_type(self._values)

        if self.data_type == "temporal":
            s = pd.Series(pd.to_datetime(list(self._values), errors="coerce"), name=name)
        elif self.data_type == "quantitative":
            s = pd.Series(pd.to_numeric(list(self._values), errors="coerce"), name=name, dtype="float")
        else:
            s = pd.Series(
                [None if _is_missing(v) else str(v) for v in self._values],
                name=name,
                dtype="object",
            )
        self.series = s
        self._n_distinct = int(s.dropna().nunique())

    def __repr__(self) -> str:
        return f"DataSeries({self.name!r}, {self.data_type}, n={self.number_of_values})"

    @property
    def values(self) -> List[Any]:
        return list(self._values)

    @property
    def note(self) -> str | None:
        return self.spec.note

    @property
    def max_distinct_values(self) -> int:
        return self.spec.max_distinct_values

    @property
    def number_of_values(self) -> int:
        return len(self._values)

    @property
    def distinct_values(self) -> List[Any]:
        return list(self.series.dropna().unique())

    @property
    def has_variance(self) -> bool:
        """A series with less than two distinct values cannot show anything."""
        return self._n_distinct > 1

    @property
    def is_too_many_categories(self) -> bool:
        return self.data_type == "categorical" and self._n_distinct > self.max_distinct_values

    def describe(self) -> Dict[str, Any]:
        """Descriptive statistics. Quantitative series get moments as well as counts."""

        s = self.series
        res: Dict[str, Any] = {
            "count": int(s.notna().sum()),
            "missing": int(s.isna().sum()),
            "distinct": self._n_distinct,
        }
        if self.data_type == "temporal" and res["count"]:
            res.update({"min": s.min(), "max": s.max()})
        elif self.data_type == "quantitative" and res["count"]:
            vals = s.dropna().to_numpy()
            mean = float(np.mean(vals))
            std = float(np.std(vals, ddof=1)) if len(vals) > 1 else 0.0
            res.update(
                {
                    "min": float(vals.min()),
                    "max": float(vals.max()),
                    "mean": mean,
                    "median": float(np.median(vals)),
                    "std": std,
                    "coefficient_of_variation": std / max(abs(mean), GREATER_ZERO),
                    "skew": float(sps.skew(vals)) if self.has_variance else 0.0,
                    "kurtosis": float(sps.kurtosis(vals)) if self.has_variance else 0.0,
                }
            )
        elif self.data_type == "categorical":
            res["top"] = s.value_counts().head(5).to_dict()
        return res


def build_series_cache(
    data_collection: Sequence[Any],
    data_series_specs: Sequence[SeriesSpec],
) -> Mapping[str, DataSeries]:
    """Extract every series from the records, once per distinct name.

    Args:
        data_collection: Records in the order they should appear in each series.
        data_series_specs: Validated series specs.

    Returns:
        Read-only mapping from series name to `DataSeries`.

    Errors raised by an extractor propagate unchanged.
    """

    cache: Dict[str, DataSeries] = {}
    for spec in data_series_specs:
        if spec.name in cache:
            warn(f"Duplicate series name '{spec.name}', only the first spec is used")
            continue
        extract = spec.extractor()
        cache[spec.name] = DataSeries(spec.name, [extract(rec) for rec in data_collection], spec)

    logger.debug(f"Built series cache with {len(cache)} series over {len(data_collection)} records")
    return MappingProxyType(cache)
