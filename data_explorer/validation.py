"""Validation Models
------------------

All pydantic models used to describe an exploration run live in this module:

- `SeriesSpec`: one data series, how to extract it from a record and which
  kinds of analysis it opts into
- `RenderPlan`: the caller's choice of which explorations get fully rendered,
  together with the order-insensitive matcher used by the explorer
- `ChartMeta`: metadata registered with every chart builder
- `ExplorerConfig`: the YAML/JSON config file read by the CLI

Plain dicts are accepted wherever a model is expected and are validated on
entry via `ensure_series_spec` / `ensure_render_plan`.
"""

__all__ = [
    "Arity",
    "PlanArity",
    "DataType",
    "GroupKey",
    "SeriesSpec",
    "RenderPlan",
    "ChartMeta",
    "ExplorerConfig",
    "group_key",
    "ensure_series_spec",
    "ensure_render_plan",
    "hard_validate",
]

from typing import Any, Callable, Dict, List, Literal, Mapping, Optional, Self, Sequence, Tuple, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, model_validator

from data_explorer.utils import replace_constants

# Kinds of analysis an exploration can belong to
Arity = Literal["univariate", "bivariate", "multivariate"]

# Only these can be looked up in a render plan. Multivariate explorations are always rendered.
PlanArity = Literal["univariate", "bivariate"]

DataType = Literal["categorical", "quantitative", "temporal"]

# Canonical, order-insensitive identity of a grouping of series
GroupKey = Tuple[str, ...]


def group_key(names: Sequence[str]) -> GroupKey:
    """Return the canonical key for a set of series names."""
    return tuple(sorted(names))


# Define a new base that is more strict towards unknown inputs
class PBase(BaseModel):
    model_config = ConfigDict(extra="forbid", protected_namespaces=(), arbitrary_types_allowed=True)


def DF(factory: Callable[[], Any]) -> Any:  # noqa: N802
    """Shorthand for a mutable field default."""
    return Field(default_factory=factory)


# --------------------------------------------------------
#          SERIES SPECS
# --------------------------------------------------------

MultivariateSpec = Optional[Union[bool, int, str, List[Union[bool, int, str, None]]]]


class SeriesSpec(PBase):
    """Description of one data series (a column of the dataset)."""

    name: str  # Unique name, used as the join key everywhere

    # How to get the value out of a record. If data_method is missing, the record is indexed with column (or name)
    data_method: Optional[Callable[[Any], Any]] = None
    column: Optional[Union[str, int]] = None
    transform: Optional[str] = None  # Python expression applied to the extracted value, bound to `v`

    note: Optional[str] = None  # Printed with every chart that uses this series

    # Rendering preferences. These do not affect which explorations exist
    univariate: Union[bool, str, List[str]] = True
    bivariate: Union[bool, str, List[str]] = False
    multivariate: MultivariateSpec = None  # Name(s) of the multivariate group(s) this series belongs to

    max_distinct_values: int = Field(default=20, gt=0)  # Above this a series is too spread out to be categorical

    @model_validator(mode="after")
    def check_extraction(self) -> Self:
        if self.data_method is not None and (self.column is not None or self.transform is not None):
            raise ValueError(f"Series '{self.name}': data_method cannot be combined with column or transform")
        return self

    def multivariate_groups(self) -> List[str]:
        """Multivariate group keys as strings, with unset entries and empty keys dropped.

        Keys are stringified before the emptiness check, so ``0`` names group ``"0"``.
        """
        mv = self.multivariate
        if mv is None or mv is False:
            return []
        keys = mv if isinstance(mv, list) else [mv]
        str_keys = [str(k) for k in keys if k is not None and k is not False]
        return [k for k in str_keys if k]

    def extractor(self) -> Callable[[Any], Any]:
        """Return the function that turns a raw record into this series' value."""
        if self.data_method is not None:
            return self.data_method

        col = self.column if self.column is not None else self.name
        if self.transform is None:
            return lambda rec: rec[col]

        code = compile(self.transform, f"<transform of {self.name}>", "eval")
        return lambda rec: eval(code, {"v": rec[col], "record": rec})


def ensure_series_spec(spec: Union[SeriesSpec, Mapping[str, Any]]) -> SeriesSpec:
    """Validate a dict into a `SeriesSpec`, passing through existing ones."""
    if isinstance(spec, SeriesSpec):
        return spec
    return SeriesSpec.model_validate(spec)


# --------------------------------------------------------
#          RENDER PLAN
# --------------------------------------------------------


class RenderPlan(PBase):
    """Which explorations should be fully rendered.

    Maps an opaque id (e.g. a DOM id) to the list of series names of the exploration, e.g.
    ``{"univariate": {"1": ["Hour of day"]}, "bivariate": {"1": ["Context", "Release (major)"]}}``
    """

    univariate: Dict[str, List[str]] = DF(dict)
    bivariate: Dict[str, List[str]] = DF(dict)

    @model_validator(mode="before")
    @classmethod
    def drop_empty_sections(cls, plan: Any) -> Any:  # noqa: ANN401  # pydantic validators require Any
        if isinstance(plan, dict):
            # Ids often come in as ints from YAML
            return {
                k: {str(i): names for i, names in v.items()} if isinstance(v, dict) else v
                for k, v in plan.items()
                if v is not None
            }
        return plan

    @classmethod
    def default(cls, names: Sequence[str]) -> "RenderPlan":
        """Render the univariate exploration of every series and nothing else."""
        return cls(univariate={n: [n] for n in names})

    def keys_for(self, arity: PlanArity) -> set[GroupKey]:
        if arity not in get_args(PlanArity):
            raise ValueError(f"Render plan has no entries for type of analysis {arity!r}")
        return {group_key(names) for names in getattr(self, arity).values()}

    def requests(self, arity: PlanArity, names: Sequence[str]) -> bool:
        """True if an entry of ``arity`` contains exactly ``names`` (in any order)."""
        return group_key(names) in self.keys_for(arity)


def ensure_render_plan(plan: Union[RenderPlan, Mapping[str, Any], None], names: Sequence[str]) -> RenderPlan:
    """Validate a caller supplied plan, or build the default one when missing."""
    if plan is None:
        return RenderPlan.default(names)
    if isinstance(plan, RenderPlan):
        return plan
    return RenderPlan.model_validate({str(k): v for k, v in plan.items()})


# --------------------------------------------------------
#          CHARTS
# --------------------------------------------------------
# Chart options:
#  - n_series: (minimum, maximum) number of series the chart can show, None for no maximum
#  - requires: exact sorted list of data types of the series
#  - accepts: data types every series is allowed to have (used when requires is not given)
#  - categorical_limit: categorical series must have at most max_distinct_values distinct values
#  - priority: charts with higher priority are listed (and rendered) first
#  - args: extra keyword args of the builder, with their defaults


class ChartMeta(PBase):
    """Metadata registered for each chart builder via ``@explorer_chart``."""

    name: str
    n_series: Tuple[int, Optional[int]] = (1, 1)
    requires: Optional[List[DataType]] = None
    accepts: List[DataType] = DF(lambda: ["categorical", "quantitative", "temporal"])
    categorical_limit: bool = True
    priority: int = 0
    args: Dict[str, Any] = DF(dict)

    @model_validator(mode="after")
    def check_requires(self) -> Self:
        if self.requires is not None:
            self.requires = sorted(self.requires)
            n = len(self.requires)
            lo, hi = self.n_series
            if n < lo or (hi is not None and n > hi):
                raise ValueError(f"Chart {self.name}: requires {self.requires} does not fit n_series {self.n_series}")
        return self


# --------------------------------------------------------
#          CONFIG FILE
# --------------------------------------------------------


class ExplorerConfig(PBase):
    """Config file describing a whole exploration run."""

    description: Optional[str] = None

    file: str  # Dataset, with relative path from the config file
    read_opts: Dict[str, Any] = DF(dict)  # Additional options passed to the pandas reader

    series: List[SeriesSpec]
    explorations_to_render: Optional[RenderPlan] = None

    chart_width: int = 400

    @model_validator(mode="before")
    @classmethod
    def replace_constants(cls, meta: Any) -> Any:  # noqa: ANN401  # pydantic validators require Any
        """Replace constant references in the config with their actual values."""
        return replace_constants(meta)

    @model_validator(mode="after")
    def check_series(self) -> Self:
        if not self.series:
            raise ValueError("At least one series has to be provided")
        for s in self.series:
            if s.data_method is not None:
                raise ValueError(f"Series '{s.name}': config files use column/transform, not data_method")
        return self


def hard_validate(m: dict[str, object] | ExplorerConfig) -> None:
    """Validate an explorer config, raising errors on failure.

    Raises:
        ValueError: If validation fails.
    """
    ExplorerConfig.model_validate(m)
