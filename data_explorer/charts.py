"""Chart Implementations
----------------------

Registry-backed chart builders. Each function:

- receives a `ChartInput` holding one dataframe column per series
- builds an Altair chart for that specific combination of data types
- registers itself via `@explorer_chart(...)` so `exploration.py` can decide
  which charts apply to a data set

Section comments group the builders by the number of series they show.
"""

__all__ = [
    "bar_frequencies",
    "histogram",
    "box_plot",
    "timeline_histogram",
    "scatterplot",
    "grouped_box_plot",
    "contingency_heatmap",
    "stacked_bars",
    "time_series",
    "category_timeline",
    "parallel_coordinates",
    "colored_scatterplot",
    "scatterplot_matrix",
]

import altair as alt
import pandas as pd

from data_explorer.exploration import AltairChart, ChartInput, explorer_chart

VEGA_TYPES = {"categorical": "nominal", "quantitative": "quantitative", "temporal": "temporal"}


def _counts(data: pd.DataFrame, cols: list[str]) -> pd.DataFrame:
    """Number of records per combination of values in ``cols``."""
    return data.groupby(cols, observed=True).size().reset_index(name="count")


# --------------------------------------------------------
#          UNIVARIATE
# --------------------------------------------------------
# Chart options are documented next to ChartMeta in validation.py


@explorer_chart("bar_frequencies", accepts=["categorical"], priority=50)
def bar_frequencies(ci: ChartInput) -> AltairChart:
    """Bar per category, sorted by frequency."""

    col = ci.cols[0]
    df = _counts(ci.data, [col])
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X(field=col, type="nominal", sort="-y"),
            y=alt.Y(field="count", type="quantitative", title="Count"),
            tooltip=[alt.Tooltip(field=col, type="nominal"), alt.Tooltip(field="count", type="quantitative")],
        )
        .properties(width=ci.width)
    )


@explorer_chart("histogram", accepts=["quantitative"], priority=50, args={"maxbins": 30})
def histogram(ci: ChartInput, maxbins: int = 30) -> AltairChart:
    col = ci.cols[0]
    return (
        alt.Chart(ci.data[[col]].dropna())
        .mark_bar()
        .encode(
            x=alt.X(field=col, type="quantitative", bin=alt.Bin(maxbins=maxbins)),
            y=alt.Y("count():Q", title="Count"),
        )
        .properties(width=ci.width)
    )


@explorer_chart("box_plot", accepts=["quantitative"], priority=20)
def box_plot(ci: ChartInput) -> AltairChart:
    col = ci.cols[0]
    return (
        alt.Chart(ci.data[[col]].dropna())
        .mark_boxplot(extent=1.5)  # Tukey whiskers
        .encode(x=alt.X(field=col, type="quantitative"))
        .properties(width=ci.width)
    )


@explorer_chart("timeline_histogram", accepts=["temporal"], priority=50, args={"maxbins": 40})
def timeline_histogram(ci: ChartInput, maxbins: int = 40) -> AltairChart:
    """Number of records over time."""

    col = ci.cols[0]
    return (
        alt.Chart(ci.data[[col]].dropna())
        .mark_bar()
        .encode(
            x=alt.X(field=col, type="temporal", bin=alt.Bin(maxbins=maxbins)),
            y=alt.Y("count():Q", title="Count"),
        )
        .properties(width=ci.width)
    )


# --------------------------------------------------------
#          BIVARIATE
# --------------------------------------------------------


@explorer_chart(
    "scatterplot",
    n_series=(2, 2),
    requires=["quantitative", "quantitative"],
    priority=50,
    args={"opacity": 0.5},
)
def scatterplot(ci: ChartInput, opacity: float = 0.5) -> AltairChart:
    x, y = ci.cols
    return (
        alt.Chart(ci.data.dropna())
        .mark_circle(opacity=opacity)
        .encode(
            x=alt.X(field=x, type="quantitative", scale=alt.Scale(zero=False)),
            y=alt.Y(field=y, type="quantitative", scale=alt.Scale(zero=False)),
            tooltip=[alt.Tooltip(field=c, type="quantitative") for c in ci.cols],
        )
        .properties(width=ci.width, height=ci.width)
    )


@explorer_chart("grouped_box_plot", n_series=(2, 2), requires=["categorical", "quantitative"], priority=50)
def grouped_box_plot(ci: ChartInput) -> AltairChart:
    """Distribution of the quantitative series within each category."""

    (cat,), (val,) = ci.cols_of("categorical"), ci.cols_of("quantitative")
    return (
        alt.Chart(ci.data.dropna())
        .mark_boxplot(extent=1.5)
        .encode(
            x=alt.X(field=val, type="quantitative"),
            y=alt.Y(field=cat, type="nominal"),
            color=alt.Color(field=cat, type="nominal", legend=None),
        )
        .properties(width=ci.width)
    )


@explorer_chart("contingency_heatmap", n_series=(2, 2), requires=["categorical", "categorical"], priority=50)
def contingency_heatmap(ci: ChartInput) -> AltairChart:
    """Cross tabulation of two categorical series."""

    x, y = ci.cols
    df = _counts(ci.data.dropna(), [x, y])
    base = alt.Chart(df).encode(
        x=alt.X(field=x, type="nominal"),
        y=alt.Y(field=y, type="nominal"),
    )
    heat = base.mark_rect().encode(
        color=alt.Color(field="count", type="quantitative", scale=alt.Scale(scheme="blues")),
        tooltip=[
            alt.Tooltip(field=x, type="nominal"),
            alt.Tooltip(field=y, type="nominal"),
            alt.Tooltip(field="count", type="quantitative"),
        ],
    )
    text = base.mark_text().encode(text=alt.Text(field="count", type="quantitative"))
    return (heat + text).properties(width=ci.width)


@explorer_chart("stacked_bars", n_series=(2, 2), requires=["categorical", "categorical"], priority=20)
def stacked_bars(ci: ChartInput) -> AltairChart:
    """Share of the second series' categories within each category of the first."""

    x, y = ci.cols
    df = _counts(ci.data.dropna(), [x, y])
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            y=alt.Y(field=x, type="nominal"),
            x=alt.X(field="count", type="quantitative", stack="normalize", axis=alt.Axis(format="%"), title=None),
            color=alt.Color(field=y, type="nominal"),
            tooltip=[
                alt.Tooltip(field=x, type="nominal"),
                alt.Tooltip(field=y, type="nominal"),
                alt.Tooltip(field="count", type="quantitative"),
            ],
        )
        .properties(width=ci.width)
    )


@explorer_chart("time_series", n_series=(2, 2), requires=["quantitative", "temporal"], priority=50)
def time_series(ci: ChartInput) -> AltairChart:
    (t,), (val,) = ci.cols_of("temporal"), ci.cols_of("quantitative")
    return (
        alt.Chart(ci.data.dropna())
        .mark_point(filled=True, opacity=0.6)
        .encode(
            x=alt.X(field=t, type="temporal"),
            y=alt.Y(field=val, type="quantitative", scale=alt.Scale(zero=False)),
        )
        .properties(width=ci.width)
    )


@explorer_chart("category_timeline", n_series=(2, 2), requires=["categorical", "temporal"], priority=40)
def category_timeline(ci: ChartInput) -> AltairChart:
    """When each category occurs."""

    (cat,), (t,) = ci.cols_of("categorical"), ci.cols_of("temporal")
    return (
        alt.Chart(ci.data.dropna())
        .mark_tick(opacity=0.5)
        .encode(
            x=alt.X(field=t, type="temporal"),
            y=alt.Y(field=cat, type="nominal"),
            color=alt.Color(field=cat, type="nominal", legend=None),
        )
        .properties(width=ci.width)
    )


# --------------------------------------------------------
#          MULTIVARIATE
# --------------------------------------------------------


@explorer_chart("parallel_coordinates", n_series=(3, None), accepts=["quantitative"], priority=50)
def parallel_coordinates(ci: ChartInput) -> AltairChart:
    """One line per record across all series, each rescaled to [0, 1]."""

    df = ci.data[ci.cols].dropna()
    scaled = (df - df.min()) / (df.max() - df.min())
    ldf = scaled.reset_index(names="record").melt(id_vars="record", var_name="series", value_name="value")
    return (
        alt.Chart(ldf)
        .mark_line(opacity=0.3, strokeWidth=1)
        .encode(
            x=alt.X(field="series", type="nominal", sort=ci.cols, title=None),
            y=alt.Y(field="value", type="quantitative", axis=None),
            detail=alt.Detail(field="record", type="nominal"),
        )
        .properties(width=ci.width)
    )


@explorer_chart(
    "colored_scatterplot",
    n_series=(3, 3),
    requires=["categorical", "quantitative", "quantitative"],
    priority=60,
)
def colored_scatterplot(ci: ChartInput) -> AltairChart:
    """Scatterplot of the two quantitative series, colored by the categorical one."""

    (cat,), (x, y) = ci.cols_of("categorical"), ci.cols_of("quantitative")
    return (
        alt.Chart(ci.data.dropna())
        .mark_circle(opacity=0.6)
        .encode(
            x=alt.X(field=x, type="quantitative", scale=alt.Scale(zero=False)),
            y=alt.Y(field=y, type="quantitative", scale=alt.Scale(zero=False)),
            color=alt.Color(field=cat, type="nominal"),
            tooltip=[alt.Tooltip(field=c, type=VEGA_TYPES[t]) for c, t in zip(ci.cols, ci.data_types)],
        )
        .properties(width=ci.width, height=ci.width)
    )


@explorer_chart("scatterplot_matrix", n_series=(3, None), accepts=["quantitative"], priority=40)
def scatterplot_matrix(ci: ChartInput) -> AltairChart:
    size = max(ci.width // len(ci.cols), 80)
    return (
        alt.Chart(ci.data[ci.cols].dropna())
        .mark_circle(opacity=0.4, size=12)
        .encode(
            x=alt.X(alt.repeat("column"), type="quantitative", scale=alt.Scale(zero=False)),
            y=alt.Y(alt.repeat("row"), type="quantitative", scale=alt.Scale(zero=False)),
        )
        .properties(width=size, height=size)
        .repeat(row=ci.cols, column=ci.cols)
    )
