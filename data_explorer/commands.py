"""CLI Commands
-------------

Command-line entry points shipped with the package. `data_explorer` builds
the exploration catalog described by a config file, prints it, and optionally
saves the charts that should be rendered into a single HTML page.
"""

__all__ = [
    "explore_data_fn",
    "explore_data",
]

# Keep this list minimal as this py will actually be executed
import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from data_explorer.exploration import Exploration

logger = logging.getLogger(__name__)


def _status(e: "Exploration") -> str:
    if not e.charts:
        return "no charts"
    return "render" if e.render_charts() else "available"


def explore_data_fn(config_file: str, output_file: str | None = None) -> None:
    """Print the exploration catalog for a config and optionally save the rendered charts.

    Args:
        config_file: Path to the YAML/JSON explorer config.
        output_file: Optional HTML file to write the charts to render into.
    """
    import altair as alt

    from data_explorer.io import explorer_from_config

    de, config = explorer_from_config(config_file)

    print(f"{len(de.data_series_names)} series, {de.number_of_values()} records")
    for e in de.explorations:
        print(f"  [{_status(e)}] ({e.arity}) {e.title}")

    to_render = de.explorations_with_charts_to_render()
    print(
        f"{len(de.explorations)} explorations: {len(de.explorations_with_charts_available())} available, "
        f"{len(to_render)} to render, {len(de.explorations_with_no_charts_available())} without charts"
    )

    if output_file is None:
        return
    if not to_render:
        print("Nothing to render")
        return

    alt.data_transformers.disable_max_rows()
    charts = [c for c in (e.render(width=config.chart_width) for e in to_render) if c is not None]
    alt.vconcat(*charts).save(output_file)
    logger.info(f"Saved {len(charts)} explorations to {output_file}")
    print(f"Saved to {output_file}")


def explore_data() -> None:
    """CLI entry point for the explorer.

    Requires at least 1 argument: <config file>
    Optional 2nd argument: <output html file>
    """
    if len(sys.argv) < 2:
        print("Requires one parameter: <explorer config file (.yaml or .json)>")
        print("Additional parameter is <output .html file>")
        sys.exit()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    config_file = sys.argv[1]
    output_file = sys.argv[2] if len(sys.argv) > 2 else None

    explore_data_fn(config_file, output_file)
