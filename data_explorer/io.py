"""Data & Config I/O
-----------------

Loaders that turn files on disk into an explorer:

- `read_dataset` reads CSV/Excel/SPSS/Stata/Parquet/JSON datasets into pandas
- `read_explorer_config` reads and validates a YAML/JSON explorer config
- `explorer_from_config` wires the two together into a `DataExplorer`
"""

__all__ = [
    "read_dataset",
    "read_explorer_config",
    "explorer_from_config",
]

import logging
import os
from typing import Any, Tuple

import pandas as pd
import pyreadstat  # type: ignore[import-untyped]

from data_explorer.explorer import DataExplorer
from data_explorer.utils import read_json, read_yaml
from data_explorer.validation import ExplorerConfig

logger = logging.getLogger(__name__)


def read_dataset(data_file: str, **read_opts: Any) -> pd.DataFrame:
    """Read a dataset, choosing the reader from the file extension.

    Args:
        data_file: Path to the dataset.
        **read_opts: Passed on to the pandas (or pyreadstat) reader.

    Returns:
        The dataset, with a flat column index.
    """

    ext = os.path.splitext(data_file)[1].lower()[1:]
    if ext in ["csv", "gz"]:
        df = pd.read_csv(data_file, low_memory=False, **read_opts)
    elif ext in ["sav", "dta"]:
        read_fn = getattr(pyreadstat, "read_" + ext)
        df, _ = read_fn(data_file, **{"apply_value_formats": True, "dates_as_pandas_datetime": True, **read_opts})
    elif ext == "parquet":
        df = pd.read_parquet(data_file, **read_opts)
    elif ext in ["xls", "xlsx", "xlsm", "xlsb", "odf", "ods", "odt"]:
        df = pd.read_excel(data_file, **read_opts)
    elif ext == "json":
        df = pd.DataFrame.from_records(read_json(data_file), **read_opts)
    else:
        raise ValueError(f"Not a known file format {data_file}")

    # If data is multi-indexed, flatten the index
    if isinstance(df.columns, pd.MultiIndex):
        df.columns = [" | ".join(map(str, tpl)) for tpl in df.columns]

    logger.info(f"Read {len(df)} records with {len(df.columns)} columns from {data_file}")
    return df


def read_explorer_config(config_file: str) -> ExplorerConfig:
    """Read and validate an explorer config file (YAML or JSON)."""

    ext = os.path.splitext(config_file)[1].lower()
    if ext in [".yaml", ".yml"]:
        raw = read_yaml(config_file)
    elif ext == ".json":
        raw = read_json(config_file)
    else:
        raise ValueError(f"Config file {config_file} should be .yaml or .json")
    return ExplorerConfig.model_validate(raw)


def explorer_from_config(config_file: str) -> Tuple[DataExplorer, ExplorerConfig]:
    """Read the config, its dataset, and build the explorer.

    The dataset path is taken relative to the config file.
    """

    config = read_explorer_config(config_file)
    data_file = os.path.join(os.path.dirname(config_file), config.file)
    df = read_dataset(data_file, **config.read_opts)

    cols = [s.column if s.column is not None else s.name for s in config.series]
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"Columns {missing} not found in {data_file}")

    return DataExplorer(df, config.series, config.explorations_to_render), config
