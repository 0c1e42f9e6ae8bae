"""Utilities
---------

Small cross-cutting helpers shared by the series, exploration, IO and CLI
layers:

- warnings that point at the caller instead of the helper
- value-type predicates used when inferring a series' data type
- order-preserving de-duplication and label escaping for Vega Lite
- JSON/YAML readers with extension sanity checks

If you need a generic helper, check this file before adding another bespoke
version elsewhere.
"""

from __future__ import annotations

__all__ = [
    "warn",
    "GREATER_ZERO",
    "is_temporal_value",
    "is_numeric_value",
    "unique_by",
    "replace_constants",
    "escape_vega_label",
    "unescape_vega_label",
    "read_json",
    "read_yaml",
]

import json
import numbers
import warnings
from copy import deepcopy
from datetime import date, datetime
from typing import (
    Callable,
    Dict,
    Hashable,
    Iterable,
    Mapping,
    MutableSequence,
    List,
    TypeVar,
)

import numpy as np
import pandas as pd
import yaml

JSONValue = str | int | float | bool | None | dict[str, "JSONValue"] | list["JSONValue"]

# The smallest value to use if we have to avoid zero (div by zero)
GREATER_ZERO = 1.0 / 1_000_000


# convenience for warnings that gives a more useful stack frame (fn calling the warning, not warning fn itself)
def warn(msg: str, *args: object) -> None:
    """Emit a warning while pointing at the caller instead of this helper.

    Args:
        msg: Warning message to display.
        *args: Additional positional arguments forwarded to `warnings.warn`.
    """
    # mypy doesn't handle *args well with warn overloads
    warnings.warn(msg, *args, stacklevel=3)  # type: ignore[call-overload]


def is_temporal_value(v: object) -> bool:
    """True for dates, datetimes and their numpy/pandas counterparts."""

    return isinstance(v, (date, datetime, pd.Timestamp, np.datetime64))


def is_numeric_value(v: object) -> bool:
    """True for real numbers. Booleans are deliberately not numbers here."""

    return isinstance(v, (numbers.Real, np.number)) and not isinstance(v, (bool, np.bool_))


T = TypeVar("T")


def unique_by(items: Iterable[T], key: Callable[[T], Hashable]) -> List[T]:
    """Drop falsy items and later duplicates (by ``key``) while keeping order.

    Args:
        items: Items to de-duplicate.
        key: Function returning the identity of an item.

    Returns:
        List with the first occurrence of each identity, in input order.
    """

    seen: set[Hashable] = set()
    res: List[T] = []
    for item in items:
        if not item:
            continue
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        res.append(item)
    return res


def replace_constants(
    d: JSONValue | MutableSequence[JSONValue],
    constants: Mapping[str, JSONValue] | None = None,
    inplace: bool = False,
) -> JSONValue | MutableSequence[JSONValue]:
    """Recursively expand ``"constants"`` references inside config dicts.

    Args:
        d: Arbitrary nested structure containing optional ``"constants"`` blocks.
        constants: Pre-existing constant definitions to seed recursion with.
        inplace: Whether to mutate the provided structure.

    Returns:
        Structure with string references swapped for their constant values.
    """

    if not inplace:
        d = deepcopy(d)

    constants_map: Dict[str, JSONValue] = dict(constants or {})
    if isinstance(d, dict) and "constants" in d:
        constants_map.update(d["constants"] or {})
        del d["constants"]

    if not isinstance(d, (dict, list)):
        return d

    iterator = d.items() if isinstance(d, dict) else enumerate(d)
    for k, v in iterator:
        if isinstance(v, str) and v in constants_map:
            d[k] = constants_map[v]
        elif isinstance(v, (dict, list)):
            d[k] = replace_constants(v, constants_map, inplace=True)

    return d


def escape_vega_label(label: str) -> str:
    """Escape characters that confuse Vega Lite (Altair)."""

    return label.replace(".", "․").replace("[", "［").replace("]", "］")


def unescape_vega_label(label: str) -> str:
    """Undo ``escape_vega_label``."""

    return label.replace("․", ".").replace("［", "[").replace("］", "]")


def read_json(fname: str) -> JSONValue:
    """Load JSON file with extension sanity checks."""

    if ".json" not in fname:
        raise FileNotFoundError(f"Expecting {fname} to have a .json extension")
    with open(fname, "r") as jf:
        meta = json.load(jf)
    return meta


def read_yaml(fname: str) -> JSONValue:
    """Load YAML file with extension sanity checks."""

    if ".yaml" not in fname and ".yml" not in fname:
        raise FileNotFoundError(f"Expecting {fname} to have a .yaml extension")
    with open(fname) as stream:
        return yaml.safe_load(stream)
