"""Recursive structural merge for payload overrides."""

from __future__ import annotations

import copy
from typing import Any


def replace_recursive(base: Any, override: Any) -> Any:
    """Merge ``override`` into ``base``, override values winning.

    Dicts are merged key by key and lists index by index, recursively; any
    other value (or a type mismatch) is replaced by the override. Neither
    input is modified.

    Example:
        >>> replace_recursive({"a": [{"x": 1, "y": 2}]}, {"a": [{"y": 3}]})
        {'a': [{'x': 1, 'y': 3}]}
    """
    if isinstance(base, dict) and isinstance(override, dict):
        merged = copy.deepcopy(base)
        for key, value in override.items():
            if key in base:
                merged[key] = replace_recursive(base[key], value)
            else:
                merged[key] = copy.deepcopy(value)
        return merged

    if isinstance(base, list) and isinstance(override, list):
        merged_list = copy.deepcopy(base)
        for index, value in enumerate(override):
            if index < len(base):
                merged_list[index] = replace_recursive(base[index], value)
            else:
                merged_list.append(copy.deepcopy(value))
        return merged_list

    return copy.deepcopy(override)
