import jsonpickle
from datetime import datetime, timezone
from typing import Any, Dict

RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def now() -> str:
    """Current time as a Kubernetes timestamp (RFC 3339, second precision)."""
    return utc_now().strftime(RFC3339_FORMAT)


def sort_dict_keys(d):
    """Recursively sort dictionary keys and handle nested structures.

    Args:
        d: Data structure (dict, list, or primitive type)

    Returns:
        Sorted version of the data structure
    """
    if isinstance(d, dict):
        return {
            key: sort_dict_keys(value)
            for key, value in sorted(d.items())
        }
    elif isinstance(d, list):
        return [sort_dict_keys(item) for item in d]
    else:
        return d


def canonicalize_dict(data) -> str:
    """
    Returns a canonical JSON representation of a dictionary.

    Keys are sorted recursively, so the representation stays the same
    even when key order varies.
    """
    return jsonpickle.dumps(sort_dict_keys(data), unpicklable=False)


def deep_compare_dict(data1, data2) -> bool:
    """Compare two JSON-like structures, ignoring key order."""
    if data1 is None and data2 is None:
        return True
    if data1 is None or data2 is None:
        return False
    if not isinstance(data1, type(data2)) and not isinstance(data2, type(data1)):
        return False
    try:
        return canonicalize_dict(data1) == canonicalize_dict(data2)
    except (TypeError, ValueError):
        return data1 == data2


def create_merge_patch(original: Any, modified: Any) -> Dict[str, Any]:
    """Build a JSON merge patch (RFC 7386) turning `original` into `modified`.

    Keys removed in `modified` are set to None. Lists are replaced whole,
    since merge patches cannot address list items.
    """
    patch = {}
    original = original or {}
    for key, value in modified.items():
        if key not in original:
            patch[key] = value
        elif isinstance(value, dict) and isinstance(original[key], dict):
            nested = create_merge_patch(original[key], value)
            if nested:
                patch[key] = nested
        elif not deep_compare_dict(original[key], value):
            patch[key] = value
    for key in original:
        if key not in modified:
            patch[key] = None
    return patch
