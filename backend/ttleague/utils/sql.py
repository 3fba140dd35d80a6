"""Helpers for reading aggregate query results."""
from typing import Any


def scalar_int(result: Any) -> int:
    """COUNT comes back as a bare int or a one-element Row depending on the select form."""
    if isinstance(result, int):
        return result
    return int(result[0])
