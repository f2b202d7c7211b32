"""Helpers for layering configuration dictionaries."""

from typing import Any, Dict


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Layer ``override`` on top of a dumped configuration.

    Sections such as ``solver`` or ``belief`` are merged key by key, so an
    override of ``{"belief": {"horizon": 3}}`` keeps every other belief
    setting from ``base``. Anything that is not a section on both sides is
    replaced outright. Neither argument is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        section = merged.get(key)
        if isinstance(section, dict) and isinstance(value, dict):
            value = deep_merge(section, value)
        merged[key] = value
    return merged
