"""Merge per-plugin override sets into a signature -> plugins index."""

from typing import Iterable

from mzguard.schemas.plugins import OverrideIndex, PluginHeader


def aggregate_overrides(headers: Iterable[PluginHeader]) -> OverrideIndex:
    """
    Index which plugins touch which method, in load order.

    Args:
        headers: Plugin headers; their order is the load order and is kept
            as-is in every plugin list

    Returns:
        OverrideIndex whose ``total_overrides`` is the raw, per-plugin sum
        (a method touched by three plugins counts three times)
    """
    methods: dict[str, list[str]] = {}
    total_overrides = 0

    for header in headers:
        total_overrides += len(header.overrides)
        for method in header.overrides:
            plugins = methods.get(method)
            if plugins is None:
                methods[method] = [header.name]
            else:
                plugins.append(header.name)

    return OverrideIndex(methods=methods, total_overrides=total_overrides)
