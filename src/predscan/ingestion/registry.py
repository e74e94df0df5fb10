"""Platform adapter registry, keyed by platform id."""

from __future__ import annotations

import inspect
from typing import Any, Iterable

from predscan.ingestion.base import PlatformAdapter
from predscan.ingestion.kalshi.client import KalshiAdapter
from predscan.ingestion.manifold.client import ManifoldAdapter
from predscan.ingestion.metaculus.client import MetaculusAdapter
from predscan.ingestion.polymarket.gamma import PolymarketAdapter
from predscan.ingestion.predictit.client import PredictItAdapter

ADAPTERS: dict[str, type[PlatformAdapter]] = {
    cls.platform_id: cls
    for cls in (
        PolymarketAdapter,
        KalshiAdapter,
        PredictItAdapter,
        ManifoldAdapter,
        MetaculusAdapter,
    )
}


def parse_platforms(value: str | Iterable[str]) -> list[str]:
    """'Polymarket, kalshi' -> ['polymarket', 'kalshi'] (order kept, duplicates dropped)."""
    names = value.split(",") if isinstance(value, str) else list(value)
    seen: list[str] = []
    for name in names:
        key = name.strip().lower()
        if key and key not in seen:
            seen.append(key)
    return seen


def adapter_options(cls: type[PlatformAdapter]) -> set[str]:
    """Keyword arguments the adapter class accepts across its __init__ chain."""
    names: set[str] = set()
    for klass in cls.__mro__:
        init = klass.__dict__.get("__init__")
        if init is None or klass is object:
            continue
        for param in inspect.signature(init).parameters.values():
            if param.name != "self" and param.kind in (param.POSITIONAL_OR_KEYWORD, param.KEYWORD_ONLY):
                names.add(param.name)
    return names


def check_options(options: dict[str, dict[str, Any]]) -> None:
    """Raise ValueError for option keys a known adapter does not take."""
    for platform_id, values in options.items():
        cls = ADAPTERS.get(platform_id)
        if cls is None:
            continue
        unsupported = sorted(set(values) - adapter_options(cls))
        if unsupported:
            raise ValueError(
                f"unsupported option(s) for {platform_id}: {', '.join(unsupported)}"
            )


def get_adapters(
    names: Iterable[str],
    options: dict[str, dict[str, Any]] | None = None,
    **common: Any,
) -> list[PlatformAdapter]:
    """Instantiate adapters in the given order.

    ``options`` holds per-platform constructor kwargs; ``common`` is passed to all.
    Raises ValueError on an unknown platform id or an unsupported option.
    """
    options = options or {}
    check_options(options)
    names = parse_platforms(names)
    unknown = [n for n in names if n not in ADAPTERS]
    if unknown:
        raise ValueError(
            f"unknown platform(s): {', '.join(unknown)} (available: {', '.join(ADAPTERS)})"
        )
    return [ADAPTERS[n](**{**common, **options.get(n, {})}) for n in names]
