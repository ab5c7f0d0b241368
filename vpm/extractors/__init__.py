"""Reference extractors, selectable by name from `.vpm.yml`."""

from __future__ import annotations

from typing import Callable, Dict

from .base import ReferenceExtractor
from .instances import InstanceExtractor

DEFAULT_EXTRACTOR = "instances"

EXTRACTORS: Dict[str, Callable[[], ReferenceExtractor]] = {
    DEFAULT_EXTRACTOR: InstanceExtractor,
}


def get_extractor(name: str | None = None) -> ReferenceExtractor:
    """Instantiate the extractor registered as ``name`` (the default when omitted)."""
    key = (name or DEFAULT_EXTRACTOR).strip().lower()
    try:
        factory = EXTRACTORS[key]
    except KeyError:
        known = ", ".join(sorted(EXTRACTORS))
        raise ValueError(f"Unknown extractor '{name}' (available: {known})") from None
    return factory()


__all__ = [
    "DEFAULT_EXTRACTOR",
    "EXTRACTORS",
    "InstanceExtractor",
    "ReferenceExtractor",
    "get_extractor",
]
