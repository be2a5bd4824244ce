"""Source type registry — resolves the ``type`` of a sources-file entry."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from trendwatch.ingestion.adapter import SourceAdapter

_ADAPTERS: dict[str, type[SourceAdapter]] = {}


def register_adapter(type_name: str, cls: type[SourceAdapter]) -> None:
    """Make *cls* available to sources-file entries with ``"type": type_name``."""
    _ADAPTERS[type_name] = cls


def get_adapter_class(type_name: str) -> type[SourceAdapter] | None:
    """Adapter class for a sources-file ``type``, or None if unknown."""
    return _ADAPTERS.get(type_name)


def registered_types() -> list[str]:
    """Known source types, sorted; listed when an entry names an unknown one."""
    return sorted(_ADAPTERS)
