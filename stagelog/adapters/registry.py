from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stagelog.adapters.base import VenueAdapter

ADAPTER_REGISTRY: dict[str, type[VenueAdapter]] = {}


def register_adapter(key: str):
    """Decorator to register an adapter class under a key."""
    def decorator(cls):
        cls.key = key
        ADAPTER_REGISTRY[key] = cls
        return cls
    return decorator


def get_adapter(key: str) -> VenueAdapter:
    """Return an adapter instance for the given key."""
    if key not in ADAPTER_REGISTRY:
        raise KeyError(
            f"Unknown venue adapter '{key}' (known: {', '.join(list_adapter_keys()) or 'none'})"
        )
    return ADAPTER_REGISTRY[key]()


def list_adapter_keys() -> list[str]:
    """Return all registered adapter keys."""
    return sorted(ADAPTER_REGISTRY.keys())
