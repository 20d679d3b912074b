"""Platform adapter registry for chain-based media resolution."""
from typing import Any, Dict, Type

from media_resolver_api.models import Platform
from .base import PlatformAdapter

_ADAPTER_REGISTRY: Dict[Platform, Type[PlatformAdapter]] = {}


def register_adapter(adapter_class: Type[PlatformAdapter]) -> None:
    """Register a platform adapter class.

    Raises:
        ValueError: If an adapter is already registered for this platform.
    """
    name = adapter_class.platform_name()
    if name in _ADAPTER_REGISTRY:
        raise ValueError(f"Adapter already registered for platform '{name}'")
    _ADAPTER_REGISTRY[name] = adapter_class


def get_adapter(platform: Platform, **options: Any) -> PlatformAdapter:
    """Get an instantiated adapter for the given platform.

    Raises:
        KeyError: If no adapter is registered for the platform.
    """
    cls = _ADAPTER_REGISTRY[platform]
    return cls(**options)


def has_adapter(platform: Platform) -> bool:
    return platform in _ADAPTER_REGISTRY


__all__ = [
    "register_adapter",
    "get_adapter",
    "has_adapter",
    "PlatformAdapter",
]

# Auto-load adapters (triggers self-registration)
from . import instagram_adapter  # noqa: F401,E402
from . import starmaker_adapter  # noqa: F401,E402
