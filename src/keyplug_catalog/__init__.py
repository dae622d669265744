"""
Keyplug Catalog - product key derivation extended through interceptors
"""

from .plugins import ProductKeyPlugin, ProductKeyAroundPlugin
from .product import ProductKeyService, DERIVE_KEY
from .wiring import build_registry, create_factory, get_profile_config

__version__ = "1.0.0"

__all__ = [
    "ProductKeyPlugin",
    "ProductKeyAroundPlugin",
    "ProductKeyService",
    "DERIVE_KEY",
    "build_registry",
    "create_factory",
    "get_profile_config",
]
