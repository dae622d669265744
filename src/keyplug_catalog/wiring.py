"""
Wiring of the product key service, its interceptors and configuration
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from keyplug_interceptors import (
    ConfigurationError,
    InterceptorFactory,
    InterceptorRegistry,
    load_config,
    parse_config,
)

from .plugins import ProductKeyPlugin, ProductKeyAroundPlugin
from .product import DERIVE_KEY, ProductKeyService

logger = logging.getLogger(__name__)


def get_profile_config(profile: str) -> Dict[str, Any]:
    """
    Get configuration for a built-in profile

    Args:
        profile: Profile name (default, around, disabled, traced)

    Returns:
        Profile configuration
    """
    profiles = {
        'default': {
            'interceptors': [
                {
                    'name': 'product_key',
                    'type': 'product_key',
                    'target': DERIVE_KEY,
                    'sort_order': 10,
                }
            ]
        },
        'around': {
            'interceptors': [
                {
                    'name': 'product_key_around',
                    'type': 'product_key_around',
                    'target': DERIVE_KEY,
                    'sort_order': 10,
                }
            ]
        },
        'disabled': {
            'interceptors': [
                {
                    'name': 'product_key',
                    'type': 'product_key',
                    'target': DERIVE_KEY,
                    'sort_order': 10,
                    'enabled': False,
                }
            ]
        },
        'traced': {
            'interceptors': [
                {
                    'name': 'trace',
                    'type': 'logging',
                    'target': DERIVE_KEY,
                    'sort_order': 0,
                    'config': {'log_level': 'INFO'},
                },
                {
                    'name': 'product_key',
                    'type': 'product_key',
                    'target': DERIVE_KEY,
                    'sort_order': 10,
                },
            ]
        },
    }

    if profile not in profiles:
        raise ConfigurationError(
            f"Unknown profile: {profile}. Must be one of {sorted(profiles)}"
        )
    return profiles[profile]


def create_factory() -> InterceptorFactory:
    """Factory that also knows the catalog interceptor types"""
    factory = InterceptorFactory()
    factory.register('product_key', ProductKeyPlugin)
    factory.register('product_key_around', ProductKeyAroundPlugin)
    return factory


def build_registry(
    profile: str = "default",
    config_path: Optional[Path] = None,
    service: Optional[ProductKeyService] = None
) -> InterceptorRegistry:
    """
    Build a registry with the product key target and its interceptors

    Args:
        profile: Built-in profile, used when no config file is given
        config_path: YAML or JSON configuration file
        service: Service instance providing the target operation

    Returns:
        Ready-to-use registry
    """
    if config_path is not None:
        config = load_config(config_path)
    else:
        config = get_profile_config(profile)

    settings = parse_config(config)
    service = service or ProductKeyService()

    return InterceptorRegistry.from_settings(
        settings,
        targets=[service.target()],
        factory=create_factory()
    )
