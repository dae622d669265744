"""
Interceptors for product key derivation
"""

import logging
from typing import Any, Callable, Dict, Optional

from keyplug_interceptors import Interceptor

logger = logging.getLogger(__name__)


class ProductKeyPlugin(Interceptor):
    """
    Normalizes the SKU before derivation and shortens the derived key

    Uses separate before and after hooks.
    """

    name = "product_key"
    sort_order = 10

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.key_length = int(self.config.get('key_length', 8))

    def before(self, sku: str) -> str:
        logger.debug(f"{self.name}: uppercasing {sku!r}")
        return sku.upper()

    def after(self, key: str) -> str:
        return key[:self.key_length]


class ProductKeyAroundPlugin(Interceptor):
    """Same transformation as ProductKeyPlugin from a single around hook"""

    name = "product_key_around"
    sort_order = 10

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.key_length = int(self.config.get('key_length', 8))

    def around(self, proceed: Callable[[str], str], sku: str) -> str:
        key = proceed(sku.upper())
        return key[:self.key_length]
