"""
Factory for creating interceptors from configuration
"""

import logging
from typing import Any, Dict, Type, Union

from .base import Interceptor, FunctionInterceptor
from .config import InterceptorSettings
from .errors import ConfigurationError
from .loader import resolve_object
from .logging import LoggingInterceptor

logger = logging.getLogger(__name__)


class InterceptorFactory:
    """
    Factory for creating interceptors from configuration
    """

    def __init__(self):
        # Registry of interceptor types
        self.registry = {
            'function': FunctionInterceptor,
            'logging': LoggingInterceptor,
        }

    def knows(self, interceptor_type: str) -> bool:
        """Check if a type resolves to an interceptor class"""
        try:
            self.resolve_type(interceptor_type)
        except ConfigurationError as e:
            logger.debug(f"Cannot resolve interceptor type {interceptor_type}: {e}")
            return False
        return True

    def resolve_type(self, interceptor_type: str) -> Type[Interceptor]:
        """
        Resolve a type name to an interceptor class

        A type containing ':' is imported as ``"package.module:ClassName"``.

        Raises:
            ConfigurationError: If the type is unknown or not an Interceptor class
        """
        if ':' in interceptor_type:
            interceptor_class = resolve_object(interceptor_type)
        else:
            interceptor_class = self.registry.get(interceptor_type.lower())
            if interceptor_class is None:
                raise ConfigurationError(f"Unknown interceptor type: {interceptor_type}")

        if not (isinstance(interceptor_class, type) and issubclass(interceptor_class, Interceptor)):
            raise ConfigurationError(f"{interceptor_type} is not an Interceptor class")
        return interceptor_class

    def create(self, settings: Union[InterceptorSettings, Dict[str, Any]]) -> Interceptor:
        """
        Create interceptor from configuration

        Args:
            settings: Interceptor settings, or a dict with 'type' and
                optional 'config'

        Returns:
            Interceptor instance

        Raises:
            ConfigurationError: If the type is unknown or construction fails
        """
        if isinstance(settings, InterceptorSettings):
            interceptor_type = settings.type
            config = settings.interceptor_config()
        else:
            interceptor_type = settings.get('type')
            config = dict(settings.get('config', {}))

        if not interceptor_type:
            raise ConfigurationError("Interceptor configuration missing 'type' field")

        interceptor_class = self.resolve_type(interceptor_type)

        try:
            interceptor = interceptor_class(config)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(
                f"Error creating interceptor {interceptor_type}: {e}"
            ) from e

        logger.debug(f"Created {interceptor!r} from type {interceptor_type}")
        return interceptor

    def register(self, name: str, interceptor_class: type):
        """
        Register custom interceptor type

        Args:
            name: Name for the interceptor type
            interceptor_class: Interceptor class
        """
        self.registry[name.lower()] = interceptor_class
        logger.info(f"Registered interceptor type: {name}")
