"""
Import-path resolution for configured hooks and interceptor classes
"""

import importlib
import logging
from typing import Any, Callable, Union

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def resolve_object(path: str) -> Any:
    """
    Resolve ``"package.module:attribute"`` (or ``"package.module.attribute"``)

    Args:
        path: Import path of the object

    Returns:
        The resolved object

    Raises:
        ConfigurationError: If the module or attribute cannot be found
    """
    if ':' in path:
        module_name, _, attr_path = path.partition(':')
    else:
        module_name, _, attr_path = path.rpartition('.')

    if not module_name or not attr_path:
        raise ConfigurationError(f"Invalid import path: {path!r}")

    try:
        module = importlib.import_module(module_name)
    except Exception as e:
        # Broken modules fail with SyntaxError and the like, not only ImportError
        raise ConfigurationError(f"Cannot import module {module_name!r}: {e}") from e

    obj = module
    for attr in attr_path.split('.'):
        try:
            obj = getattr(obj, attr)
        except AttributeError:
            raise ConfigurationError(
                f"Module {module_name!r} has no attribute {attr_path!r}"
            ) from None

    logger.debug(f"Resolved {path}")
    return obj


def resolve_callable(hook: Union[str, Callable[..., Any]]) -> Callable[..., Any]:
    """Resolve a hook given as a callable or an import path"""
    if callable(hook):
        return hook

    obj = resolve_object(hook)
    if not callable(obj):
        raise ConfigurationError(f"{hook!r} does not resolve to a callable")
    return obj
