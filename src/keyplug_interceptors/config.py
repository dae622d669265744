"""
Configuration management for interceptor chains
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError

if TYPE_CHECKING:
    from .factory import InterceptorFactory

logger = logging.getLogger(__name__)


class InterceptorSettings(BaseModel):
    """One interceptor registration"""
    name: str
    type: str
    target: str
    sort_order: Optional[int] = None  # Falls back to the interceptor class default
    enabled: bool = True
    config: Dict[str, Any] = Field(default_factory=dict)

    def interceptor_config(self) -> Dict[str, Any]:
        """Configuration dict passed to the interceptor constructor"""
        merged = dict(self.config)
        merged['name'] = self.name
        merged['enabled'] = self.enabled
        if self.sort_order is not None:
            merged['sort_order'] = self.sort_order
        return merged


class InterceptionSettings(BaseModel):
    """Interceptor registrations for a set of target operations"""
    interceptors: List[InterceptorSettings] = Field(default_factory=list)


def load_config(path: Path) -> Dict[str, Any]:
    """
    Load configuration from file

    Args:
        path: Path to configuration file (JSON or YAML)

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigurationError: If the file cannot be read or parsed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix in ('.yaml', '.yml'):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot parse {path}: {e}") from e
    except (UnicodeDecodeError, OSError) as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Top level of {path} must be a mapping")

    logger.info(f"Loaded config from {path}")
    return data


def validate_config(
    config: Dict[str, Any],
    factory: Optional["InterceptorFactory"] = None
) -> List[str]:
    """
    Validate configuration

    Args:
        config: Configuration dictionary
        factory: If given, interceptor types are checked against it

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    try:
        settings = InterceptionSettings.model_validate(config)
    except ValidationError as e:
        for error in e.errors():
            location = ".".join(str(part) for part in error['loc'])
            errors.append(f"{location}: {error['msg']}")
        return errors

    seen = set()
    for i, interceptor in enumerate(settings.interceptors):
        key = (interceptor.target, interceptor.name)
        if key in seen:
            errors.append(
                f"Interceptor {i} duplicates name {interceptor.name!r} "
                f"on {interceptor.target}"
            )
        seen.add(key)

        if factory is not None and not factory.knows(interceptor.type):
            errors.append(f"Interceptor {i} has unknown type: {interceptor.type}")

    return errors


def parse_config(config: Dict[str, Any]) -> InterceptionSettings:
    """
    Parse and validate configuration

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    errors = validate_config(config)
    if errors:
        raise ConfigurationError("Invalid configuration: " + "; ".join(errors))
    return InterceptionSettings.model_validate(config)
