"""
Keyplug Interceptor Framework
"""

from .base import Interceptor, FunctionInterceptor, Phase
from .chain import InterceptorChain, ChainExecutor, ExecutionContext
from .config import InterceptorSettings, InterceptionSettings, load_config, validate_config, parse_config
from .errors import (
    InterceptionError,
    ArgumentMismatch,
    InterceptorFailure,
    UnknownTarget,
    DuplicateRegistration,
    ConfigurationError,
)
from .factory import InterceptorFactory
from .logging import LoggingInterceptor
from .registry import InterceptorRegistry
from .target import TargetOperation

__all__ = [
    "Interceptor",
    "FunctionInterceptor",
    "Phase",
    "InterceptorChain",
    "ChainExecutor",
    "ExecutionContext",
    "InterceptorSettings",
    "InterceptionSettings",
    "load_config",
    "validate_config",
    "parse_config",
    "InterceptionError",
    "ArgumentMismatch",
    "InterceptorFailure",
    "UnknownTarget",
    "DuplicateRegistration",
    "ConfigurationError",
    "InterceptorFactory",
    "LoggingInterceptor",
    "InterceptorRegistry",
    "TargetOperation",
]
