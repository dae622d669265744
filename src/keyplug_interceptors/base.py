"""
Base interceptor interface and phase types
"""

import inspect
from enum import Enum
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple

from .errors import ArgumentMismatch
from .loader import resolve_callable


class Phase(Enum):
    """Chain execution phases"""
    BEFORE = "before"    # Transform arguments
    AROUND = "around"    # Wrap the invocation
    INVOKE = "invoke"    # Target operation itself
    AFTER = "after"      # Transform the result


HOOK_PHASES = (Phase.BEFORE, Phase.AROUND, Phase.AFTER)


class Interceptor:
    """
    Base class for all interceptors

    Subclasses implement any of three optional hooks:

        before(*args) -> None | tuple | value
        around(proceed, *args) -> result
        after(result) -> result

    A hook that is not defined is skipped in its phase.
    """

    sort_order: int = 0  # Lower sort order runs first
    name: str = "base"  # Interceptor name

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize interceptor

        Args:
            config: Interceptor configuration
        """
        self.config = config or {}
        self.enabled = self.config.get('enabled', True)
        if 'name' in self.config:
            self.name = self.config['name']
        if 'sort_order' in self.config:
            self.sort_order = int(self.config['sort_order'])

    @property
    def capabilities(self) -> FrozenSet[Phase]:
        """Hook phases this interceptor implements"""
        return frozenset(
            phase for phase in HOOK_PHASES
            if callable(getattr(self, phase.value, None))
        )

    def supports(self, phase: Phase) -> bool:
        """Check if interceptor implements a hook for the phase"""
        return phase in self.capabilities

    def check_arguments(self, phase: Phase, args: Tuple[Any, ...]):
        """
        Check that the hook for a phase can be called with an argument tuple

        Around hooks are checked as ``around(proceed, *args)``. Hooks without
        an introspectable signature are not checked.

        Raises:
            ArgumentMismatch: If the hook cannot take the arguments
        """
        signature = self._hook_signature(phase)
        if signature is None:
            return

        bound = (None,) + tuple(args) if phase is Phase.AROUND else args
        try:
            signature.bind(*bound)
        except TypeError as e:
            raise ArgumentMismatch(
                f"{self.name} {phase.value} hook cannot take {len(args)} argument(s): {e}"
            ) from None

    def _hook_signature(self, phase: Phase) -> Optional[inspect.Signature]:
        hook = getattr(self, phase.value)
        cache = self.__dict__.setdefault('_signatures', {})

        # Keyed on the hook too, so reassigned hooks are re-inspected
        cached = cache.get(phase)
        if cached is not None and cached[0] == hook:
            return cached[1]

        try:
            signature = inspect.signature(hook)
        except (TypeError, ValueError):
            signature = None
        cache[phase] = (hook, signature)
        return signature

    def describe(self) -> Dict[str, Any]:
        """Summary used by listings"""
        return {
            'name': self.name,
            'sort_order': self.sort_order,
            'enabled': self.enabled,
            'capabilities': sorted(phase.value for phase in self.capabilities),
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, "
            f"sort_order={self.sort_order}, enabled={self.enabled})"
        )


class FunctionInterceptor(Interceptor):
    """
    Interceptor assembled from plain callables

    Hooks can be passed directly or, in configuration, as
    ``"package.module:attribute"`` import paths.
    """

    name = "function"

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        before: Optional[Callable[..., Any]] = None,
        around: Optional[Callable[..., Any]] = None,
        after: Optional[Callable[..., Any]] = None,
    ):
        super().__init__(config)

        hooks = {'before': before, 'around': around, 'after': after}
        for phase_name, hook in hooks.items():
            if hook is None and self.config.get(phase_name):
                hook = resolve_callable(self.config[phase_name])
            if hook is not None:
                setattr(self, phase_name, hook)
