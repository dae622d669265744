"""
Interceptor chain and executor
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .base import Interceptor, Phase
from .errors import InterceptionError, InterceptorFailure
from .target import TargetOperation

logger = logging.getLogger(__name__)


class InterceptorChain:
    """
    A target operation plus the interceptors bound to it

    Interceptors are ordered by ascending sort order; ties keep their
    registration order. The enabled state of every interceptor is captured
    when the chain is built, so later enable/disable changes never reach a
    chain that is already executing.
    """

    def __init__(
        self,
        target: TargetOperation,
        interceptors: Iterable[Interceptor] = ()
    ):
        """
        Initialize interceptor chain

        Args:
            target: Operation at the innermost position
            interceptors: Interceptors in registration order
        """
        self.target = target
        # sorted() is stable, so equal sort orders stay in registration order
        self.interceptors: Tuple[Interceptor, ...] = tuple(
            sorted(interceptors, key=lambda x: x.sort_order)
        )
        self.enabled: Tuple[bool, ...] = tuple(bool(i.enabled) for i in self.interceptors)
        self.active: Tuple[Interceptor, ...] = tuple(
            i for i, enabled in zip(self.interceptors, self.enabled) if enabled
        )

        logger.debug(
            f"Built chain for {target.identity} with {len(self.active)} "
            f"of {len(self.interceptors)} interceptors enabled"
        )

    def hooks(self, phase: Phase) -> Tuple[Interceptor, ...]:
        """Enabled interceptors implementing a hook for the phase"""
        return tuple(i for i in self.active if i.supports(phase))

    def is_stale(self) -> bool:
        """Check if any interceptor's enabled flag changed since the chain was built"""
        return any(
            bool(i.enabled) != enabled
            for i, enabled in zip(self.interceptors, self.enabled)
        )

    def get_interceptor(self, name: str) -> Optional[Interceptor]:
        """
        Get interceptor by name

        Args:
            name: Name of interceptor

        Returns:
            Interceptor instance or None
        """
        for interceptor in self.interceptors:
            if interceptor.name == name:
                return interceptor
        return None

    def list_interceptors(self) -> List[Dict[str, Any]]:
        """
        List all interceptors in chain, as this chain runs them

        Returns:
            List of interceptor info
        """
        return [
            dict(i.describe(), enabled=enabled, target=self.target.identity)
            for i, enabled in zip(self.interceptors, self.enabled)
        ]

    def __len__(self) -> int:
        return len(self.active)

    def __repr__(self) -> str:
        names = ", ".join(i.name for i in self.active)
        return f"InterceptorChain({self.target.identity}: [{names}])"


@dataclass
class ExecutionContext:
    """State of a single chain invocation"""
    target: str
    args: Tuple[Any, ...]
    result: Any = None
    phase: Optional[Phase] = None
    trail: List[Tuple[str, Phase]] = field(default_factory=list)

    def record(self, name: str, phase: Phase):
        self.phase = phase
        self.trail.append((name, phase))


class ChainExecutor:
    """
    Runs a chain: before hooks, then the (possibly wrapped) invocation,
    then after hooks

    The executor keeps no state between calls and is safe to share.
    """

    def invoke(self, chain: InterceptorChain, *args: Any) -> Any:
        """
        Invoke the chain's target through its interceptors

        Args:
            chain: Chain to execute
            *args: Initial positional arguments

        Returns:
            Final result after all after hooks

        Raises:
            ArgumentMismatch: If arguments do not fit the target or a
                before/around hook
            InterceptorFailure: If a hook or the target raised
        """
        return self.run(chain, *args).result

    def run(self, chain: InterceptorChain, *args: Any) -> ExecutionContext:
        """Invoke the chain and return the full execution context"""
        target = chain.target
        target.check_arguments(args)

        context = ExecutionContext(target=target.identity, args=args)

        # Before phase
        for interceptor in chain.hooks(Phase.BEFORE):
            interceptor.check_arguments(Phase.BEFORE, context.args)
            context.record(interceptor.name, Phase.BEFORE)
            returned = self._call_hook(
                interceptor.name, Phase.BEFORE, interceptor.before, *context.args
            )
            context.args = self._normalize_args(returned, context.args)
            target.check_arguments(context.args, source=f"{interceptor.name} before")

        # Invocation phase, folded so the lowest sort order is outermost
        call = self._invoke_target(chain, context)
        for interceptor in reversed(chain.hooks(Phase.AROUND)):
            call = self._wrap_around(chain, interceptor, call, context)
        context.result = call(*context.args)

        # After phase, same order as before
        for interceptor in chain.hooks(Phase.AFTER):
            context.record(interceptor.name, Phase.AFTER)
            context.result = self._call_hook(
                interceptor.name, Phase.AFTER, interceptor.after, context.result
            )

        return context

    def _invoke_target(
        self,
        chain: InterceptorChain,
        context: ExecutionContext
    ) -> Callable[..., Any]:
        """Innermost layer: the target operation itself"""
        target = chain.target

        def invoke_target(*args: Any) -> Any:
            context.record(target.identity, Phase.INVOKE)
            return self._call_hook(target.identity, Phase.INVOKE, target, *args)

        return invoke_target

    def _wrap_around(
        self,
        chain: InterceptorChain,
        interceptor: Interceptor,
        inner: Callable[..., Any],
        context: ExecutionContext
    ) -> Callable[..., Any]:
        """Wrap the inner layer with an around hook"""
        target = chain.target

        def proceed(*args: Any) -> Any:
            target.check_arguments(args, source=f"{interceptor.name} proceed")
            return inner(*args)

        def layer(*args: Any) -> Any:
            interceptor.check_arguments(Phase.AROUND, args)
            context.record(interceptor.name, Phase.AROUND)
            return self._call_hook(
                interceptor.name, Phase.AROUND, interceptor.around, proceed, *args
            )

        return layer

    def _call_hook(
        self,
        name: str,
        phase: Phase,
        hook: Callable[..., Any],
        *args: Any
    ) -> Any:
        """Call a hook, annotating failures with interceptor and phase"""
        try:
            return hook(*args)
        except InterceptionError:
            # Already annotated by an inner layer
            raise
        except Exception as e:
            logger.error(f"Error in {name} during {phase.value} phase: {e}")
            raise InterceptorFailure(name, phase.value, e) from e

    @staticmethod
    def _normalize_args(returned: Any, current: Tuple[Any, ...]) -> Tuple[Any, ...]:
        """None keeps the arguments, a tuple replaces them, a value replaces the sole argument"""
        if returned is None:
            return current
        if isinstance(returned, tuple):
            return returned
        return (returned,)
