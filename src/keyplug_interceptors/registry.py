"""
Registry of target operations and the interceptors bound to them
"""

import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .base import Interceptor, FunctionInterceptor
from .chain import ChainExecutor, ExecutionContext, InterceptorChain
from .config import InterceptionSettings
from .errors import DuplicateRegistration, UnknownTarget
from .factory import InterceptorFactory
from .target import TargetOperation

logger = logging.getLogger(__name__)


class InterceptorRegistry:
    """
    Host-side registration surface

    Holds the target operations and their interceptors, and resolves
    ``invoke(identity, *args)`` to the matching chain. Chains are built
    from a snapshot taken under a lock and cached until the next change,
    so an invocation always runs against a fixed set of interceptors.
    """

    def __init__(self, executor: Optional[ChainExecutor] = None):
        self.executor = executor or ChainExecutor()
        self._targets: Dict[str, TargetOperation] = {}
        self._interceptors: Dict[str, List[Interceptor]] = {}
        self._chains: Dict[str, InterceptorChain] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_settings(
        cls,
        settings: InterceptionSettings,
        targets: Iterable[TargetOperation],
        factory: Optional[InterceptorFactory] = None,
        executor: Optional[ChainExecutor] = None
    ) -> "InterceptorRegistry":
        """
        Build a registry from parsed configuration

        Args:
            settings: Interceptor registrations
            targets: Target operations the registrations refer to
            factory: Factory used to create the interceptors
            executor: Executor used for invocations
        """
        factory = factory or InterceptorFactory()
        registry = cls(executor)

        for target in targets:
            registry.register_target(target)

        for interceptor_settings in settings.interceptors:
            interceptor = factory.create(interceptor_settings)
            registry.register(interceptor_settings.target, interceptor)

        logger.info(
            f"Registry built with {len(registry._targets)} targets and "
            f"{len(settings.interceptors)} interceptors"
        )
        return registry

    def register_target(self, target: TargetOperation) -> TargetOperation:
        """
        Register a target operation

        Raises:
            DuplicateRegistration: If the identity is already registered
        """
        with self._lock:
            if target.identity in self._targets:
                raise DuplicateRegistration(f"Target already registered: {target.identity}")
            self._targets[target.identity] = target
            self._interceptors[target.identity] = []
            self._chains.pop(target.identity, None)

        logger.info(f"Registered target {target.identity}")
        return target

    def register(self, identity: str, interceptor: Interceptor) -> Interceptor:
        """
        Bind an interceptor to a target

        Args:
            identity: Target identity
            interceptor: Interceptor to add after the existing ones

        Raises:
            UnknownTarget: If the target is not registered
            DuplicateRegistration: If the name is already bound to the target
        """
        with self._lock:
            interceptors = self._get_interceptors(identity)
            if any(i.name == interceptor.name for i in interceptors):
                raise DuplicateRegistration(
                    f"Interceptor {interceptor.name} already registered on {identity}"
                )
            interceptors.append(interceptor)
            self._chains.pop(identity, None)

        logger.info(
            f"Registered {interceptor.name} on {identity} "
            f"(sort_order={interceptor.sort_order}, enabled={interceptor.enabled})"
        )
        return interceptor

    def register_hooks(
        self,
        identity: str,
        name: str,
        sort_order: int = 0,
        enabled: bool = True,
        before: Optional[Callable[..., Any]] = None,
        around: Optional[Callable[..., Any]] = None,
        after: Optional[Callable[..., Any]] = None
    ) -> Interceptor:
        """Bind plain callables as an interceptor"""
        interceptor = FunctionInterceptor(
            {'name': name, 'sort_order': sort_order, 'enabled': enabled},
            before=before,
            around=around,
            after=after
        )
        return self.register(identity, interceptor)

    def unregister(self, identity: str, name: str) -> bool:
        """
        Remove interceptor by name

        Returns:
            True if removed
        """
        with self._lock:
            interceptors = self._get_interceptors(identity)
            remaining = [i for i in interceptors if i.name != name]
            removed = len(remaining) < len(interceptors)
            if removed:
                self._interceptors[identity] = remaining
                self._chains.pop(identity, None)

        if removed:
            logger.info(f"Unregistered {name} from {identity}")
        return removed

    def set_enabled(self, identity: str, name: str, enabled: bool) -> bool:
        """
        Enable or disable an interceptor

        Chains already handed out keep the state they were built with.

        Returns:
            True if the interceptor was found
        """
        with self._lock:
            for interceptor in self._get_interceptors(identity):
                if interceptor.name == name:
                    interceptor.enabled = enabled
                    self._chains.pop(identity, None)
                    logger.info(f"{'Enabled' if enabled else 'Disabled'} {name} on {identity}")
                    return True
        return False

    def chain(self, identity: str) -> InterceptorChain:
        """Get the current chain for a target"""
        with self._lock:
            chain = self._chains.get(identity)
            # Flags flipped directly on a registered interceptor also rebuild
            if chain is None or chain.is_stale():
                target = self._get_target(identity)
                chain = InterceptorChain(target, list(self._interceptors[identity]))
                self._chains[identity] = chain
            return chain

    def invoke(self, identity: str, *args: Any) -> Any:
        """Invoke a target through its chain"""
        return self.executor.invoke(self.chain(identity), *args)

    def run(self, identity: str, *args: Any) -> ExecutionContext:
        """Invoke a target and return the execution context"""
        return self.executor.run(self.chain(identity), *args)

    def targets(self) -> Tuple[str, ...]:
        """Registered target identities"""
        with self._lock:
            return tuple(self._targets)

    def list_interceptors(self, identity: Optional[str] = None) -> List[Dict[str, Any]]:
        """List interceptors of one target, or of all targets"""
        identities = [identity] if identity else self.targets()
        listing = []
        for target_identity in identities:
            listing.extend(self.chain(target_identity).list_interceptors())
        return listing

    def _get_target(self, identity: str) -> TargetOperation:
        try:
            return self._targets[identity]
        except KeyError:
            raise UnknownTarget(f"No target registered as {identity}") from None

    def _get_interceptors(self, identity: str) -> List[Interceptor]:
        self._get_target(identity)
        return self._interceptors[identity]
