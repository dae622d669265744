"""
Target operations that interceptor chains are built around
"""

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple

from .errors import ArgumentMismatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetOperation:
    """A named operation owned by a subject"""
    subject: str
    name: str
    func: Callable[..., Any]
    arg_types: Optional[Tuple[type, ...]] = None
    signature: Optional[inspect.Signature] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        try:
            signature = inspect.signature(self.func)
        except (TypeError, ValueError):
            # Builtins without introspectable signatures accept anything
            signature = None
        object.__setattr__(self, 'signature', signature)

    @property
    def identity(self) -> str:
        """Stable identity used to look up the chain"""
        return f"{self.subject}.{self.name}"

    def check_arguments(self, args: Tuple[Any, ...], source: Optional[str] = None):
        """
        Check an argument tuple against the operation's arity and types

        Args:
            args: Positional arguments to check
            source: Who produced the arguments, for the error message

        Raises:
            ArgumentMismatch: If the arguments do not fit
        """
        origin = f" (from {source})" if source else ""

        if self.signature is not None:
            try:
                self.signature.bind(*args)
            except TypeError as e:
                raise ArgumentMismatch(
                    f"{self.identity} cannot take {len(args)} argument(s){origin}: {e}"
                ) from None

        if self.arg_types is not None:
            for position, (value, expected) in enumerate(zip(args, self.arg_types)):
                if not isinstance(value, expected):
                    raise ArgumentMismatch(
                        f"{self.identity} argument {position} must be "
                        f"{expected.__name__}, got {type(value).__name__}{origin}"
                    )

    def __call__(self, *args: Any) -> Any:
        return self.func(*args)
