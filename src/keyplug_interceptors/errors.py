"""
Error types raised by the interception framework
"""


class InterceptionError(Exception):
    """Base class for all interception errors"""
    pass


class ArgumentMismatch(InterceptionError, TypeError):
    """
    Raised when an argument tuple does not fit the target operation or
    the before/around hook it is passed to
    """
    pass


class InterceptorFailure(InterceptionError):
    """
    Raised when an interceptor hook or the target operation fails

    The original exception is available as ``__cause__``.
    """

    def __init__(self, interceptor: str, phase: str, cause: BaseException):
        super().__init__(
            f"{phase} phase of {interceptor} failed: {type(cause).__name__}: {cause}"
        )
        self.interceptor = interceptor
        self.phase = phase


class UnknownTarget(InterceptionError, LookupError):
    """Raised when no target operation is registered under an identity"""
    pass


class DuplicateRegistration(InterceptionError):
    """Raised when a target or interceptor name is registered twice"""
    pass


class ConfigurationError(InterceptionError):
    """Raised for invalid interceptor configuration"""
    pass
