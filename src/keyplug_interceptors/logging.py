"""
Logging interceptor for tracing and debugging
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

from .base import Interceptor

logger = logging.getLogger(__name__)


class LoggingInterceptor(Interceptor):
    """
    Around interceptor that logs arguments, result and elapsed time
    of the layers it wraps
    """

    name = "logging"
    sort_order = -1000  # Outermost by default so it times the whole chain

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)

        self.log_level = getattr(
            logging, str(self.config.get('log_level', 'INFO')).upper(), logging.INFO
        )
        self.include_args = self.config.get('include_args', True)
        self.include_result = self.config.get('include_result', True)
        self.max_length = self.config.get('max_length', 200)
        self.logger = logging.getLogger(self.config.get('logger', __name__))

        # Statistics, shared by concurrent invocations
        self.calls = 0
        self.failures = 0
        self._stats_lock = threading.Lock()

    def around(self, proceed: Callable[..., Any], *args: Any) -> Any:
        with self._stats_lock:
            self.calls += 1
        if self.include_args:
            self.logger.log(self.log_level, f"{self.name} -> args={self._format(args)}")

        started = time.perf_counter()
        try:
            result = proceed(*args)
        except Exception as e:
            with self._stats_lock:
                self.failures += 1
            elapsed_ms = (time.perf_counter() - started) * 1000
            self.logger.log(
                self.log_level,
                f"{self.name} !! {type(e).__name__} after {elapsed_ms:.3f}ms"
            )
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        if self.include_result:
            self.logger.log(
                self.log_level,
                f"{self.name} <- result={self._format(result)} in {elapsed_ms:.3f}ms"
            )
        else:
            self.logger.log(self.log_level, f"{self.name} <- done in {elapsed_ms:.3f}ms")
        return result

    def _format(self, value: Any) -> str:
        text = repr(value)
        if len(text) > self.max_length:
            return text[:self.max_length] + "..."
        return text

    def get_stats(self) -> Dict[str, Any]:
        """Get call statistics"""
        with self._stats_lock:
            return {
                'calls': self.calls,
                'failures': self.failures,
            }
