import logging
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

import numpy as np

from filtercraft_engine.config import settings
from filtercraft_exception_model.exception import PerformanceLimitError

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """Keeps bounded duration samples (milliseconds) per operation.

    Attributes:
        enabled: When False, ``start`` and ``track`` are no-ops.
        max_samples: Samples kept per operation; the oldest are dropped first.
    """

    def __init__(self, enabled: bool = True, max_samples: Optional[int] = None):
        max_samples = settings.performance_max_samples if max_samples is None else max_samples
        if max_samples <= 0:
            raise PerformanceLimitError("max_samples must be positive", limit=1, actual=max_samples)
        self.enabled = enabled
        self.max_samples = max_samples
        self._samples: Dict[str, Deque[float]] = {}

    def start(self, operation: str) -> Callable[[], None]:
        """Start timing ``operation``; call the returned function to stop."""
        if not self.enabled:
            return lambda: None
        started = time.perf_counter()

        def stop() -> None:
            self.track(operation, (time.perf_counter() - started) * 1000)
        return stop

    def track(self, operation: str, duration_ms: float) -> None:
        if not self.enabled:
            return
        samples = self._samples.get(operation)
        if samples is None:
            samples = self._samples[operation] = deque(maxlen=self.max_samples)
        samples.append(duration_ms)
        logger.debug(f"{operation}: {duration_ms:.2f}ms")

    def get_metrics(self, operation: str) -> Optional[Dict[str, float]]:
        samples = self._samples.get(operation)
        if not samples:
            return None
        values = np.sort(np.fromiter(samples, dtype=float))
        count = len(values)
        return {
            'count': count,
            'avg': float(values.mean()),
            'min': float(values[0]),
            'max': float(values[-1]),
            'p95': float(values[int(count * 0.95)]),
            'p99': float(values[int(count * 0.99)]),
            'total': float(values.sum()),
        }

    def get_all_metrics(self) -> Dict[str, Dict[str, float]]:
        return {op: self.get_metrics(op) for op in self._samples if self._samples[op]}

    def clear(self, operation: Optional[str] = None) -> None:
        if operation is None:
            self._samples.clear()
        else:
            self._samples.pop(operation, None)
