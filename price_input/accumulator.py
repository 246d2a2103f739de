"""
Accumulators - Where inputs hand off metrics and errors.

The host owns the real output pipeline; inputs only ever see this
interface. `add_fields` is called at most once per gather cycle,
`add_error` zero or more times, and neither may raise into the input.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Mapping, Optional

from price_input.models import Metric


logger = logging.getLogger(__name__)


class Accumulator(ABC):
    """Sink for metrics and out-of-band errors."""

    @abstractmethod
    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, float],
        tags: Mapping[str, str],
        timestamp: Optional[datetime] = None,
    ) -> None:
        """Record one metric. A missing timestamp means now."""
        pass

    @abstractmethod
    def add_error(self, error: Exception) -> None:
        """Report an error without aborting the caller."""
        pass


class MemoryAccumulator(Accumulator):
    """Keeps metrics and errors in lists."""

    def __init__(self) -> None:
        self.metrics: list[Metric] = []
        self.errors: list[Exception] = []

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, float],
        tags: Mapping[str, str],
        timestamp: Optional[datetime] = None,
    ) -> None:
        self.metrics.append(Metric(
            name=measurement,
            fields=dict(fields),
            tags=dict(tags),
            timestamp=timestamp or datetime.now(timezone.utc),
        ))

    def add_error(self, error: Exception) -> None:
        self.errors.append(error)

    def clear(self) -> None:
        """Forget everything recorded so far."""
        self.metrics.clear()
        self.errors.clear()

    def __len__(self) -> int:
        return len(self.metrics)


class LoggingAccumulator(Accumulator):
    """Writes metrics at INFO and errors at ERROR to a logger."""

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._log = log or logger
        self.metric_count = 0
        self.error_count = 0

    def add_fields(
        self,
        measurement: str,
        fields: Mapping[str, float],
        tags: Mapping[str, str],
        timestamp: Optional[datetime] = None,
    ) -> None:
        metric = Metric(
            name=measurement,
            fields=dict(fields),
            tags=dict(tags),
            timestamp=timestamp or datetime.now(timezone.utc),
        )
        self.metric_count += 1
        tag_str = ",".join(f"{k}={v}" for k, v in sorted(metric.tags.items()))
        field_str = ",".join(f"{k}={v}" for k, v in sorted(metric.fields.items())) or "(no fields)"
        self._log.info(f"{metric.name},{tag_str} {field_str} {metric.timestamp.isoformat()}")

    def add_error(self, error: Exception) -> None:
        self.error_count += 1
        self._log.error(f"Error in input: {error}")
