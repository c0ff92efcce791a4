"""
Prometheus metrics integration for scope validation.

Counts validation outcomes, PDP decisions and errors, and times decision
oracle calls.
"""

import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest


logger = logging.getLogger(__name__)


class ValidationMetrics:
    """Metrics collector for scope validation."""

    def __init__(self, registry: Optional[CollectorRegistry] = None, namespace: str = "xacml_scope"):
        """
        Initialize metrics collector.

        Args:
            registry: Registry to register metrics with; a private one by default
            namespace: Prefix for metric names
        """
        self.registry = registry or CollectorRegistry()

        self.validations = Counter(
            f'{namespace}_validations_total',
            'Total number of scope validations by outcome',
            ['outcome'],
            registry=self.registry
        )

        self.decisions = Counter(
            f'{namespace}_decisions_total',
            'Total number of PDP decisions received',
            ['decision'],
            registry=self.registry
        )

        self.errors = Counter(
            f'{namespace}_errors_total',
            'Total number of scope validation errors',
            ['error'],
            registry=self.registry
        )

        self.oracle_latency = Histogram(
            f'{namespace}_oracle_duration_seconds',
            'Decision oracle call duration in seconds',
            buckets=[0.005, 0.01, 0.02, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0],
            registry=self.registry
        )

    def record_outcome(self, outcome: str) -> None:
        """Record a validation outcome (allowed, denied, disabled, invalid_token, error)."""
        self.validations.labels(outcome=outcome).inc()

    def record_decision(self, decision: str) -> None:
        """Record a PDP decision."""
        self.decisions.labels(decision=decision).inc()

    def record_error(self, error: str) -> None:
        """Record an error by error code."""
        self.errors.labels(error=error).inc()

    @contextmanager
    def time_oracle(self) -> Iterator[None]:
        """Time a decision oracle call."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.oracle_latency.observe(time.perf_counter() - start)

    def get_sample(self, name: str, labels: Optional[dict] = None) -> float:
        """Current value of a sample, 0.0 when it has not been recorded."""
        value = self.registry.get_sample_value(name, labels or {})
        return value if value is not None else 0.0

    def export(self) -> bytes:
        """Render metrics in the Prometheus text format."""
        return generate_latest(self.registry)
