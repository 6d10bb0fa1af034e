"""Metrics collector — Prometheus counters and histograms for payments.

- ``xrp_payments_ledger_retries_total`` counter-vec (kind)
- ``xrp_payments_broadcasts_total`` counter-vec (outcome)
- ``xrp_payments_build_transaction_histogram``
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator

_PREFIX = "xrp_payments"


class PaymentsMetrics:
    """Owns a private registry so several accounts can coexist in one process."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()
        self._retries = Counter(
            f"{_PREFIX}_ledger_retries_total",
            "Ledger calls retried after a transient transport error",
            ("kind",),
            registry=self._registry,
        )
        self._broadcasts = Counter(
            f"{_PREFIX}_broadcasts_total",
            "Transaction submissions by outcome",
            ("outcome",),
            registry=self._registry,
        )
        self._build_tx = Histogram(
            f"{_PREFIX}_build_transaction_histogram",
            "Duration of transaction and sweep building",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def record_retry(self, kind: str) -> None:
        self._retries.labels(kind=kind).inc()

    def record_broadcast(self, outcome: str) -> None:
        self._broadcasts.labels(outcome=outcome).inc()

    @contextmanager
    def track_build_transaction(self) -> Iterator[None]:
        """Track the duration of a build or sweep call."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._build_tx.observe(time.monotonic() - start)
