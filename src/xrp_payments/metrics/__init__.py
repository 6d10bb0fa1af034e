"""Prometheus metrics for ledger retries, broadcasts and transaction building."""

from __future__ import annotations

from xrp_payments.metrics.collector import PaymentsMetrics

__all__ = ["PaymentsMetrics"]
