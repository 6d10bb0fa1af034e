"""Payments — payport resolution, fees, transaction building and signing."""
