"""Balance activity reconstruction and live delivery."""

from xrp_payments.monitor.balance_monitor import BalanceMonitor, Subscription, activity_sequence

__all__ = ["BalanceMonitor", "Subscription", "activity_sequence"]
