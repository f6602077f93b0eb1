"""Check wallet and due-date alerts."""

from ferrocash.checks.alerts import annotate, classify, days_until_due
from ferrocash.checks.service import CheckWallet, check_lock_key

__all__ = ["CheckWallet", "annotate", "check_lock_key", "classify", "days_until_due"]
