"""Due-date alert classification for held checks."""

from __future__ import annotations

from datetime import date

from ferrocash.core.types import AlertLevel, Check, CheckWithAlert

URGENT_DAYS = 3
WARNING_DAYS = 7


def days_until_due(due_date: date, today: date) -> int:
    """Whole calendar days from ``today`` to ``due_date``; negative once past due."""
    return (due_date - today).days


def classify(days: int) -> AlertLevel:
    """
    Map days-until-due to an alert level.

    Past due is overdue, 0..3 days urgent, 4..7 days warning, later normal.
    """
    if days < 0:
        return AlertLevel.OVERDUE
    if days <= URGENT_DAYS:
        return AlertLevel.URGENT
    if days <= WARNING_DAYS:
        return AlertLevel.WARNING
    return AlertLevel.NORMAL


def annotate(check: Check, today: date) -> CheckWithAlert:
    days = days_until_due(check.due_date, today)
    return CheckWithAlert(check=check, days_until_due=days, alert_level=classify(days))
