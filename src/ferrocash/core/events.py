"""
Core Event Types for FerroCash.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class EntityType(str, Enum):
    """Channels of the data-change broadcast."""

    CASH_REGISTERS = "cash-registers"
    CHECKS = "checks"


@dataclass
class ChangeEvent:
    """
    Published after every successful mutation.

    Subscribers use it to invalidate their views; ``data`` carries the ids
    of what changed and is never required.
    """

    entity_type: EntityType
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.entity_type.value,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
        }
