"""Entity statistics — per managed-entity-class counters.

Folds the final, index-ordered message list into one ``EntityStats`` per
class name: message count, distinct instances in first-seen order, and the
number of messages whose result was an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from omcisight.models.analysis import EntityStats
from omcisight.models.message import OmciMessage

logger = logging.getLogger(__name__)


@dataclass
class _ClassCounter:
    """Mutable counters for one class while accumulating."""

    name: str
    count: int = 0
    errors: int = 0
    instances: dict[str, None] = field(default_factory=dict)  # Ordered set

    def to_stats(self) -> EntityStats:
        return EntityStats(
            class_name=self.name,
            count=self.count,
            instances=list(self.instances),
            errors=self.errors,
        )


class EntityStatsAccumulator:
    """Accumulates per-class statistics from parsed messages.

    Usage:
        acc = EntityStatsAccumulator()
        for msg in messages:
            acc.process_message(msg)
        stats = acc.get_stats()
    """

    def __init__(self) -> None:
        self._by_class: dict[str, _ClassCounter] = {}

    def process_message(self, message: OmciMessage) -> None:
        counter = self._by_class.get(message.me_class_name)
        if counter is None:
            counter = _ClassCounter(name=message.me_class_name)
            self._by_class[message.me_class_name] = counter

        counter.count += 1
        if message.is_error:
            counter.errors += 1
        counter.instances.setdefault(message.me_instance, None)

    def get_stats(self) -> dict[str, EntityStats]:
        """Snapshot of all classes, in first-seen order."""
        return {name: c.to_stats() for name, c in self._by_class.items()}

    def get_summary(self) -> dict:
        """Totals across all classes."""
        return {
            "total_messages": sum(c.count for c in self._by_class.values()),
            "class_count": len(self._by_class),
            "instance_count": sum(len(c.instances) for c in self._by_class.values()),
            "error_count": sum(c.errors for c in self._by_class.values()),
            "error_classes": [c.name for c in self._by_class.values() if c.errors],
        }


def aggregate(messages: list[OmciMessage]) -> dict[str, EntityStats]:
    """Build the stats mapping for a finished message list."""
    acc = EntityStatsAccumulator()
    for message in messages:
        acc.process_message(message)
    return acc.get_stats()
