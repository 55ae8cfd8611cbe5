#!/usr/bin/env python
# -*- coding: utf-8 -*-

from operator import itemgetter
from typing import Dict, Mapping, Optional

from ..catalog import SlotCatalog
from ..typing import ResourceSlot, Task, Tier
from .base import OffloadingPolicy

__all__ = ["DeadlineAwarePolicy", "DEFAULT_DEADLINES"]

# Deadlines in milliseconds of tasks bound to each tier
DEFAULT_DEADLINES = {
    Tier.CONSTRAINED: 1000.0,
    Tier.MID_TIER: 5000.0,
    Tier.ELASTIC: 10000.0,
}

# Each task already routed to a slot slows it down by 10%
LOAD_PENALTY = 0.1


class DeadlineAwarePolicy(OffloadingPolicy):
    """
    Places each task on the slot with the earliest estimated completion
    among those that meet the task's deadline. When no slot meets the
    deadline the fastest slot is used. Both choices are restricted to the
    task's affinity tier.

    The deadline of a task is its own deadline when set; otherwise, the
    deadline of its affinity tier, or the most relaxed deadline when the
    task has no affinity.
    """

    deadlines: Dict[Tier, float]

    def __init__(self, deadlines: Optional[Mapping[Tier, float]] = None, **kwargs):
        super().__init__(**kwargs)
        self.deadlines = dict(DEFAULT_DEADLINES)
        if deadlines:
            self.deadlines.update(deadlines)

    def deadline_for(self, task: Task) -> float:
        if task.deadline is not None:
            return task.deadline
        if task.affinity is None:
            return max(self.deadlines.values())
        return self.deadlines[task.affinity]

    def estimated_completion(self, task: Task, slot: ResourceSlot) -> float:
        """Computation plus transfer time in ms, inflated by the slot's load."""
        computation = (max(task.compute_demand, 0) / slot.compute_rate) * 1000
        total = computation + self._transfer_latency(slot)
        return total * (1 + LOAD_PENALTY * self._load[slot.slot_id])

    def select_slot(self, task: Task, catalog: SlotCatalog) -> int:
        estimates = [
            (self.estimated_completion(task, slot), slot)
            for slot in self._candidates(task, catalog)
        ]
        deadline = self.deadline_for(task)
        on_time = [estimate for estimate in estimates if estimate[0] < deadline]

        _, best = min(on_time or estimates, key=itemgetter(0))
        self._load[best.slot_id] += 1
        return best.slot_id
