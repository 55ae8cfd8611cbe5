#!/usr/bin/env python
# -*- coding: utf-8 -*-

from ..catalog import SlotCatalog
from ..typing import ResourceSlot, Task
from .base import OffloadingPolicy

__all__ = ["EnergyAwarePolicy"]

ENERGY_WEIGHT = 0.4
NETWORK_WEIGHT = 0.3
LOAD_WEIGHT = 0.3


class EnergyAwarePolicy(OffloadingPolicy):
    """
    Places each task on the slot with the lowest energy impact, a weighted
    sum of the slot's declared energy figure, the latency to reach it from
    the origin tier and its current load. Only slots in the task's affinity
    tier are considered; ties go to the slot that comes first in the catalog.
    """

    def energy_impact(self, slot: ResourceSlot) -> float:
        return (
            ENERGY_WEIGHT * slot.energy
            + NETWORK_WEIGHT * self._transfer_latency(slot)
            + LOAD_WEIGHT * self._load[slot.slot_id]
        )

    def select_slot(self, task: Task, catalog: SlotCatalog) -> int:
        candidates = self._candidates(task, catalog)
        best = min(candidates, key=self.energy_impact)
        self._load[best.slot_id] += 1
        return best.slot_id
