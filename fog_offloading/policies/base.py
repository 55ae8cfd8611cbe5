#!/usr/bin/env python
# -*- coding: utf-8 -*-

from abc import ABC, abstractmethod
from collections import Counter
from typing import Dict, List, Optional

from ..catalog import SlotCatalog
from ..errors import NoEligibleSlot
from ..topology import TierTopology
from ..typing import ResourceSlot, Task, Tier


class OffloadingPolicy(ABC):
    """
    Decides which slot of a catalog executes each task.

    A policy instance owns the load counters of the slots it selects,
    so instances must not be shared between simulation runs unless
    `reset` is called in between.

    Attributes:
        topology: latency lookup between tiers
        origin: tier where tasks are created (the IoT devices)
    """

    topology: TierTopology
    origin: Tier
    _load: Counter

    def __init__(
        self,
        *,
        topology: Optional[TierTopology] = None,
        origin: Tier = Tier.CONSTRAINED,
    ):
        self.topology = topology if topology is not None else TierTopology()
        self.origin = origin
        self._load = Counter()

    @abstractmethod
    def select_slot(self, task: Task, catalog: SlotCatalog) -> int:
        """
        Returns the id of the slot onto which the task is offloaded.

        Raises:
            NoEligibleSlot: if no slot of the catalog is eligible for the task
        """

    def reset(self) -> None:
        """Clears the state accumulated during a run."""
        self._load.clear()

    @property
    def load(self) -> Dict[int, int]:
        """Number of tasks routed to each slot during the current run."""
        return dict(self._load)

    def _candidates(self, task: Task, catalog: SlotCatalog) -> List[ResourceSlot]:
        slots = catalog.eligible(task.affinity)
        if not slots:
            raise NoEligibleSlot(task.task_id, task.affinity)
        return slots

    def _transfer_latency(self, slot: ResourceSlot) -> float:
        return self.topology.round_trip(self.origin, slot.tier)
