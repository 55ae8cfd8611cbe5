#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Simpy resources representing slots deployed on hosts."""

from __future__ import annotations

from simpy.core import Environment
from simpy.resources.resource import Resource

from ..typing import ResourceSlot, Tier

__all__ = ["SlotResource"]


class SlotResource(Resource):
    """
    A slot bound to a host. Each core of the slot runs one task at a
    time; other tasks wait in the request queue.
    """

    slot: ResourceSlot
    host_id: int

    def __init__(self, env: Environment, slot: ResourceSlot, host_id: int):
        super().__init__(env=env, capacity=slot.cores)
        self.slot = slot
        self.host_id = host_id

    @property
    def slot_id(self) -> int:
        return self.slot.slot_id

    @property
    def tier(self) -> Tier:
        return self.slot.tier

    def runtime(self, compute_demand: float) -> float:
        """Time in milliseconds a core of this slot takes to execute the given MI."""
        return max(compute_demand, 0) / self.slot.compute_rate * 1000

    def __str__(self):
        return (
            f"SlotResource<slot_id={self.slot_id}, "
            f"tier={self.tier}, "
            f"host_id={self.host_id}, "
            f"cores={self.capacity}, "
            f"compute_rate={self.slot.compute_rate}, "
            f"queue={len(self.queue)}>"
        )
