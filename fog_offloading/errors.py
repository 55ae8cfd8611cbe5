#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Errors raised by the offloading policies and the allocation policies."""

from __future__ import annotations

from typing import FrozenSet, Iterable, Optional, Tuple, Union

from .typing import Dimension, HostRejection, ResourceSlot, Tier

__all__ = [
    "OffloadingError",
    "NoEligibleSlot",
    "AllocationError",
    "AllocationFailure",
    "DuplicateBinding",
    "TierMismatch",
    "UnknownSlot",
    "UnknownTask",
]


class OffloadingError(Exception):
    """Base class of the errors raised by this package."""


class NoEligibleSlot(OffloadingError):
    """A policy found no slot in the tiers a task may be placed on."""

    def __init__(self, task_id: int, tiers: Union[Tier, Iterable[Tier], None] = None):
        self.task_id = task_id
        if tiers is None:
            self.tiers: Tuple[Tier, ...] = ()
        elif isinstance(tiers, Tier):
            self.tiers = (tiers,)
        else:
            self.tiers = tuple(tiers)
        where = ", ".join(str(tier) for tier in self.tiers) or "catalog"
        super().__init__(f"No eligible slot for task #{task_id} in {where}")


class AllocationError(OffloadingError):
    """Base class of the errors raised when binding slots to hosts."""


class AllocationFailure(AllocationError):
    """
    No host of the pool could accommodate a slot.

    Attributes:
        slot: the slot that could not be bound
        rejections: one entry per host examined, in scan order, with
            the dimensions on which the host fell short
    """

    def __init__(self, slot: ResourceSlot, rejections: Tuple[HostRejection, ...]):
        self.slot = slot
        self.rejections = rejections
        if rejections:
            details = "; ".join(str(rejection) for rejection in rejections)
        else:
            details = "the host pool is empty"
        super().__init__(f"Cannot bind slot #{slot.slot_id}: {details}")

    @property
    def failed_dimensions(self) -> FrozenSet[Dimension]:
        """Union of the dimensions that failed on any host."""
        dimensions = set()
        for rejection in self.rejections:
            dimensions.update(rejection.failed_dimensions)
        return frozenset(dimensions)


class DuplicateBinding(AllocationError):
    """The slot is already bound to a host."""

    def __init__(self, slot_id: int, host_id: int):
        self.slot_id = slot_id
        self.host_id = host_id
        super().__init__(f"Slot #{slot_id} is already bound to host #{host_id}")


class TierMismatch(AllocationError):
    """The slot belongs to a tier the allocation policy does not serve."""

    def __init__(self, slot: ResourceSlot, tiers: Optional[FrozenSet[Tier]]):
        self.slot = slot
        self.tiers = tiers
        served = ", ".join(sorted(str(tier) for tier in tiers or ()))
        super().__init__(
            f"Slot #{slot.slot_id} belongs to tier {slot.tier}, "
            f"the host pool serves [{served}]"
        )


class UnknownSlot(OffloadingError, KeyError):
    """A slot id that was never registered or bound."""

    def __init__(self, slot_id: int):
        self.slot_id = slot_id
        super().__init__(f"Unknown slot #{slot_id}")

    def __str__(self):
        return self.args[0]


class UnknownTask(OffloadingError, KeyError):
    """A task id the policy has never seen."""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Unknown task #{task_id}")

    def __str__(self):
        return self.args[0]
