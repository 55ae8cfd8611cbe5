#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Catalog of the execution slots available in a scenario.

Slots carry their tier explicitly; ids are dense and assigned in the
order in which tiers are configured, so that each tier owns a contiguous
range of ids.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from .errors import UnknownSlot
from .typing import ResourceSlot, Tier, TierConfig

__all__ = ["SlotCatalog"]


class SlotCatalog:
    """Read-only collection of slots, indexed by id and grouped by tier."""

    _slots: List[ResourceSlot]
    _by_id: Dict[int, ResourceSlot]
    _by_tier: Dict[Tier, List[ResourceSlot]]

    def __init__(self, slots: Iterable[ResourceSlot]):
        self._slots = list(slots)
        self._by_id = {}
        self._by_tier = {tier: [] for tier in Tier}
        for slot in self._slots:
            if slot.slot_id in self._by_id:
                raise ValueError(f"Duplicate slot id {slot.slot_id}")
            self._by_id[slot.slot_id] = slot
            self._by_tier[slot.tier].append(slot)

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[ResourceSlot]:
        return iter(self._slots)

    def __contains__(self, slot_id: int) -> bool:
        return slot_id in self._by_id

    def __getitem__(self, slot_id: int) -> ResourceSlot:
        try:
            return self._by_id[slot_id]
        except KeyError:
            raise UnknownSlot(slot_id) from None

    @property
    def slot_ids(self) -> List[int]:
        return [slot.slot_id for slot in self._slots]

    @property
    def tiers(self) -> List[Tier]:
        """Tiers that have at least one slot, in catalog order."""
        seen = []
        for slot in self._slots:
            if slot.tier not in seen:
                seen.append(slot.tier)
        return seen

    def by_tier(self, tier: Tier) -> List[ResourceSlot]:
        """Returns the slots of a tier in catalog order."""
        return list(self._by_tier[tier])

    def eligible(self, affinity: Optional[Tier] = None) -> List[ResourceSlot]:
        """
        Returns the slots a task with the given tier affinity may use.
        Tasks without affinity may use any slot.
        """
        if affinity is None:
            return list(self._slots)
        return self.by_tier(affinity)

    def tier_of(self, slot_id: int) -> Tier:
        return self[slot_id].tier

    @staticmethod
    def build(tier_configs: Iterable[TierConfig], first_slot_id: int = 0) -> SlotCatalog:
        """Creates the slots of each tier, numbering them consecutively."""
        slots = []
        slot_id = first_slot_id
        for tier_config in tier_configs:
            profile = tier_config.slot_profile
            for _ in range(tier_config.num_slots):
                slots.append(
                    ResourceSlot(
                        slot_id=slot_id,
                        tier=tier_config.tier,
                        compute_rate=profile.compute_rate,
                        cores=profile.cores,
                        memory=profile.memory,
                        bandwidth=profile.bandwidth,
                        storage=profile.storage,
                        energy=profile.energy,
                    )
                )
                slot_id += 1
        return SlotCatalog(slots)
