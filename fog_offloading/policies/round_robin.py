#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Round-robin placement, used as baseline and as fallback."""

import math
from collections import Counter
from fractions import Fraction
from typing import List, Sequence, Tuple

from ..catalog import SlotCatalog
from ..errors import NoEligibleSlot
from ..typing import Task, Tier
from .base import OffloadingPolicy

__all__ = ["RoundRobinPolicy", "CatalogRoundRobinPolicy", "DEFAULT_TIER_SPLIT"]

# Fraction of the task stream sent to each tier, in stream order
DEFAULT_TIER_SPLIT = (
    (Tier.ELASTIC, 0.2),
    (Tier.MID_TIER, 0.5),
    (Tier.CONSTRAINED, 0.3),
)


class RoundRobinPolicy(OffloadingPolicy):
    """
    Splits the task stream between tiers by position and cycles through
    the slots of each tier.

    With the default split and a stream of ten tasks, the first two tasks
    go to the elastic tier, the next five to the mid tier and the last
    three to the constrained tier. Positions past `expected_tasks` wrap
    around. Task affinities are ignored.
    """

    expected_tasks: int
    split: Tuple[Tuple[Tier, float], ...]
    _boundaries: List[Tuple[int, Tier]]
    _position: int
    _cursors: Counter

    def __init__(
        self,
        expected_tasks: int,
        split: Sequence[Tuple[Tier, float]] = DEFAULT_TIER_SPLIT,
        **kwargs,
    ):
        super().__init__(**kwargs)
        if expected_tasks <= 0:
            raise ValueError("expected_tasks must be > 0")
        if not split or not math.isclose(sum(fraction for _, fraction in split), 1.0):
            raise ValueError("The fractions of the tier split must add up to 1.0")
        if any(fraction < 0 for _, fraction in split):
            raise ValueError("The fractions of the tier split must be >= 0")

        self.expected_tasks = expected_tasks
        self.split = tuple(split)
        self._boundaries = self._compute_boundaries()
        self._position = 0
        self._cursors = Counter()

    def _compute_boundaries(self) -> List[Tuple[int, Tier]]:
        # Largest remainder apportionment, ties go to the earlier tier
        quotas = [
            Fraction(fraction).limit_denominator(10 ** 6) * self.expected_tasks
            for _, fraction in self.split
        ]
        counts = [math.floor(quota) for quota in quotas]
        leftover = max(self.expected_tasks - sum(counts), 0)
        by_remainder = sorted(
            range(len(quotas)), key=lambda idx: (-(quotas[idx] - counts[idx]), idx)
        )
        for idx in by_remainder[:leftover]:
            counts[idx] += 1

        boundaries = []
        upper = 0
        for (tier, _), count in zip(self.split[:-1], counts):
            upper = min(upper + count, self.expected_tasks)
            boundaries.append((upper, tier))
        boundaries.append((self.expected_tasks, self.split[-1][0]))
        return boundaries

    def tier_for_position(self, position: int) -> Tier:
        """Returns the tier assigned to a position of the task stream."""
        offset = position % self.expected_tasks
        for upper, tier in self._boundaries:
            if offset < upper:
                return tier
        return self._boundaries[-1][1]

    def select_slot(self, task: Task, catalog: SlotCatalog) -> int:
        tier = self.tier_for_position(self._position)
        self._position += 1

        slots = catalog.by_tier(tier)
        if not slots:
            raise NoEligibleSlot(task.task_id, tier)

        slot = slots[self._cursors[tier] % len(slots)]
        self._cursors[tier] += 1
        self._load[slot.slot_id] += 1
        return slot.slot_id

    def reset(self) -> None:
        super().reset()
        self._position = 0
        self._cursors.clear()


class CatalogRoundRobinPolicy(OffloadingPolicy):
    """Cycles through every slot of the catalog regardless of tier."""

    _cursor: int

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._cursor = 0

    def select_slot(self, task: Task, catalog: SlotCatalog) -> int:
        slot_ids = catalog.slot_ids
        if not slot_ids:
            raise NoEligibleSlot(task.task_id)
        slot_id = slot_ids[self._cursor % len(slot_ids)]
        self._cursor += 1
        self._load[slot_id] += 1
        return slot_id

    def reset(self) -> None:
        super().reset()
        self._cursor = 0
