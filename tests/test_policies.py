#!/usr/bin/env python
# -*- coding: utf-8 -*-
""" Tests the offloading policies """

import math
import unittest
from unittest.mock import Mock

from fog_offloading.catalog import SlotCatalog
from fog_offloading.classifier import classify
from fog_offloading.config import DEFAULT_SCENARIO_CONFIG
from fog_offloading.errors import NoEligibleSlot, UnknownTask
from fog_offloading.policies import (
    CatalogRoundRobinPolicy,
    DeadlineAwarePolicy,
    EnergyAwarePolicy,
    EnergyCoefficients,
    MultiClassifierPolicy,
    PolicyType,
    RoundRobinPolicy,
    build_policy,
)
from fog_offloading.typing import ResourceSlot, Task, Tier


def default_catalog() -> SlotCatalog:
    """2 elastic slots (0-1), 5 mid-tier slots (2-6), 10 constrained slots (7-16)."""
    return SlotCatalog.build(DEFAULT_SCENARIO_CONFIG.tiers)


def make_task(task_id, compute=25000, data=1000, **kwargs) -> Task:
    return Task(
        task_id=task_id, compute_demand=compute, input_size=data, output_size=0, **kwargs
    )


class TestRoundRobinPolicy(unittest.TestCase):

    def setUp(self) -> None:
        self.catalog = default_catalog()

    def test_tier_split(self):
        """Ten tasks go 2 to the elastic, 5 to the mid and 3 to the constrained tier."""
        policy = RoundRobinPolicy(expected_tasks=10)
        selected = [policy.select_slot(make_task(i), self.catalog) for i in range(10)]
        self.assertEqual(selected, [0, 1, 2, 3, 4, 5, 6, 7, 8, 9])
        self.assertEqual(sum(policy.load.values()), 10)

    def test_short_stream_reaches_every_tier(self):
        policy = RoundRobinPolicy(expected_tasks=3)
        tiers = [policy.tier_for_position(i) for i in range(3)]
        self.assertEqual(tiers, [Tier.ELASTIC, Tier.MID_TIER, Tier.CONSTRAINED])

    def test_split_counts_follow_fractions(self):
        """Each tier gets the floor or the ceiling of its share of the stream."""
        policy = RoundRobinPolicy(expected_tasks=15)
        tiers = [policy.tier_for_position(i) for i in range(15)]
        counts = [tiers.count(tier) for tier in (Tier.ELASTIC, Tier.MID_TIER, Tier.CONSTRAINED)]
        self.assertEqual(counts, [3, 8, 4])
        for count, share in zip(counts, (3.0, 7.5, 4.5)):
            self.assertIn(count, (math.floor(share), math.ceil(share)))

    def test_wrap_around(self):
        """Positions past the expected length restart the split, cursors continue."""
        policy = RoundRobinPolicy(expected_tasks=10)
        selected = [policy.select_slot(make_task(i), self.catalog) for i in range(12)]
        self.assertEqual(selected[10:], [0, 1])
        self.assertEqual(policy.load[0], 2)

    def test_cursor_cycles_within_tier(self):
        policy = RoundRobinPolicy(expected_tasks=10, split=[(Tier.ELASTIC, 1.0)])
        selected = [policy.select_slot(make_task(i), self.catalog) for i in range(5)]
        self.assertEqual(selected, [0, 1, 0, 1, 0])

    def test_invalid_split(self):
        with self.assertRaises(ValueError):
            RoundRobinPolicy(expected_tasks=10, split=[(Tier.ELASTIC, 0.5)])
        with self.assertRaises(ValueError):
            RoundRobinPolicy(expected_tasks=0)

    def test_missing_tier(self):
        catalog = SlotCatalog(
            [ResourceSlot(slot_id=0, tier=Tier.CONSTRAINED, compute_rate=50)]
        )
        policy = RoundRobinPolicy(expected_tasks=10)
        with self.assertRaises(NoEligibleSlot) as ctx:
            policy.select_slot(make_task(0), catalog)
        self.assertEqual(ctx.exception.tiers, (Tier.ELASTIC,))

    def test_reset(self):
        policy = RoundRobinPolicy(expected_tasks=10)
        for i in range(4):
            policy.select_slot(make_task(i), self.catalog)
        policy.reset()
        self.assertEqual(policy.load, {})
        self.assertEqual(policy.select_slot(make_task(0), self.catalog), 0)

    def test_catalog_round_robin(self):
        policy = CatalogRoundRobinPolicy()
        selected = [policy.select_slot(make_task(i), self.catalog) for i in range(18)]
        self.assertEqual(selected, list(range(17)) + [0])


class TestEnergyAwarePolicy(unittest.TestCase):

    def setUp(self) -> None:
        self.catalog = default_catalog()
        self.policy = EnergyAwarePolicy()

    def test_energy_impact(self):
        elastic, mid, constrained = (
            self.catalog[0], self.catalog[2], self.catalog[7]
        )
        self.assertAlmostEqual(self.policy.energy_impact(elastic), 0.4 * 5 + 0.3 * 44)
        self.assertAlmostEqual(self.policy.energy_impact(mid), 0.4 * 3 + 0.3 * 4)
        self.assertAlmostEqual(self.policy.energy_impact(constrained), 0.4 * 1)

    def test_ties_go_to_first_slot(self):
        """Equal scores are broken by catalog order, so load spreads over the tier."""
        selected = [self.policy.select_slot(make_task(i), self.catalog) for i in range(11)]
        self.assertEqual(selected, list(range(7, 17)) + [7])
        self.assertEqual(self.policy.load[7], 2)

    def test_affinity(self):
        """Slots outside the affinity tier are never selected."""
        selected = [
            self.policy.select_slot(make_task(i, affinity=Tier.ELASTIC), self.catalog)
            for i in range(3)
        ]
        self.assertEqual(selected, [0, 1, 0])

    def test_no_eligible_slot(self):
        catalog = SlotCatalog(
            [ResourceSlot(slot_id=0, tier=Tier.CONSTRAINED, compute_rate=50)]
        )
        with self.assertRaises(NoEligibleSlot):
            self.policy.select_slot(make_task(0, affinity=Tier.MID_TIER), catalog)
        self.assertEqual(self.policy.load, {})


class TestDeadlineAwarePolicy(unittest.TestCase):

    def setUp(self) -> None:
        self.catalog = SlotCatalog(
            [
                ResourceSlot(slot_id=0, tier=Tier.ELASTIC, compute_rate=10000),
                ResourceSlot(slot_id=1, tier=Tier.MID_TIER, compute_rate=1000),
                ResourceSlot(slot_id=2, tier=Tier.CONSTRAINED, compute_rate=100),
            ]
        )
        self.policy = DeadlineAwarePolicy()

    def test_deadline_for(self):
        self.assertEqual(self.policy.deadline_for(make_task(0)), 10000.0)
        self.assertEqual(
            self.policy.deadline_for(make_task(0, affinity=Tier.CONSTRAINED)), 1000.0
        )
        self.assertEqual(
            self.policy.deadline_for(make_task(0, deadline=50.0, affinity=Tier.MID_TIER)), 50.0
        )

    def test_estimated_completion(self):
        task = make_task(0, compute=1000)
        self.assertAlmostEqual(self.policy.estimated_completion(task, self.catalog[0]), 144.0)
        self.assertAlmostEqual(self.policy.estimated_completion(task, self.catalog[1]), 1004.0)
        self.assertAlmostEqual(self.policy.estimated_completion(task, self.catalog[2]), 10000.0)

    def test_selects_minimum_feasible(self):
        """The chosen slot has the lowest estimate among those meeting the deadline."""
        task = make_task(0, compute=1000, deadline=2000.0)
        estimates = {
            slot.slot_id: self.policy.estimated_completion(task, slot) for slot in self.catalog
        }
        slot_id = self.policy.select_slot(task, self.catalog)
        self.assertEqual(slot_id, 0)
        self.assertEqual(estimates[slot_id], min(estimates.values()))

    def test_load_penalty(self):
        """Each task routed to a slot inflates its next estimate by 10%."""
        task = make_task(0, compute=1000)
        self.policy.select_slot(task, self.catalog)
        self.assertAlmostEqual(
            self.policy.estimated_completion(task, self.catalog[0]), 144.0 * 1.1
        )

    def test_no_slot_meets_deadline(self):
        """The fastest slot is used when every estimate misses the deadline."""
        catalog = default_catalog()
        task = make_task(0, compute=25000)
        self.assertEqual(self.policy.select_slot(task, catalog), 7)
        self.assertEqual(self.policy.select_slot(make_task(1, compute=25000), catalog), 8)

    def test_affinity(self):
        task = make_task(0, compute=1000, affinity=Tier.CONSTRAINED)
        self.assertEqual(self.policy.select_slot(task, self.catalog), 2)


class TestMultiClassifierPolicy(unittest.TestCase):

    def setUp(self) -> None:
        self.catalog = default_catalog()
        self.policy = MultiClassifierPolicy()

    def test_high_compute_low_data(self):
        task = make_task(3, compute=35000, data=400)
        self.assertEqual(self.policy.select_slot(task, self.catalog), 1)

    def test_high_compute_high_data(self):
        """With the default coefficients the mid tier uses less energy."""
        task = make_task(7, compute=35000, data=2000)
        self.assertAlmostEqual(self.policy.cloud_energy_estimate(task), 17.56)
        self.assertAlmostEqual(self.policy.fog_energy_estimate(task), 10.52)
        self.assertEqual(self.policy.select_slot(task, self.catalog), 4)

        cheap_cloud = MultiClassifierPolicy(
            coefficients=EnergyCoefficients(cloud=0.0001, fog=0.0003)
        )
        self.assertEqual(cheap_cloud.select_slot(task, self.catalog), 1)

    def test_medium_compute(self):
        self.assertEqual(self.policy.select_slot(make_task(0, data=700), self.catalog), 2)
        self.assertEqual(self.policy.select_slot(make_task(6, data=1500), self.catalog), 3)

    def test_low_compute(self):
        low_data = make_task(12, compute=10000, data=300)
        large_data = make_task(13, compute=10000, data=1500)
        medium_data = make_task(14, compute=10000, data=800)
        self.assertEqual(self.policy.select_slot(low_data, self.catalog), 9)
        self.assertEqual(self.policy.select_slot(large_data, self.catalog), 10)
        self.assertEqual(self.policy.select_slot(medium_data, self.catalog), 6)

    def test_decisions_are_cached(self):
        """A task seen before gets the same slot without being classified again."""
        classifier = Mock(wraps=classify)
        policy = MultiClassifierPolicy(classifier=classifier)
        task = make_task(5, compute=35000, data=100)

        first = policy.select_slot(task, self.catalog)
        second = policy.select_slot(task, self.catalog)

        self.assertEqual(first, second)
        self.assertEqual(classifier.call_count, 1)
        self.assertEqual(policy.decisions_computed, 1)
        self.assertEqual(policy.load, {first: 1})
        self.assertEqual(policy.decision_for(5), first)

    def test_unknown_task(self):
        with self.assertRaises(UnknownTask):
            self.policy.decision_for(99)

    def test_no_eligible_slot(self):
        catalog = SlotCatalog(
            [ResourceSlot(slot_id=0, tier=Tier.CONSTRAINED, compute_rate=50)]
        )
        with self.assertRaises(NoEligibleSlot) as ctx:
            self.policy.select_slot(make_task(0, compute=35000, data=100), catalog)
        self.assertEqual(ctx.exception.tiers, (Tier.ELASTIC,))

    def test_reset(self):
        self.policy.select_slot(make_task(0), self.catalog)
        self.policy.reset()
        self.assertEqual(self.policy.decisions_computed, 0)
        self.assertEqual(self.policy.load, {})
        with self.assertRaises(UnknownTask):
            self.policy.decision_for(0)


class TestBuildPolicy(unittest.TestCase):

    def test_build_by_name(self):
        self.assertIsInstance(build_policy("round-robin"), RoundRobinPolicy)
        self.assertIsInstance(build_policy("energy-aware"), EnergyAwarePolicy)
        self.assertIsInstance(build_policy(PolicyType.DEADLINE_AWARE), DeadlineAwarePolicy)
        self.assertIsInstance(build_policy(PolicyType.MCEETO), MultiClassifierPolicy)

    def test_expected_tasks(self):
        policy = build_policy(PolicyType.ROUND_ROBIN, expected_tasks=20)
        self.assertEqual(policy.expected_tasks, 20)

    def test_fresh_instances(self):
        self.assertIsNot(build_policy("mceeto"), build_policy("mceeto"))

    def test_unknown_policy(self):
        with self.assertRaises(ValueError):
            build_policy("random")


if __name__ == "__main__":
    unittest.main()
