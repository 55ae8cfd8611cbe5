#!/usr/bin/env python
# -*- coding: utf-8 -*-

import os
import tempfile
import unittest
from dataclasses import replace

import gin
from click.testing import CliRunner

import offloading_sim
from fog_offloading import report
from fog_offloading.config import DEFAULT_SCENARIO_CONFIG, DEFAULT_WORKLOAD_CONFIG
from fog_offloading.policies import PolicyType, build_policy
from fog_offloading.scenario import Scenario, run_scenario
from fog_offloading.simulation import TaskStatus
from fog_offloading.typing import HostProfile, Tier
from fog_offloading.workload import TaskWorkload

RNG_SEED = 42

SMALL_IOT_HOST = HostProfile(
    cores=1, compute_rate_per_core=1000, memory=100, bandwidth=1000, storage=1000000
)


def small_iot_config(**changes):
    """Default deployment whose IoT devices lack the memory of a slot."""
    tiers = [
        replace(tier_config, hosts=[SMALL_IOT_HOST] * 10)
        if tier_config.tier == Tier.CONSTRAINED else tier_config
        for tier_config in DEFAULT_SCENARIO_CONFIG.tiers
    ]
    return replace(DEFAULT_SCENARIO_CONFIG, tiers=tiers, **changes)


def generate_tasks(num_tasks=10):
    workload = TaskWorkload.build(DEFAULT_WORKLOAD_CONFIG)
    workload.reset(seed=RNG_SEED)
    return workload.generate(num_tasks)


class TestScenario(unittest.TestCase):

    def setUp(self) -> None:
        self.scenario = Scenario()
        self.tasks = generate_tasks()

    def test_default_deployment(self):
        """Every slot of the default deployment fits on its tier's hosts."""
        self.assertEqual(len(self.scenario.catalog), 17)
        self.assertEqual(len(self.scenario.hosts), 17)
        policy = build_policy(PolicyType.ROUND_ROBIN, expected_tasks=10)
        result = self.scenario.run(policy, self.tasks)
        self.assertEqual(result.allocation_failures, {})
        self.assertEqual(result.bindings[0], 0)
        self.assertEqual(result.bindings[1], 0)
        self.assertEqual(result.bindings[2], 10)
        self.assertEqual(result.bindings[16], 29)

    def test_all_policies_complete(self):
        for policy_type in PolicyType:
            with self.subTest(policy=str(policy_type)):
                policy = build_policy(
                    policy_type, topology=self.scenario.topology, expected_tasks=10
                )
                result = self.scenario.run(policy, self.tasks, policy_name=str(policy_type))
                self.assertEqual(len(result.records), 10)
                self.assertEqual(len(result.completed), 10)
                self.assertEqual([r.task_id for r in result.records], list(range(10)))
                self.assertFalse(any(r.synthetic for r in result.records))
                self.assertEqual(sum(result.load.values()), 10)

    def test_round_robin_tiers(self):
        policy = build_policy(PolicyType.ROUND_ROBIN, expected_tasks=10)
        result = self.scenario.run(policy, self.tasks)
        tiers = report.tier_summary(result)
        self.assertEqual(tiers.loc["Cloud", "tasks"], 2)
        self.assertEqual(tiers.loc["Fog", "tasks"], 5)
        self.assertEqual(tiers.loc["IoT", "tasks"], 3)

    def test_runs_do_not_leak_state(self):
        """Running twice gives the same result and the same load counters."""
        policy = build_policy(PolicyType.ENERGY_AWARE)
        first = self.scenario.run(policy, self.tasks)
        second = self.scenario.run(policy, self.tasks)
        self.assertEqual(first.load, second.load)
        self.assertEqual(first.bindings, second.bindings)
        self.assertEqual(
            [r.finish_time for r in first.records], [r.finish_time for r in second.records]
        )

    def test_fallback_slot_profile(self):
        """Slots that fit nowhere are shrunk on the failing dimensions and bound."""
        scenario = Scenario(small_iot_config())
        policy = build_policy(PolicyType.ROUND_ROBIN, expected_tasks=10)
        result = scenario.run(policy, self.tasks)
        self.assertEqual(result.resized_slots, list(range(7, 17)))
        self.assertEqual(result.allocation_failures, {})
        self.assertEqual(len(result.completed), 10)
        self.assertEqual(scenario.hosts[-1].free_memory, 100 - 64)

    def test_unbound_slots(self):
        """Tasks placed on slots without a host are reported as failed."""
        scenario = Scenario(small_iot_config(fallback_slot_profile=None))
        policy = build_policy(PolicyType.ROUND_ROBIN, expected_tasks=10)
        result = scenario.run(policy, self.tasks)
        self.assertEqual(sorted(result.allocation_failures), list(range(7, 17)))
        self.assertEqual([r.task_id for r in result.failed], [7, 8, 9])
        self.assertTrue(all(r.host_id is None for r in result.failed))
        self.assertTrue(all(r.tier == Tier.CONSTRAINED for r in result.failed))

    def test_synthesize_unbound(self):
        scenario = Scenario(small_iot_config(fallback_slot_profile=None))
        policy = build_policy(PolicyType.ROUND_ROBIN, expected_tasks=10)
        result = scenario.run(policy, self.tasks, synthesize_unbound=True)
        self.assertEqual(result.failed, [])
        synthetic = [r.task_id for r in result.records if r.synthetic]
        self.assertEqual(synthetic, [7, 8, 9])

    def test_synthetic_records_not_counted_as_completed(self):
        """Estimated records are reported apart from the tasks the engine ran."""
        scenario = Scenario(small_iot_config(fallback_slot_profile=None))
        policy = build_policy(PolicyType.ROUND_ROBIN, expected_tasks=10)
        result = scenario.run(policy, self.tasks, synthesize_unbound=True)
        self.assertEqual(len(result.completed), 7)
        self.assertEqual([r.task_id for r in result.synthetic], [7, 8, 9])

        metrics = report.summary(result)
        self.assertEqual(metrics["total_tasks"], 10)
        self.assertEqual(metrics["completed_tasks"], 7)
        self.assertEqual(metrics["success_rate"], 70.0)
        self.assertEqual(metrics["synthetic_tasks"], 3)
        self.assertEqual(metrics["failed_tasks"], 0)
        self.assertEqual(metrics["iot_tasks"], 0)
        self.assertEqual(report.tier_summary(result).loc["IoT", "tasks"], 0)

    def test_reroute_without_eligible_slot(self):
        """Tasks sent to a tier without slots are placed round-robin on the catalog."""
        tiers = [t for t in DEFAULT_SCENARIO_CONFIG.tiers if t.tier != Tier.ELASTIC]
        scenario = Scenario(replace(DEFAULT_SCENARIO_CONFIG, tiers=tiers))
        policy = build_policy(PolicyType.ROUND_ROBIN, expected_tasks=10)
        result = scenario.run(policy, self.tasks)
        self.assertEqual(result.rerouted_tasks, [0, 1])
        self.assertEqual([result.records[i].slot_id for i in (0, 1)], [0, 1])
        self.assertEqual(len(result.completed), 10)
        self.assertEqual(result.rerouted_load, {0: 1, 1: 1})
        self.assertEqual(sum(result.load.values()), 10)

    def test_shared_host_pool(self):
        scenario = Scenario(replace(DEFAULT_SCENARIO_CONFIG, shared_host_pool=True))
        self.assertEqual(len(set(map(id, scenario.allocators.values()))), 1)
        result = scenario.run(build_policy(PolicyType.MCEETO), self.tasks)
        self.assertEqual(len(result.bindings), 17)
        self.assertEqual(result.bindings[2], 0)


class TestRunScenario(unittest.TestCase):

    def tearDown(self) -> None:
        gin.clear_config()

    def test_run_scenario(self):
        result = run_scenario(policy_type="deadline-aware", seed=RNG_SEED)
        self.assertEqual(result.policy, "deadline-aware")
        self.assertEqual(len(result.records), 10)

    def test_gin_binding(self):
        gin.bind_parameter("run_scenario.num_tasks", 5)
        result = run_scenario(seed=RNG_SEED)
        self.assertEqual(len(result.records), 5)


class TestReport(unittest.TestCase):

    def setUp(self) -> None:
        self.results = [
            run_scenario(policy_type=policy_type, seed=RNG_SEED) for policy_type in PolicyType
        ]

    def test_dataframe(self):
        df = report.to_dataframe(self.results[0])
        self.assertEqual(list(df.columns), report.RECORD_COLUMNS)
        self.assertEqual(len(df), 10)

    def test_summary(self):
        metrics = report.summary(self.results[0])
        self.assertEqual(metrics["completed_tasks"], 10)
        self.assertEqual(metrics["success_rate"], 100.0)
        self.assertEqual(
            metrics["cloud_tasks"] + metrics["fog_tasks"] + metrics["iot_tasks"], 10
        )
        self.assertIn("Success rate: 100.00%", report.format_summary(self.results[0]))

    def test_save_results(self):
        with tempfile.TemporaryDirectory() as output_dir:
            paths = report.save_results(self.results[0], output_dir)
            self.assertEqual(len(paths), 2)
            for path in paths:
                self.assertTrue(os.path.exists(path))

    def test_compare(self):
        df = report.compare(self.results)
        self.assertEqual(list(df.index), [str(p) for p in PolicyType])
        self.assertTrue((df["total_tasks"] == 10).all())


class TestCommandLine(unittest.TestCase):

    def tearDown(self) -> None:
        gin.clear_config()

    def test_run(self):
        runner = CliRunner()
        result = runner.invoke(
            offloading_sim.main, ["run", "--policy", "energy-aware", "--tasks", "5"], obj={}
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Offloading policy: energy-aware", result.output)

    def test_check(self):
        runner = CliRunner()
        result = runner.invoke(offloading_sim.main, ["check"], obj={})
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Slot #16 (IoT): 10 of 10 hosts fit", result.output)


if __name__ == "__main__":
    unittest.main()
