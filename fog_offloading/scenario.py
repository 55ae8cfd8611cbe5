#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Scenario runner that wires the catalog, hosts, allocation policies,
offloading policy and simulation engine together.

A run proceeds as follows:

    1. slots are bound to hosts in catalog order; a slot that no host
       can accommodate is shrunk to the fallback slot profile along the
       dimensions that failed and bound again;
    2. the offloading policy selects a slot for each task, in submission
       order; tasks for which the policy finds no eligible slot are
       placed by a round-robin over the whole catalog;
    3. tasks whose slot is bound are executed by the engine; the others
       are reported as failed.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

import gin
from absl import logging

from .allocation import TieredAllocationPolicy
from .catalog import SlotCatalog
from .config import DEFAULT_SCENARIO_CONFIG, DEFAULT_WORKLOAD_CONFIG
from .errors import AllocationFailure, NoEligibleSlot
from .policies import CatalogRoundRobinPolicy, OffloadingPolicy, PolicyType, build_policy
from .simulation import OffloadingSimulation, TaskRunInfo, TaskStatus
from .topology import TierTopology
from .typing import (
    Dimension,
    HostDescriptor,
    ResourceSlot,
    ScenarioConfig,
    Task,
    Tier,
    WorkloadConfig,
)
from .workload import TaskWorkload

__all__ = ["Scenario", "ScenarioResult", "run_scenario"]

_DIMENSION_FIELDS = {
    Dimension.CORES: "cores",
    Dimension.COMPUTE: "compute_rate",
    Dimension.MEMORY: "memory",
    Dimension.BANDWIDTH: "bandwidth",
    Dimension.STORAGE: "storage",
}


@dataclass
class ScenarioResult:
    """
    Outcome of a scenario run.

    Attributes:
        policy: name of the offloading policy
        records: one record per task, ordered by task id
        bindings: host id of each bound slot
        allocation_failures: failure of each slot that could not be bound
        resized_slots: ids of the slots bound with the fallback profile
        rerouted_tasks: ids of the tasks placed by the catalog round-robin
        load: number of tasks sent to each slot, rerouted tasks included
        rerouted_load: number of rerouted tasks sent to each slot
    """

    policy: str
    records: List[TaskRunInfo]
    bindings: Dict[int, int] = field(default_factory=dict)
    allocation_failures: Dict[int, AllocationFailure] = field(default_factory=dict)
    resized_slots: List[int] = field(default_factory=list)
    rerouted_tasks: List[int] = field(default_factory=list)
    load: Dict[int, int] = field(default_factory=dict)
    rerouted_load: Dict[int, int] = field(default_factory=dict)

    @property
    def completed(self) -> List[TaskRunInfo]:
        """Records of the tasks executed by the engine."""
        return [
            r for r in self.records
            if r.status == TaskStatus.COMPLETED and not r.synthetic
        ]

    @property
    def synthetic(self) -> List[TaskRunInfo]:
        return [r for r in self.records if r.synthetic]

    @property
    def failed(self) -> List[TaskRunInfo]:
        return [r for r in self.records if r.status == TaskStatus.FAILED]


class Scenario:
    """
    Deployment built from a scenario configuration.

    When the configuration has a shared host pool, a single allocation
    policy fronts the hosts of every tier; otherwise each tier has its
    own allocation policy over its own hosts.
    """

    config: ScenarioConfig
    topology: TierTopology
    catalog: SlotCatalog
    hosts: List[HostDescriptor]
    allocators: Dict[Tier, TieredAllocationPolicy]
    simulation: OffloadingSimulation

    def __init__(self, config: ScenarioConfig = DEFAULT_SCENARIO_CONFIG):
        self.config = config
        self.topology = TierTopology(config.links)
        self.catalog = SlotCatalog.build(config.tiers)
        self.hosts = self._create_hosts(config)
        self.allocators = self._create_allocators(config, self.hosts)

        energy_models = {}
        for tier_config in config.tiers:
            if tier_config.energy_model is not None:
                model_class, model_args = tier_config.energy_model
                energy_models[tier_config.tier] = model_class(**model_args)
        self.simulation = OffloadingSimulation(
            topology=self.topology, energy_models=energy_models, origin=config.origin
        )

    @staticmethod
    def _create_hosts(config: ScenarioConfig) -> List[HostDescriptor]:
        hosts = []
        for tier_config in config.tiers:
            for idx, profile in enumerate(tier_config.hosts):
                hosts.append(
                    HostDescriptor(
                        host_id=tier_config.first_host_id + idx,
                        tier=tier_config.tier,
                        core_count=profile.cores,
                        compute_rate_per_core=profile.compute_rate_per_core,
                        memory=profile.memory,
                        bandwidth=profile.bandwidth,
                        storage=profile.storage,
                    )
                )
        return hosts

    @staticmethod
    def _create_allocators(
        config: ScenarioConfig, hosts: List[HostDescriptor]
    ) -> Dict[Tier, TieredAllocationPolicy]:
        tiers = [tier_config.tier for tier_config in config.tiers]
        if config.shared_host_pool:
            allocator = TieredAllocationPolicy(hosts, tiers=tiers)
            return {tier: allocator for tier in tiers}
        return {
            tier: TieredAllocationPolicy(
                [host for host in hosts if host.tier == tier], tiers=[tier]
            )
            for tier in tiers
        }

    def new_run(self) -> None:
        """Releases all bindings and recreates the simulation state."""
        for allocator in set(self.allocators.values()):
            allocator.reset()
        self.simulation.new_run()

    def _fallback_slot(
        self, slot: ResourceSlot, failure: AllocationFailure
    ) -> Optional[ResourceSlot]:
        profile = self.config.fallback_slot_profile
        if profile is None:
            return None
        changes = {
            _DIMENSION_FIELDS[dimension]: getattr(profile, _DIMENSION_FIELDS[dimension])
            for dimension in failure.failed_dimensions
        }
        if not changes:
            return None
        return slot.resized(**changes)

    def bind_slots(self, result: ScenarioResult) -> None:
        """Binds the slots of the catalog to hosts and deploys them."""
        for slot in self.catalog:
            allocator = self.allocators[slot.tier]
            try:
                host_id = allocator.bind(slot)
            except AllocationFailure as failure:
                logging.warning("%s", failure)
                fallback = self._fallback_slot(slot, failure)
                if fallback is None:
                    result.allocation_failures[slot.slot_id] = failure
                    continue
                try:
                    host_id = allocator.bind(fallback)
                except AllocationFailure as retry_failure:
                    logging.error(
                        "Slot #%d cannot be bound with fallback resources: %s",
                        slot.slot_id, retry_failure,
                    )
                    result.allocation_failures[slot.slot_id] = retry_failure
                    continue
                logging.info(
                    "Slot #%d bound to host #%d with fallback resources (%s)",
                    slot.slot_id, host_id,
                    ", ".join(sorted(str(d) for d in failure.failed_dimensions)),
                )
                result.resized_slots.append(slot.slot_id)
                slot = fallback
            else:
                logging.info("Slot #%d (%s) bound to host #%d", slot.slot_id, slot.tier, host_id)

            result.bindings[slot.slot_id] = host_id
            self.simulation.deploy(slot, host_id)

    def select_slots(
        self, tasks: Sequence[Task], policy: OffloadingPolicy, result: ScenarioResult
    ) -> List[Tuple[Task, Optional[int]]]:
        """Returns the slot selected for each task, None when no slot exists."""
        fallback = CatalogRoundRobinPolicy(topology=self.topology, origin=self.config.origin)
        placements = []
        for task in tasks:
            try:
                slot_id = policy.select_slot(task, self.catalog)
            except NoEligibleSlot as error:
                logging.warning("%s, using round-robin over all slots", error)
                try:
                    slot_id = fallback.select_slot(task, self.catalog)
                except NoEligibleSlot:
                    logging.error("No slot available for task #%d", task.task_id)
                    slot_id = None
                result.rerouted_tasks.append(task.task_id)
            placements.append((task, slot_id))
        result.rerouted_load = fallback.load
        return placements

    def run(
        self,
        policy: OffloadingPolicy,
        tasks: Sequence[Task],
        policy_name: Optional[str] = None,
        synthesize_unbound: bool = False,
    ) -> ScenarioResult:
        """
        Executes the tasks with the slots selected by the policy.

        Args:
            policy: the offloading policy, reset before use
            tasks: tasks in submission order
            policy_name: name of the policy in the result
            synthesize_unbound: if True, tasks whose slot could not be bound
                get an estimated record flagged as synthetic instead of
                a failed record

        Returns:
            The result of the run.
        """
        self.new_run()
        policy.reset()
        result = ScenarioResult(
            policy=policy_name or type(policy).__name__, records=[]
        )

        self.bind_slots(result)
        placements = self.select_slots(tasks, policy, result)

        deployed = set(self.simulation.deployed_slots)
        runnable = [(t, slot_id) for t, slot_id in placements if slot_id in deployed]
        records = list(self.simulation.simulate(runnable))

        for task, slot_id in placements:
            if slot_id in deployed:
                continue
            if synthesize_unbound and slot_id is not None:
                records.append(self.simulation.estimate_run(task, self.catalog[slot_id]))
                continue
            logging.warning(
                "Task #%d failed, slot #%s is not bound to any host", task.task_id, slot_id
            )
            records.append(
                TaskRunInfo(
                    task_id=task.task_id,
                    slot_id=slot_id,
                    host_id=None,
                    tier=self.catalog.tier_of(slot_id) if slot_id is not None else None,
                    status=TaskStatus.FAILED,
                )
            )

        result.records = sorted(records, key=lambda r: r.task_id)
        load = Counter(policy.load)
        load.update(result.rerouted_load)
        result.load = dict(load)
        return result


@gin.configurable
def run_scenario(
    policy_type: Union[PolicyType, str] = PolicyType.MCEETO,
    num_tasks: Optional[int] = None,
    seed: Optional[int] = None,
    synthesize_unbound: bool = False,
    config: ScenarioConfig = DEFAULT_SCENARIO_CONFIG,
    workload_config: WorkloadConfig = DEFAULT_WORKLOAD_CONFIG,
) -> ScenarioResult:
    """Generates a workload and runs it on a fresh scenario with one policy."""
    policy_type = PolicyType(policy_type)
    workload = TaskWorkload.build(workload_config)
    workload.reset(seed=seed)
    tasks = workload.generate(num_tasks)

    scenario = Scenario(config)
    policy = build_policy(
        policy_type,
        topology=scenario.topology,
        origin=config.origin,
        expected_tasks=max(len(tasks), 1),
    )
    logging.info("Running %d tasks with policy %s", len(tasks), policy_type)
    return scenario.run(
        policy, tasks, policy_name=str(policy_type), synthesize_unbound=synthesize_unbound
    )
