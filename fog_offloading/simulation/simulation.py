#!/usr/bin/env python
# -*- coding: utf-8 -*-

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import simpy
from absl import logging

from ..errors import UnknownSlot
from ..topology import TierTopology
from ..typing import ResourceSlot, Task, Tier
from .energy import EnergyModel
from .resources import SlotResource

__all__ = ["OffloadingSimulation", "TaskRunInfo", "TaskStatus"]

BITS_IN_BYTE = 8


class TaskStatus(Enum):
    COMPLETED = "completed"
    FAILED = "failed"

    def __str__(self):
        return self.value


@dataclass
class TaskRunInfo:
    """
    Record of the execution of a task. Times are in milliseconds of
    simulated time; tasks are all submitted at time zero.
    """

    task_id: int
    slot_id: Optional[int]
    host_id: Optional[int]
    tier: Optional[Tier]
    submit_time: float = 0.0
    start_time: float = 0.0
    finish_time: float = 0.0
    upload_delay: float = 0.0
    runtime: float = 0.0
    download_delay: float = 0.0
    energy: float = 0.0
    status: TaskStatus = TaskStatus.COMPLETED
    synthetic: bool = False

    @property
    def makespan(self) -> float:
        return self.finish_time - self.submit_time

    @property
    def transmission_time(self) -> float:
        return self.upload_delay + self.download_delay


class OffloadingSimulation:
    """
    Discrete-event execution of tasks on the slots selected for them.

    Slots must be deployed on a host before tasks can run on them. The
    state of a run (simpy environment, deployed slots and run records)
    is recreated by `new_run`.
    """

    sim_env: simpy.Environment
    topology: TierTopology
    origin: Tier
    energy_models: Dict[Tier, EnergyModel]
    simulation_process: Union[simpy.Event, None]
    task_info: List[TaskRunInfo]
    _slots: Dict[int, SlotResource]

    def __init__(
        self,
        topology: Optional[TierTopology] = None,
        energy_models: Optional[Mapping[Tier, EnergyModel]] = None,
        origin: Tier = Tier.CONSTRAINED,
    ):
        self.topology = topology if topology is not None else TierTopology()
        self.energy_models = dict(energy_models or {})
        self.origin = origin
        self.new_run()

    def new_run(self) -> None:
        """Discards the state of the previous run."""
        self.sim_env = simpy.Environment()
        self.simulation_process = None
        self.task_info = []
        self._slots = {}

    @property
    def deployed_slots(self) -> List[int]:
        return list(self._slots)

    def deploy(self, slot: ResourceSlot, host_id: int) -> SlotResource:
        """Makes a slot bound to a host available for executing tasks."""
        resource = SlotResource(self.sim_env, slot, host_id)
        self._slots[slot.slot_id] = resource
        return resource

    def transfer_time(self, slot: ResourceSlot, num_bytes: int) -> float:
        """Time in ms to move data between the origin tier and a slot."""
        if slot.tier == self.origin:
            return 0.0
        latency = self.topology.latency(self.origin, slot.tier)
        if slot.bandwidth <= 0:
            return latency
        # bandwidth in Mbps, i.e. bits per ms / 1000
        return latency + max(num_bytes, 0) * BITS_IN_BYTE / (slot.bandwidth * 1000)

    def energy_use(
        self, slot: ResourceSlot, task: Task, runtime: float, makespan: float
    ) -> float:
        model = self.energy_models.get(slot.tier)
        if model is None:
            return 0.0
        return model.energy_use(slot, task, runtime, makespan)

    def estimate_run(self, task: Task, slot: ResourceSlot) -> TaskRunInfo:
        """
        Computes, without executing it, the record of a task running
        alone on a slot. The record is flagged as synthetic.
        """
        upload_delay = self.transfer_time(slot, task.input_size)
        runtime = max(task.compute_demand, 0) / slot.compute_rate * 1000
        download_delay = self.transfer_time(slot, task.output_size)
        finish_time = self.sim_env.now + upload_delay + runtime + download_delay
        return TaskRunInfo(
            task_id=task.task_id,
            slot_id=slot.slot_id,
            host_id=None,
            tier=slot.tier,
            submit_time=self.sim_env.now,
            start_time=self.sim_env.now,
            finish_time=finish_time,
            upload_delay=upload_delay,
            runtime=runtime,
            download_delay=download_delay,
            energy=self.energy_use(slot, task, runtime, finish_time - self.sim_env.now),
            synthetic=True,
        )

    def _execute_task(self, task: Task, resource: SlotResource):
        submit_time = self.sim_env.now
        with resource.request() as req:
            yield req
            start_time = self.sim_env.now
            logging.debug(
                "Task #%d started on slot #%d (host #%d) at %.2f",
                task.task_id, resource.slot_id, resource.host_id, start_time,
            )

            upload_delay = self.transfer_time(resource.slot, task.input_size)
            task_runtime = resource.runtime(task.compute_demand)
            download_delay = self.transfer_time(resource.slot, task.output_size)

            yield self.sim_env.timeout(upload_delay)
            yield self.sim_env.timeout(task_runtime)
            yield self.sim_env.timeout(download_delay)

            finish_time = self.sim_env.now
            energy = self.energy_use(
                resource.slot, task, task_runtime, finish_time - submit_time
            )
            logging.debug(
                "Task #%d finished on slot #%d at %.2f", task.task_id,
                resource.slot_id, finish_time,
            )

            self.task_info.append(
                TaskRunInfo(
                    task_id=task.task_id,
                    slot_id=resource.slot_id,
                    host_id=resource.host_id,
                    tier=resource.tier,
                    submit_time=submit_time,
                    start_time=start_time,
                    finish_time=finish_time,
                    upload_delay=upload_delay,
                    runtime=task_runtime,
                    download_delay=download_delay,
                    energy=energy,
                )
            )

    def _task_manager(self, placements: Sequence[Tuple[Task, int]]):
        processes = [
            self.sim_env.process(self._execute_task(task, self._slots[slot_id]))
            for task, slot_id in placements
        ]
        yield self.sim_env.all_of(processes)

    def simulate(self, placements: Sequence[Tuple[Task, int]]) -> List[TaskRunInfo]:
        """
        Executes tasks on the slots chosen for them, submitting all of
        them at the current simulation time.

        Args:
            placements: pairs of task and slot id

        Returns:
            The run records, in order of completion.

        Raises:
            UnknownSlot: if a slot was not deployed
        """
        for _, slot_id in placements:
            if slot_id not in self._slots:
                raise UnknownSlot(slot_id)

        self.simulation_process = self.sim_env.process(self._task_manager(placements))
        try:
            self.sim_env.run(until=self.simulation_process)
        except simpy.Interrupt as interrupt:
            logging.warning("Simulation interrupted: %s", interrupt.cause)

        return self.task_info
