#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Models for computing the energy consumed by slots to execute tasks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..typing import ResourceSlot, Task

__all__ = [
    "EnergyModel",
    "LinearEnergyModel",
    "PerInstructionEnergyModel",
]

MS_IN_SECOND = 1000.0


class EnergyModel(ABC):

    @abstractmethod
    def energy_use(
        self, slot: ResourceSlot, task: Task, runtime: float, makespan: float
    ) -> float:
        """
        Computes the energy consumed by the slot to execute the task.
        Times are given in milliseconds.
        """


@dataclass
class PerInstructionEnergyModel(EnergyModel):
    """
    Energy proportional to the amount of computation executed.

    Attributes:
        energy_per_mi (float): energy in J per million instructions.
    """

    energy_per_mi: float

    def energy_use(
        self, slot: ResourceSlot, task: Task, runtime: float, makespan: float
    ) -> float:
        return self.energy_per_mi * max(task.compute_demand, 0)


@dataclass
class LinearEnergyModel(EnergyModel):
    """
    Linear energy model for computing resources.

    Attributes:
        idle_power (float): The idle power consumption in W.
        max_power (float): The maximum power consumption in W.
    """

    idle_power: float
    max_power: float

    def energy_use(
        self, slot: ResourceSlot, task: Task, runtime: float, makespan: float
    ) -> float:
        return (
            self.idle_power * makespan + self.max_power * runtime
        ) / MS_IN_SECOND
