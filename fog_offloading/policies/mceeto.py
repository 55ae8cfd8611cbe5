#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Multi-classifier energy-efficient task offloading (MCEETO).

Tasks are first categorised by their computation and data weight, and the
category decides the tier the task is offloaded to:

    HIGH_COMPUTE_LOW_DATA       elastic tier
    HIGH_COMPUTE_HIGH_DATA      elastic or mid tier, whichever uses less energy
    MEDIUM_COMPUTE_*            mid tier
    LOW_COMPUTE_LOW_DATA        constrained tier
    LOW_COMPUTE_HIGH_DATA       constrained tier when data is above the large
                                data threshold, mid tier otherwise

Within the tier, slots are picked round-robin by task id.

Based on "A Multi-Classifiers Based Algorithm for Energy Efficient Tasks
Offloading in Fog Computing", Sensors 23(16), 2023.
"""

from dataclasses import dataclass
from typing import Callable, Dict

from ..catalog import SlotCatalog
from ..classifier import (
    ClassifierThresholds,
    DEFAULT_THRESHOLDS,
    TaskCategory,
    classify,
)
from ..errors import NoEligibleSlot, UnknownTask
from ..typing import Task, Tier
from .base import OffloadingPolicy

__all__ = ["MultiClassifierPolicy", "EnergyCoefficients"]

Classifier = Callable[[float, float, ClassifierThresholds], TaskCategory]


@dataclass(frozen=True)
class EnergyCoefficients:
    """
    Attributes:
        cloud: energy in J per MI executed in the elastic tier
        fog: energy in J per MI executed in the mid tier
        iot: energy in J per MI executed in the constrained tier
        iot_to_fog: energy in J per byte sent from a device to the mid tier
        fog_to_cloud: energy in J per byte sent from the mid to the elastic tier
    """

    cloud: float = 0.0005
    fog: float = 0.0003
    iot: float = 0.0001
    iot_to_fog: float = 0.00001
    fog_to_cloud: float = 0.00002


_CATEGORY_TIERS = {
    TaskCategory.HIGH_COMPUTE_LOW_DATA: Tier.ELASTIC,
    TaskCategory.MEDIUM_COMPUTE_MEDIUM_DATA: Tier.MID_TIER,
    TaskCategory.MEDIUM_COMPUTE_HIGH_DATA: Tier.MID_TIER,
    TaskCategory.LOW_COMPUTE_LOW_DATA: Tier.CONSTRAINED,
}


class MultiClassifierPolicy(OffloadingPolicy):
    """
    MCEETO placement. Decisions are cached per task id for the lifetime
    of the instance (or until `reset`).

    Attributes:
        thresholds: thresholds given to the classifier
        coefficients: energy coefficients for the cloud/fog trade-off
        classifier: function that categorises tasks
        decisions_computed: number of decisions that were not served from cache
    """

    thresholds: ClassifierThresholds
    coefficients: EnergyCoefficients
    classifier: Classifier
    decisions_computed: int
    _decisions: Dict[int, int]

    def __init__(
        self,
        thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
        coefficients: EnergyCoefficients = EnergyCoefficients(),
        classifier: Classifier = classify,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.thresholds = thresholds
        self.coefficients = coefficients
        self.classifier = classifier
        self.decisions_computed = 0
        self._decisions = {}

    def cloud_energy_estimate(self, task: Task) -> float:
        compute, data = max(task.compute_demand, 0), max(task.data_size, 0)
        coeff = self.coefficients
        return compute * coeff.cloud + data * (coeff.iot_to_fog + coeff.fog_to_cloud)

    def fog_energy_estimate(self, task: Task) -> float:
        compute, data = max(task.compute_demand, 0), max(task.data_size, 0)
        return compute * self.coefficients.fog + data * self.coefficients.iot_to_fog

    def target_tier(self, task: Task, category: TaskCategory) -> Tier:
        if category == TaskCategory.HIGH_COMPUTE_HIGH_DATA:
            if self.cloud_energy_estimate(task) <= self.fog_energy_estimate(task):
                return Tier.ELASTIC
            return Tier.MID_TIER
        if category == TaskCategory.LOW_COMPUTE_HIGH_DATA:
            if task.data_size > self.thresholds.large_data:
                return Tier.CONSTRAINED
            return Tier.MID_TIER
        return _CATEGORY_TIERS[category]

    def select_slot(self, task: Task, catalog: SlotCatalog) -> int:
        if task.task_id in self._decisions:
            return self._decisions[task.task_id]

        category = self.classifier(task.compute_demand, task.data_size, self.thresholds)
        self.decisions_computed += 1
        tier = self.target_tier(task, category)

        slots = catalog.by_tier(tier)
        if not slots:
            raise NoEligibleSlot(task.task_id, tier)

        slot_id = slots[task.task_id % len(slots)].slot_id
        self._decisions[task.task_id] = slot_id
        self._load[slot_id] += 1
        return slot_id

    def decision_for(self, task_id: int) -> int:
        """Returns the slot previously chosen for a task."""
        try:
            return self._decisions[task_id]
        except KeyError:
            raise UnknownTask(task_id) from None

    def reset(self) -> None:
        super().reset()
        self._decisions.clear()
        self.decisions_computed = 0
