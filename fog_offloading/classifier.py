#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Placement classifier that categorises a task by its computational weight
and the amount of data it moves.

    compute \\ data |  low            | medium           | high
    ----------------+-----------------+------------------+-----------------
    high            | HIGH_COMPUTE_   | HIGH_COMPUTE_    | HIGH_COMPUTE_
                    | LOW_DATA        | HIGH_DATA        | HIGH_DATA
    medium          | LOW_COMPUTE_    | MEDIUM_COMPUTE_  | MEDIUM_COMPUTE_
                    | LOW_DATA        | MEDIUM_DATA      | HIGH_DATA
    low             | LOW_COMPUTE_    | LOW_COMPUTE_     | LOW_COMPUTE_
                    | LOW_DATA        | HIGH_DATA        | HIGH_DATA
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .typing import Task

__all__ = [
    "TaskCategory",
    "ClassifierThresholds",
    "DEFAULT_THRESHOLDS",
    "classify",
    "classify_task",
]


class TaskCategory(Enum):
    HIGH_COMPUTE_LOW_DATA = "high_compute_low_data"
    HIGH_COMPUTE_HIGH_DATA = "high_compute_high_data"
    MEDIUM_COMPUTE_MEDIUM_DATA = "medium_compute_medium_data"
    MEDIUM_COMPUTE_HIGH_DATA = "medium_compute_high_data"
    LOW_COMPUTE_LOW_DATA = "low_compute_low_data"
    LOW_COMPUTE_HIGH_DATA = "low_compute_high_data"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class ClassifierThresholds:
    """
    Thresholds of the classifier.

    Attributes:
        medium_compute: tasks from this many MI on are medium compute
        high_compute: tasks from this many MI on are high compute
        medium_data: tasks moving this many bytes or more carry medium data
        large_data: tasks moving this many bytes or more carry high data
    """

    medium_compute: float = 20000
    high_compute: float = 30000
    medium_data: float = 500
    large_data: float = 1000

    def __post_init__(self):
        if not 0 <= self.medium_compute <= self.high_compute:
            raise ValueError("Compute thresholds must satisfy 0 <= medium <= high")
        if not 0 <= self.medium_data <= self.large_data:
            raise ValueError("Data thresholds must satisfy 0 <= medium <= large")


DEFAULT_THRESHOLDS = ClassifierThresholds()


def classify(
    compute_demand: float,
    data_size: float,
    thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS,
) -> TaskCategory:
    """
    Categorises a task. Negative values are treated as zero.

    Args:
        compute_demand: the computation of the task in MI
        data_size: the bytes the task uploads and downloads
        thresholds: the thresholds to use

    Returns:
        The category of the task.
    """
    compute = max(compute_demand, 0)
    data = max(data_size, 0)

    if compute >= thresholds.high_compute:
        if data < thresholds.medium_data:
            return TaskCategory.HIGH_COMPUTE_LOW_DATA
        return TaskCategory.HIGH_COMPUTE_HIGH_DATA

    if compute >= thresholds.medium_compute:
        if data >= thresholds.large_data:
            return TaskCategory.MEDIUM_COMPUTE_HIGH_DATA
        if data >= thresholds.medium_data:
            return TaskCategory.MEDIUM_COMPUTE_MEDIUM_DATA
        # Medium compute with little data has no category of its own
        return TaskCategory.LOW_COMPUTE_LOW_DATA

    if data < thresholds.medium_data:
        return TaskCategory.LOW_COMPUTE_LOW_DATA
    return TaskCategory.LOW_COMPUTE_HIGH_DATA


def classify_task(
    task: Task, thresholds: ClassifierThresholds = DEFAULT_THRESHOLDS
) -> TaskCategory:
    """Categorises a task using its compute demand and total data size."""
    return classify(task.compute_demand, task.data_size, thresholds)
