#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Tiered resource allocation and task offloading for fog/cloud simulation.

Tasks created by IoT devices are offloaded to execution slots spread over
three tiers (constrained IoT devices, mid-tier fog gateways and elastic
cloud servers). An offloading policy selects the slot of each task and an
allocation policy binds each slot to a physical host.
"""

from .allocation import TieredAllocationPolicy, check_fit, compatibility_report
from .catalog import SlotCatalog
from .classifier import ClassifierThresholds, TaskCategory, classify, classify_task
from .errors import (
    AllocationError,
    AllocationFailure,
    DuplicateBinding,
    NoEligibleSlot,
    OffloadingError,
    TierMismatch,
    UnknownSlot,
    UnknownTask,
)
from .policies import OffloadingPolicy, PolicyType, build_policy
from .scenario import Scenario, ScenarioResult, run_scenario
from .topology import TierTopology
from .typing import HostDescriptor, ResourceSlot, Task, Tier
from .workload import TaskWorkload

__all__ = [
    "AllocationError",
    "AllocationFailure",
    "ClassifierThresholds",
    "DuplicateBinding",
    "HostDescriptor",
    "NoEligibleSlot",
    "OffloadingError",
    "OffloadingPolicy",
    "PolicyType",
    "ResourceSlot",
    "Scenario",
    "ScenarioResult",
    "SlotCatalog",
    "Task",
    "TaskCategory",
    "TaskWorkload",
    "Tier",
    "TierMismatch",
    "TierTopology",
    "TieredAllocationPolicy",
    "UnknownSlot",
    "UnknownTask",
    "build_policy",
    "check_fit",
    "classify",
    "classify_task",
    "compatibility_report",
    "run_scenario",
]
