#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Offloading policies that decide the slot on which each task executes.

A policy is selected once, when a scenario is configured:

    >>> from fog_offloading.policies import PolicyType, build_policy
    >>> policy = build_policy(PolicyType.MCEETO)
"""

from enum import Enum
from typing import Optional, Union

from ..topology import TierTopology
from ..typing import Tier
from .base import OffloadingPolicy
from .deadline_aware import DeadlineAwarePolicy, DEFAULT_DEADLINES
from .energy_aware import EnergyAwarePolicy
from .mceeto import EnergyCoefficients, MultiClassifierPolicy
from .round_robin import (
    CatalogRoundRobinPolicy,
    DEFAULT_TIER_SPLIT,
    RoundRobinPolicy,
)

__all__ = [
    "OffloadingPolicy",
    "RoundRobinPolicy",
    "CatalogRoundRobinPolicy",
    "EnergyAwarePolicy",
    "DeadlineAwarePolicy",
    "MultiClassifierPolicy",
    "EnergyCoefficients",
    "PolicyType",
    "build_policy",
    "DEFAULT_DEADLINES",
    "DEFAULT_TIER_SPLIT",
]


class PolicyType(Enum):
    ROUND_ROBIN = "round-robin"
    ENERGY_AWARE = "energy-aware"
    DEADLINE_AWARE = "deadline-aware"
    MCEETO = "mceeto"

    # Python < 3.11 does not have StrEnum
    def __str__(self):
        return self.value


def _round_robin(expected_tasks, **kwargs):
    return RoundRobinPolicy(expected_tasks, **kwargs)


def _energy_aware(expected_tasks, **kwargs):
    return EnergyAwarePolicy(**kwargs)


def _deadline_aware(expected_tasks, **kwargs):
    return DeadlineAwarePolicy(**kwargs)


def _mceeto(expected_tasks, **kwargs):
    return MultiClassifierPolicy(**kwargs)


_BUILDERS = {
    PolicyType.ROUND_ROBIN: _round_robin,
    PolicyType.ENERGY_AWARE: _energy_aware,
    PolicyType.DEADLINE_AWARE: _deadline_aware,
    PolicyType.MCEETO: _mceeto,
}


def build_policy(
    policy_type: Union[PolicyType, str],
    *,
    topology: Optional[TierTopology] = None,
    origin: Tier = Tier.CONSTRAINED,
    expected_tasks: int = 10,
    **kwargs,
) -> OffloadingPolicy:
    """
    Creates a fresh policy instance.

    Args:
        policy_type: the policy, or its name (e.g. "energy-aware")
        topology: latency lookup shared with the engine
        origin: tier where tasks are created
        expected_tasks: length of the task stream, used by round-robin
        **kwargs: extra arguments of the policy constructor

    Raises:
        ValueError: if the policy name is unknown
    """
    policy_type = PolicyType(policy_type)
    return _BUILDERS[policy_type](
        expected_tasks, topology=topology, origin=origin, **kwargs
    )
