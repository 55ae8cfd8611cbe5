#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Default configuration of the three-tier deployment:

    - Cloud: 2 hosts (4 x 10000 MIPS, 8 x 8000 MIPS) running 2 slots
    - Fog: 5 gateways (2 x 2000 MIPS, 8 GB) running 5 slots
    - IoT: 10 devices (1 x 1000 MIPS, 2 GB) running 10 slots

Slot ids follow the order of the tiers below, so the cloud slots are
0-1, the fog slots 2-6 and the IoT slots 7-16.
"""

from .simulation.energy import PerInstructionEnergyModel
from .topology import DEFAULT_LINKS
from .typing import (
    HostProfile,
    ScenarioConfig,
    SlotProfile,
    Tier,
    TierConfig,
    WorkloadConfig,
)

__all__ = [
    "DEFAULT_SCENARIO_CONFIG",
    "DEFAULT_WORKLOAD_CONFIG",
    "MINIMAL_SLOT_PROFILE",
    "ENERGY_PER_MI",
]

# Energy in J per MI used to report the energy of executed tasks
ENERGY_PER_MI = {
    Tier.ELASTIC: 0.0005,
    Tier.MID_TIER: 0.0003,
    Tier.CONSTRAINED: 0.0001,
}


def _slot_profile(energy: float) -> SlotProfile:
    return SlotProfile(
        compute_rate=50, cores=1, memory=128, bandwidth=10, storage=500, energy=energy
    )


# Used for slots that no host can accommodate with their nominal demand
MINIMAL_SLOT_PROFILE = SlotProfile(
    compute_rate=50, cores=1, memory=64, bandwidth=1, storage=100
)

DEFAULT_SCENARIO_CONFIG = ScenarioConfig(
    tiers=[
        TierConfig(
            tier=Tier.ELASTIC,
            hosts=[
                HostProfile(
                    cores=4, compute_rate_per_core=10000, memory=16384,
                    bandwidth=10000, storage=1000000,
                ),
                HostProfile(
                    cores=8, compute_rate_per_core=8000, memory=32768,
                    bandwidth=10000, storage=2000000,
                ),
            ],
            num_slots=2,
            slot_profile=_slot_profile(energy=5.0),
            first_host_id=0,
            energy_model=(
                PerInstructionEnergyModel,
                {"energy_per_mi": ENERGY_PER_MI[Tier.ELASTIC]},
            ),
        ),
        TierConfig(
            tier=Tier.MID_TIER,
            hosts=[
                HostProfile(
                    cores=2, compute_rate_per_core=2000, memory=8192,
                    bandwidth=1000, storage=500000,
                )
            ] * 5,
            num_slots=5,
            slot_profile=_slot_profile(energy=3.0),
            first_host_id=10,
            energy_model=(
                PerInstructionEnergyModel,
                {"energy_per_mi": ENERGY_PER_MI[Tier.MID_TIER]},
            ),
        ),
        TierConfig(
            tier=Tier.CONSTRAINED,
            hosts=[
                HostProfile(
                    cores=1, compute_rate_per_core=1000, memory=2048,
                    bandwidth=1000, storage=1000000,
                )
            ] * 10,
            num_slots=10,
            slot_profile=_slot_profile(energy=1.0),
            first_host_id=20,
            energy_model=(
                PerInstructionEnergyModel,
                {"energy_per_mi": ENERGY_PER_MI[Tier.CONSTRAINED]},
            ),
        ),
    ],
    links=DEFAULT_LINKS,
    origin=Tier.CONSTRAINED,
    fallback_slot_profile=MINIMAL_SLOT_PROFILE,
)

DEFAULT_WORKLOAD_CONFIG = WorkloadConfig(
    num_tasks=10,
    min_computing=10000,  # Each task requires between 10000 and 50000 MI
    max_computing=50000,
    min_input_size=500,  # Tasks upload 500 - 2000 bytes
    max_input_size=2000,
    min_output_size=300,
    max_output_size=1300,
)
