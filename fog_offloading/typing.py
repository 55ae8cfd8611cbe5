#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Module containing typing classes for the tiered offloading engine."""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    AnyStr,
    Dict,
    FrozenSet,
    List,
    NamedTuple,
    Optional,
    Tuple,
    Type,
)
from dataclasses import dataclass, field, asdict, replace
from enum import Enum

if TYPE_CHECKING:
    from fog_offloading.simulation.energy import EnergyModel


class Tier(Enum):
    """Capability class of an execution slot or host."""

    CONSTRAINED = "constrained"
    MID_TIER = "mid_tier"
    ELASTIC = "elastic"

    # Python < 3.11 does not have StrEnum
    def __str__(self):
        return self.value

    @property
    def label(self) -> str:
        """Name of the tier as used in reports."""
        return _TIER_LABELS[self]


_TIER_LABELS = {
    Tier.CONSTRAINED: "IoT",
    Tier.MID_TIER: "Fog",
    Tier.ELASTIC: "Cloud",
}


@dataclass(frozen=True)
class Task:
    """
    A unit of work submitted for offloading.

    Attributes:
        task_id: the task id, unique within a run
        compute_demand: the amount of computation in million instructions (MI)
        input_size: the number of bytes uploaded to the executing slot
        output_size: the number of bytes downloaded once the task completes
        deadline: optional deadline in milliseconds
        affinity: optional tier the task is restricted to
    """

    task_id: int
    compute_demand: float
    input_size: int = 0
    output_size: int = 0
    deadline: Optional[float] = None
    affinity: Optional[Tier] = None

    @property
    def data_size(self) -> int:
        """Total number of bytes the task moves over the network."""
        return self.input_size + self.output_size


@dataclass(frozen=True)
class ResourceSlot:
    """
    An execution slot (a virtual machine) with a fixed resource demand.

    Attributes:
        slot_id: dense, unique id of the slot in the catalog
        tier: the tier the slot belongs to
        compute_rate: capacity of each core in MIPS
        cores: number of cores the slot needs
        memory: memory in MB
        bandwidth: bandwidth in Mbps
        storage: storage in MB
        energy: declared energy figure used when scoring placements
    """

    slot_id: int
    tier: Tier
    compute_rate: float
    cores: int = 1
    memory: int = 0
    bandwidth: int = 0
    storage: int = 0
    energy: float = 0.0

    def __post_init__(self):
        if self.compute_rate <= 0:
            raise ValueError("compute_rate must be > 0")
        if self.cores < 1:
            raise ValueError("A slot needs at least one core")
        if min(self.memory, self.bandwidth, self.storage) < 0:
            raise ValueError("Slot resources must be >= 0")

    @property
    def total_compute_rate(self) -> float:
        """Compute rate over all the cores of the slot."""
        return self.compute_rate * self.cores

    def resized(self, **changes) -> ResourceSlot:
        """Returns a copy of this slot with a different resource demand."""
        return replace(self, **changes)


@dataclass
class HostDescriptor:
    """
    A physical machine onto which slots are bound.

    The free_* attributes are only changed by the allocation policy
    that owns the host.
    """

    host_id: int
    tier: Tier
    core_count: int
    compute_rate_per_core: float
    memory: int
    bandwidth: int
    storage: int
    free_cores: int = field(init=False)
    free_memory: int = field(init=False)
    free_bandwidth: int = field(init=False)
    free_storage: int = field(init=False)

    def __post_init__(self):
        if self.core_count < 0 or self.compute_rate_per_core < 0:
            raise ValueError("Host cores and compute rate must be >= 0")
        if min(self.memory, self.bandwidth, self.storage) < 0:
            raise ValueError("Host resources must be >= 0")
        self.free_cores = self.core_count
        self.free_memory = self.memory
        self.free_bandwidth = self.bandwidth
        self.free_storage = self.storage

    @property
    def total_compute_rate(self) -> float:
        """Return the compute rate over all cores in MIPS"""
        return self.core_count * self.compute_rate_per_core

    @property
    def occupancy(self) -> float:
        """Fraction of cores currently taken by bound slots."""
        if self.core_count == 0:
            return 0.0
        return 1.0 - self.free_cores / self.core_count

    def is_idle(self) -> bool:
        """Returns True if no slot holds resources of this host."""
        return (
            self.free_cores == self.core_count
            and self.free_memory == self.memory
            and self.free_bandwidth == self.bandwidth
            and self.free_storage == self.storage
        )

    def allocate(self, slot: ResourceSlot) -> None:
        self.free_cores -= slot.cores
        self.free_memory -= slot.memory
        self.free_bandwidth -= slot.bandwidth
        self.free_storage -= slot.storage

    def deallocate(self, slot: ResourceSlot) -> None:
        self.free_cores += slot.cores
        self.free_memory += slot.memory
        self.free_bandwidth += slot.bandwidth
        self.free_storage += slot.storage


class Dimension(Enum):
    """Resource dimension checked when binding a slot to a host."""

    CORES = "cores"
    COMPUTE = "compute"
    MEMORY = "memory"
    BANDWIDTH = "bandwidth"
    STORAGE = "storage"

    def __str__(self):
        return self.value


class DimensionCheck(NamedTuple):
    """Outcome of checking one resource dimension of a host against a slot."""

    dimension: Dimension
    required: float
    available: float

    @property
    def ok(self) -> bool:
        return self.available >= self.required

    def __str__(self):
        status = "OK" if self.ok else "FAILED"
        return (
            f"{self.dimension}: {self.required} needed, "
            f"{self.available} available - {status}"
        )


@dataclass(frozen=True)
class HostRejection:
    """The dimensions on which a host could not accommodate a slot."""

    host_id: int
    failures: Tuple[DimensionCheck, ...]

    @property
    def failed_dimensions(self) -> FrozenSet[Dimension]:
        return frozenset(check.dimension for check in self.failures)

    def __str__(self):
        reasons = "; ".join(str(check) for check in self.failures)
        return f"Host #{self.host_id}: {reasons}"


class Link(NamedTuple):
    """Network link between two tiers with its latency in milliseconds."""

    source: Tier
    target: Tier
    latency: float


class HostProfile(NamedTuple):
    """Data type for the configuration of a single host."""

    cores: int
    compute_rate_per_core: float
    memory: int
    bandwidth: int
    storage: int


class SlotProfile(NamedTuple):
    """Data type for the resource demand of the slots of a tier."""

    compute_rate: float
    cores: int
    memory: int
    bandwidth: int
    storage: int
    energy: float = 0.0


@dataclass(frozen=True)
class TierConfig:
    """
    Data type for the configuration of a tier: the hosts it deploys,
    the slots it offers and the energy model of its machines.
    """

    tier: Tier
    hosts: List[HostProfile]
    num_slots: int
    slot_profile: SlotProfile
    first_host_id: int = 0
    energy_model: Optional[Tuple[Type[EnergyModel], Dict[AnyStr, Any]]] = None

    def __post_init__(self):
        if self.num_slots < 0:
            raise ValueError("num_slots must be >= 0")


@dataclass(frozen=True)
class ScenarioConfig:
    """Data type for the configuration of a complete scenario."""

    tiers: List[TierConfig]
    links: List[Link]
    origin: Tier = Tier.CONSTRAINED
    shared_host_pool: bool = False
    fallback_slot_profile: Optional[SlotProfile] = None

    def __post_init__(self):
        tiers = [tier_config.tier for tier_config in self.tiers]
        if len(set(tiers)) != len(tiers):
            raise ValueError("Each tier can only be configured once.")

    def num_slots(self) -> int:
        """Returns the number of slots the scenario instantiates."""
        return sum(tier_config.num_slots for tier_config in self.tiers)

    def num_hosts(self) -> int:
        """Returns the number of hosts the scenario deploys."""
        return sum(len(tier_config.hosts) for tier_config in self.tiers)

    def tier_config(self, tier: Tier) -> Optional[TierConfig]:
        for tier_config in self.tiers:
            if tier_config.tier == tier:
                return tier_config
        return None


@dataclass(frozen=True)
class WorkloadConfig:
    num_tasks: int
    min_computing: int
    max_computing: int
    min_input_size: int
    max_input_size: int
    min_output_size: int
    max_output_size: int
    affinities: List[Optional[Tier]] = field(default_factory=lambda: [None])
    deadline: Optional[float] = None

    def as_dict(self) -> Dict[AnyStr, Any]:
        """Returns the workload configuration as a dict"""
        return asdict(self)
