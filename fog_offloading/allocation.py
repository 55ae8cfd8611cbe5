#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Binding of execution slots to the physical hosts of a tier.

An allocation policy fronts a pool of hosts and places each slot on the
first host, in pool order, that has enough free cores, memory, bandwidth
and storage, and whose total compute rate covers the slot's. When no host
fits, the failure carries the dimensions on which each host fell short.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from .errors import AllocationFailure, DuplicateBinding, TierMismatch, UnknownSlot
from .typing import (
    Dimension,
    DimensionCheck,
    HostDescriptor,
    HostRejection,
    ResourceSlot,
    Tier,
)

__all__ = [
    "Binding",
    "TieredAllocationPolicy",
    "check_fit",
    "compatibility_report",
]


def check_fit(host: HostDescriptor, slot: ResourceSlot) -> List[DimensionCheck]:
    """Checks every resource dimension of a host against a slot."""
    return [
        DimensionCheck(Dimension.CORES, slot.cores, host.free_cores),
        DimensionCheck(
            Dimension.COMPUTE, slot.total_compute_rate, host.total_compute_rate
        ),
        DimensionCheck(Dimension.MEMORY, slot.memory, host.free_memory),
        DimensionCheck(Dimension.BANDWIDTH, slot.bandwidth, host.free_bandwidth),
        DimensionCheck(Dimension.STORAGE, slot.storage, host.free_storage),
    ]


def compatibility_report(
    hosts: Iterable[HostDescriptor], slots: Iterable[ResourceSlot]
) -> Dict[int, List[Tuple[int, List[DimensionCheck]]]]:
    """
    Returns, for each slot id, the checks of every host of the same tier.
    Hosts are not modified.
    """
    hosts = list(hosts)
    report = {}
    for slot in slots:
        report[slot.slot_id] = [
            (host.host_id, check_fit(host, slot))
            for host in hosts
            if host.tier == slot.tier
        ]
    return report


@dataclass(frozen=True)
class Binding:
    slot: ResourceSlot
    host_id: int


class TieredAllocationPolicy:
    """
    First-fit allocation of slots onto a pool of hosts.

    A single instance owns the pool; when several tiers share a pool,
    the instance serves all of them.

    Attributes:
        tiers: the tiers whose slots this policy binds, None for any tier
    """

    tiers: Optional[FrozenSet[Tier]]
    _hosts: List[HostDescriptor]
    _bindings: Dict[int, Binding]

    def __init__(
        self,
        hosts: Iterable[HostDescriptor],
        tiers: Optional[Iterable[Tier]] = None,
    ):
        self._hosts = list(hosts)
        host_ids = [host.host_id for host in self._hosts]
        if len(set(host_ids)) != len(host_ids):
            raise ValueError("Host ids must be unique within a pool.")
        self.tiers = frozenset(tiers) if tiers is not None else None
        self._bindings = {}

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, slot_id: int) -> bool:
        return slot_id in self._bindings

    @property
    def hosts(self) -> List[HostDescriptor]:
        return list(self._hosts)

    @property
    def bindings(self) -> Dict[int, int]:
        """Mapping of slot id to the id of the host it is bound to."""
        return {slot_id: b.host_id for slot_id, b in self._bindings.items()}

    def serves(self, tier: Tier) -> bool:
        return self.tiers is None or tier in self.tiers

    def host(self, host_id: int) -> HostDescriptor:
        for host in self._hosts:
            if host.host_id == host_id:
                return host
        raise KeyError(f"Unknown host #{host_id}")

    def _scan(self, slot: ResourceSlot) -> Iterator[Tuple[HostDescriptor, List[DimensionCheck]]]:
        for host in self._hosts:
            yield host, [check for check in check_fit(host, slot) if not check.ok]

    def bind(self, slot: ResourceSlot) -> int:
        """
        Binds a slot to the first host that can accommodate it.

        Returns:
            The id of the host.

        Raises:
            DuplicateBinding: if the slot is already bound
            TierMismatch: if the slot's tier is not served by this policy
            AllocationFailure: if no host of the pool fits the slot
        """
        self._check_bindable(slot)

        rejections = []
        for host, failures in self._scan(slot):
            if not failures:
                return self._place(slot, host)
            rejections.append(HostRejection(host_id=host.host_id, failures=tuple(failures)))

        raise AllocationFailure(slot, tuple(rejections))

    def bind_to(self, slot: ResourceSlot, host_id: int) -> int:
        """
        Binds a slot to a given host of the pool.

        Raises:
            KeyError: if the host is not part of the pool
            AllocationFailure: if the host cannot accommodate the slot

        See `bind` for the other errors.
        """
        self._check_bindable(slot)
        host = self.host(host_id)
        failures = [check for check in check_fit(host, slot) if not check.ok]
        if failures:
            rejection = HostRejection(host_id=host.host_id, failures=tuple(failures))
            raise AllocationFailure(slot, (rejection,))
        return self._place(slot, host)

    def _check_bindable(self, slot: ResourceSlot) -> None:
        existing = self._bindings.get(slot.slot_id)
        if existing is not None:
            raise DuplicateBinding(slot.slot_id, existing.host_id)
        if not self.serves(slot.tier):
            raise TierMismatch(slot, self.tiers)

    def _place(self, slot: ResourceSlot, host: HostDescriptor) -> int:
        host.allocate(slot)
        self._bindings[slot.slot_id] = Binding(slot=slot, host_id=host.host_id)
        return host.host_id

    def release(self, slot_id: int) -> Optional[int]:
        """
        Returns the resources held by a slot to its host.

        Returns:
            The id of the host the slot was bound to, None if it was not bound.
        """
        binding = self._bindings.pop(slot_id, None)
        if binding is None:
            return None
        self.host(binding.host_id).deallocate(binding.slot)
        return binding.host_id

    def lookup(self, slot_id: int) -> Optional[int]:
        binding = self._bindings.get(slot_id)
        return binding.host_id if binding is not None else None

    def host_of(self, slot_id: int) -> int:
        """Like `lookup`, but raises UnknownSlot if the slot is not bound."""
        host_id = self.lookup(slot_id)
        if host_id is None:
            raise UnknownSlot(slot_id)
        return host_id

    def reset(self) -> None:
        """Releases every binding."""
        for slot_id in list(self._bindings):
            self.release(slot_id)
