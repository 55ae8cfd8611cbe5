#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Latency model between tiers.

       +-------------+    2 ms    +-----------+    20 ms    +-----------+
       | Constrained | ---------- | Mid-tier  | ----------- |  Elastic  |
       |    (IoT)    |            |   (Fog)   |             |  (Cloud)  |
       +-------------+            +-----------+             +-----------+

Tiers are the vertices of a NetworkX graph whose edges carry the latency
of the link. The latency between tiers that are not directly connected is
the sum of the latencies along the shortest path.
"""

from __future__ import annotations

from typing import Dict, Iterable

import networkx as nx

from .typing import Link, Tier

__all__ = ["TierTopology", "DEFAULT_LINKS"]

IOT_TO_FOG_LATENCY = 2.0
FOG_TO_CLOUD_LATENCY = 20.0

DEFAULT_LINKS = [
    Link(source=Tier.CONSTRAINED, target=Tier.MID_TIER, latency=IOT_TO_FOG_LATENCY),
    Link(source=Tier.MID_TIER, target=Tier.ELASTIC, latency=FOG_TO_CLOUD_LATENCY),
]


class TierTopology:
    """Symmetric latency lookup between tiers."""

    _graph: nx.Graph
    _latencies: Dict[Tier, Dict[Tier, float]]

    def __init__(self, links: Iterable[Link] = DEFAULT_LINKS):
        self._graph = nx.Graph()
        self._graph.add_nodes_from(Tier)
        for link in links:
            if link.latency < 0:
                raise ValueError(f"Negative latency on link {link}")
            self._graph.add_edge(link.source, link.target, latency=link.latency)
        self._latencies = dict(
            nx.all_pairs_dijkstra_path_length(self._graph, weight="latency")
        )

    @property
    def graph(self) -> nx.Graph:
        return self._graph

    def latency(self, source: Tier, target: Tier) -> float:
        """Returns the one-way latency in milliseconds between two tiers."""
        if source == target:
            return 0.0
        try:
            return float(self._latencies[source][target])
        except KeyError:
            raise ValueError(f"No network path between {source} and {target}") from None

    def round_trip(self, origin: Tier, tier: Tier) -> float:
        """Uplink plus downlink latency between the origin and a tier."""
        return self.latency(origin, tier) + self.latency(tier, origin)
