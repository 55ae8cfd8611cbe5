#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
This module provides the classes required to build a discrete event
simulation of tasks offloaded to slots of a tiered infrastructure.
"""

from .simulation import OffloadingSimulation, TaskRunInfo, TaskStatus

__all__ = [
    "OffloadingSimulation",
    "TaskRunInfo",
    "TaskStatus",
    "energy",
    "resources",
]
