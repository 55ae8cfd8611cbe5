#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Generator of independent tasks submitted by the IoT devices."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

import numpy as np
from gymnasium.utils import seeding

from .typing import Task, WorkloadConfig

__all__ = ["TaskWorkload"]


class TaskWorkload:
    """
    Creates tasks whose computation and data sizes are drawn uniformly
    from the ranges of a workload configuration.

    Attributes:
        config: the ranges from which task attributes are drawn
        current_element: id given to the next generated task
    """

    config: WorkloadConfig
    current_element: int
    _np_random: Union[np.random.Generator, None] = None

    def __init__(self, config: WorkloadConfig):
        if config.min_computing > config.max_computing:
            raise ValueError("min_computing must be <= max_computing")
        if config.min_input_size > config.max_input_size:
            raise ValueError("min_input_size must be <= max_input_size")
        if config.min_output_size > config.max_output_size:
            raise ValueError("min_output_size must be <= max_output_size")
        if not config.affinities:
            raise ValueError("affinities must contain at least one entry")
        self.config = config
        self.current_element = 0

    def reset(self, *, seed: Optional[int] = None) -> None:
        """Returns the workload to its original state."""
        if seed is not None:
            self._np_random, seed = seeding.np_random(seed)
        self.current_element = 0

    def generate(self, num_tasks: Optional[int] = None) -> List[Task]:
        """Creates the next `num_tasks` tasks, with consecutive ids."""
        num_tasks = int(num_tasks if num_tasks is not None else self.config.num_tasks)
        rng = self.np_random
        tasks = []
        for _ in range(num_tasks):
            affinity_idx = rng.integers(low=0, high=len(self.config.affinities))
            tasks.append(
                Task(
                    task_id=self.current_element,
                    compute_demand=float(
                        rng.integers(
                            low=self.config.min_computing,
                            high=self.config.max_computing,
                            endpoint=True,
                        )
                    ),
                    input_size=int(
                        rng.integers(
                            low=self.config.min_input_size,
                            high=self.config.max_input_size,
                            endpoint=True,
                        )
                    ),
                    output_size=int(
                        rng.integers(
                            low=self.config.min_output_size,
                            high=self.config.max_output_size,
                            endpoint=True,
                        )
                    ),
                    deadline=self.config.deadline,
                    affinity=self.config.affinities[affinity_idx],
                )
            )
            self.current_element += 1
        return tasks

    def __len__(self):
        return self.config.num_tasks

    @property
    def np_random(self) -> np.random.Generator:
        """Returns the workload's random number generator, seeding it
        randomly when it has not been initialised."""
        if self._np_random is None:
            self._np_random, _ = seeding.np_random()
        return self._np_random

    @np_random.setter
    def np_random(self, value: np.random.Generator):
        self._np_random = value

    @staticmethod
    def build(args: Union[Dict[str, Any], WorkloadConfig]) -> TaskWorkload:
        config = args if isinstance(args, WorkloadConfig) else WorkloadConfig(**args)
        return TaskWorkload(config)
