#!/usr/bin/env python
# -*- coding: utf-8 -*-
""" Tests the placement classifier """

import unittest

from fog_offloading.classifier import (
    ClassifierThresholds,
    TaskCategory,
    classify,
    classify_task,
)
from fog_offloading.typing import Task


class TestClassifier(unittest.TestCase):

    def test_high_compute(self):
        """High compute tasks split on the medium data threshold."""
        self.assertEqual(classify(30000, 499), TaskCategory.HIGH_COMPUTE_LOW_DATA)
        self.assertEqual(classify(30000, 500), TaskCategory.HIGH_COMPUTE_HIGH_DATA)
        self.assertEqual(classify(45000, 2500), TaskCategory.HIGH_COMPUTE_HIGH_DATA)

    def test_medium_compute(self):
        """Medium compute tasks with little data fold into low compute low data."""
        self.assertEqual(classify(20000, 499), TaskCategory.LOW_COMPUTE_LOW_DATA)
        self.assertEqual(classify(25000, 500), TaskCategory.MEDIUM_COMPUTE_MEDIUM_DATA)
        self.assertEqual(classify(25000, 999), TaskCategory.MEDIUM_COMPUTE_MEDIUM_DATA)
        self.assertEqual(classify(29999, 1000), TaskCategory.MEDIUM_COMPUTE_HIGH_DATA)

    def test_low_compute(self):
        self.assertEqual(classify(19999, 0), TaskCategory.LOW_COMPUTE_LOW_DATA)
        self.assertEqual(classify(10000, 500), TaskCategory.LOW_COMPUTE_HIGH_DATA)
        self.assertEqual(classify(10000, 3000), TaskCategory.LOW_COMPUTE_HIGH_DATA)

    def test_negative_values(self):
        """Negative inputs are treated as zero."""
        self.assertEqual(classify(-5, -100), TaskCategory.LOW_COMPUTE_LOW_DATA)
        self.assertEqual(classify(35000, -1), TaskCategory.HIGH_COMPUTE_LOW_DATA)

    def test_custom_thresholds(self):
        thresholds = ClassifierThresholds(
            medium_compute=100, high_compute=200, medium_data=10, large_data=20
        )
        self.assertEqual(classify(250, 5, thresholds), TaskCategory.HIGH_COMPUTE_LOW_DATA)
        self.assertEqual(classify(150, 25, thresholds), TaskCategory.MEDIUM_COMPUTE_HIGH_DATA)

    def test_inverted_thresholds(self):
        with self.assertRaises(ValueError):
            ClassifierThresholds(medium_compute=40000, high_compute=30000)
        with self.assertRaises(ValueError):
            ClassifierThresholds(medium_data=2000, large_data=1000)

    def test_classify_task(self):
        """The data weight of a task is its input plus its output size."""
        task = Task(task_id=0, compute_demand=25000, input_size=600, output_size=500)
        self.assertEqual(classify_task(task), TaskCategory.MEDIUM_COMPUTE_HIGH_DATA)


if __name__ == "__main__":
    unittest.main()
