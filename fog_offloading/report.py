#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Tabulation of run records with pandas."""

from __future__ import annotations

import os
from typing import Dict, Iterable, List

import pandas as pd

from .scenario import ScenarioResult
from .simulation import TaskStatus
from .typing import Tier

__all__ = [
    "to_dataframe",
    "tier_summary",
    "summary",
    "format_summary",
    "save_results",
    "compare",
]

RECORD_COLUMNS = [
    "task_id",
    "status",
    "tier",
    "slot_id",
    "host_id",
    "submit_time",
    "start_time",
    "finish_time",
    "execution_time",
    "upload_delay",
    "runtime",
    "download_delay",
    "transmission_time",
    "energy",
    "synthetic",
]

TIER_ORDER = [Tier.ELASTIC.label, Tier.MID_TIER.label, Tier.CONSTRAINED.label]


def _executed(df: pd.DataFrame) -> pd.DataFrame:
    # Synthetic records are estimates, not engine output
    return df[(df["status"] == str(TaskStatus.COMPLETED)) & ~df["synthetic"].astype(bool)]


def to_dataframe(result: ScenarioResult) -> pd.DataFrame:
    """Returns one row per task record."""
    rows = []
    for record in result.records:
        rows.append(
            {
                "task_id": record.task_id,
                "status": str(record.status),
                "tier": record.tier.label if record.tier is not None else None,
                "slot_id": record.slot_id,
                "host_id": record.host_id,
                "submit_time": record.submit_time,
                "start_time": record.start_time,
                "finish_time": record.finish_time,
                "execution_time": record.makespan,
                "upload_delay": record.upload_delay,
                "runtime": record.runtime,
                "download_delay": record.download_delay,
                "transmission_time": record.transmission_time,
                "energy": record.energy,
                "synthetic": record.synthetic,
            }
        )
    df = pd.DataFrame(rows, columns=RECORD_COLUMNS)
    df["slot_id"] = df["slot_id"].astype("Int64")
    df["host_id"] = df["host_id"].astype("Int64")
    return df


def tier_summary(result: ScenarioResult) -> pd.DataFrame:
    """Number of tasks, mean times and energy of executed tasks per tier."""
    completed = _executed(to_dataframe(result))
    grouped = completed.groupby("tier").agg(
        tasks=("task_id", "count"),
        mean_execution_time=("execution_time", "mean"),
        mean_transmission_time=("transmission_time", "mean"),
        energy=("energy", "sum"),
    )
    grouped = grouped.reindex(TIER_ORDER)
    grouped["tasks"] = grouped["tasks"].fillna(0).astype(int)
    grouped["energy"] = grouped["energy"].fillna(0.0)
    return grouped


def summary(result: ScenarioResult) -> Dict[str, float]:
    """Returns the aggregated metrics of a run."""
    df = to_dataframe(result)
    completed = _executed(df)
    total = len(df)
    synthetic = int(df["synthetic"].astype(bool).sum())
    metrics = {
        "policy": result.policy,
        "total_tasks": total,
        "completed_tasks": len(completed),
        "failed_tasks": int((df["status"] == str(TaskStatus.FAILED)).sum()),
        "synthetic_tasks": synthetic,
        "success_rate": (len(completed) / total * 100) if total else 0.0,
        "mean_execution_time": completed["execution_time"].mean() if len(completed) else 0.0,
        "min_execution_time": completed["execution_time"].min() if len(completed) else 0.0,
        "max_execution_time": completed["execution_time"].max() if len(completed) else 0.0,
        "mean_transmission_time": (
            completed["transmission_time"].mean() if len(completed) else 0.0
        ),
        "total_energy": completed["energy"].sum(),
    }
    tiers = tier_summary(result)
    for label in TIER_ORDER:
        metrics[f"{label.lower()}_tasks"] = int(tiers.loc[label, "tasks"])
        metrics[f"{label.lower()}_energy"] = float(tiers.loc[label, "energy"])
    return metrics


def format_summary(result: ScenarioResult) -> str:
    """Text summary of a run for the console."""
    metrics = summary(result)
    lines = [
        f"Offloading policy: {metrics['policy']}",
        f"    Tasks: {metrics['total_tasks']} "
        f"(completed {metrics['completed_tasks']}, failed {metrics['failed_tasks']})",
        f"    Success rate: {metrics['success_rate']:.2f}%",
        f"    Execution time: mean {metrics['mean_execution_time']:.2f} ms, "
        f"min {metrics['min_execution_time']:.2f} ms, "
        f"max {metrics['max_execution_time']:.2f} ms",
        f"    Mean transmission time: {metrics['mean_transmission_time']:.2f} ms",
        f"    Total energy: {metrics['total_energy']:.2f} J",
    ]
    if metrics["synthetic_tasks"]:
        lines.append(f"    Synthetic records: {metrics['synthetic_tasks']}")
    lines.append("")
    lines.append(tier_summary(result).to_string(float_format=lambda v: f"{v:.2f}"))
    return "\n".join(lines)


def save_results(result: ScenarioResult, output_dir: str) -> List[str]:
    """
    Writes the task records and the tier summary of a run as CSV files.

    Returns:
        The paths of the files written.
    """
    os.makedirs(output_dir, exist_ok=True)
    name = result.policy.replace(" ", "_").lower()
    tasks_path = os.path.join(output_dir, f"{name}_tasks.csv")
    tiers_path = os.path.join(output_dir, f"{name}_tiers.csv")
    to_dataframe(result).to_csv(tasks_path, index=False)
    tier_summary(result).to_csv(tiers_path, index_label="tier")
    return [tasks_path, tiers_path]


def compare(results: Iterable[ScenarioResult]) -> pd.DataFrame:
    """One row of aggregated metrics per policy."""
    rows = [summary(result) for result in results]
    return pd.DataFrame(rows).set_index("policy")
