#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command line driver of the fog offloading simulation.

Examples:

```bash
offloading-sim run --policy mceeto --tasks 20 --seed 7
offloading-sim --gin-binding 'run_scenario.synthesize_unbound = True' compare
offloading-sim check
```
"""

import click
import gin
from absl import logging

from fog_offloading import report
from fog_offloading.allocation import compatibility_report
from fog_offloading.errors import OffloadingError
from fog_offloading.policies import PolicyType
from fog_offloading.scenario import Scenario, run_scenario

POLICY_NAMES = [str(policy_type) for policy_type in PolicyType]
DEFAULT_SEED = 42


@click.group()
@click.pass_context
@click.option('--debug/--no-debug', default=False)
@click.option('--gin-file', multiple=True, help='Paths to gin-config files')
@click.option('--gin-binding', multiple=True, help='Gin binding parameters')
def main(ctx, debug, gin_file, gin_binding):
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    logging.set_verbosity(logging.DEBUG if debug else logging.INFO)
    gin.parse_config_files_and_bindings(gin_file, gin_binding)


@main.command()
@click.pass_context
@click.option('--policy', help='Offloading policy', type=click.Choice(POLICY_NAMES), default='mceeto')
@click.option('--seed', help='Random seed to use', default=DEFAULT_SEED)
@click.option('--tasks', help='Number of tasks to generate', type=int, default=None)
@click.option('--output-dir', help='Directory where CSV results are written', default=None)
def run(ctx, **options):
    """Runs the scenario with one offloading policy."""
    try:
        result = run_scenario(
            policy_type=options['policy'], num_tasks=options['tasks'], seed=options['seed']
        )
    except OffloadingError as error:
        raise click.ClickException(str(error))

    click.echo(report.format_summary(result))
    if ctx.obj["debug"]:
        click.echo(report.to_dataframe(result).to_string(index=False))
    if options['output_dir']:
        for path in report.save_results(result, options['output_dir']):
            click.echo(f'Results written to {path}')


@main.command()
@click.option('--seed', help='Random seed to use', default=DEFAULT_SEED)
@click.option('--tasks', help='Number of tasks to generate', type=int, default=None)
@click.option('--output-dir', help='Directory where CSV results are written', default=None)
def compare(**options):
    """Runs the same workload with every offloading policy."""
    results = []
    try:
        with click.progressbar(list(PolicyType), label='Running policies') as bar:
            for policy_type in bar:
                results.append(
                    run_scenario(
                        policy_type=policy_type,
                        num_tasks=options['tasks'],
                        seed=options['seed'],
                    )
                )
    except OffloadingError as error:
        raise click.ClickException(str(error))

    for result in results:
        click.echo(report.format_summary(result))
        click.echo()
    click.echo(report.compare(results).T.to_string())
    if options['output_dir']:
        for result in results:
            for path in report.save_results(result, options['output_dir']):
                click.echo(f'Results written to {path}')


@main.command()
def check():
    """Reports whether the hosts of each tier can accommodate its slots."""
    scenario = Scenario()
    topology = scenario.topology
    origin = scenario.config.origin
    for tier in scenario.catalog.tiers:
        click.echo(
            f'{tier.label}: {len(scenario.catalog.by_tier(tier))} slots, '
            f'round trip from {origin.label} {topology.round_trip(origin, tier):.1f} ms'
        )

    fits = compatibility_report(scenario.hosts, scenario.catalog)
    for slot in scenario.catalog:
        hosts = fits[slot.slot_id]
        fitting = [host_id for host_id, checks in hosts if all(c.ok for c in checks)]
        click.echo(
            f'Slot #{slot.slot_id} ({slot.tier.label}): '
            f'{len(fitting)} of {len(hosts)} hosts fit'
        )
        if not fitting:
            for host_id, checks in hosts:
                failed = '; '.join(str(c) for c in checks if not c.ok)
                click.echo(f'    Host #{host_id}: {failed}')


if __name__ == '__main__':
    main(obj={})
