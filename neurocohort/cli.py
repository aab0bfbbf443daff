"""
Command-line interface for neurocohort.

Usage:
    neurocohort init
    neurocohort build-cohort
    neurocohort route --dry-run
    neurocohort run
"""

import click
import logging
import sys
from pathlib import Path

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "neurocohort.yaml"


def _resolve_config_path(config_path: str) -> str:
    """Fall back to a config found in the cwd or its parents."""
    from neurocohort.config.loader import get_config_path

    if config_path == DEFAULT_CONFIG and not Path(config_path).exists():
        found = get_config_path()
        if found is not None:
            return str(found)
    return config_path


def _fail(ctx, error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    if ctx.obj["verbose"]:
        import traceback

        traceback.print_exc()
    sys.exit(1)


def _echo_table(table) -> None:
    for row in table.iter_rows(named=True):
        click.echo("  " + "  ".join(f"{k}={v}" for k, v in row.items()))


@click.group()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx, config, verbose):
    """neurocohort - diabetic neuropathy ECG cohort builder

    Builds the labeled CDED/CPD cohort and sorts the subjects' ECG files
    into healthy and neuropathy folders.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command("build-cohort")
@click.option("--output", "-o", default=None, help="Output path (default: from config)")
@click.pass_context
def build_cohort(ctx, output):
    """Build the labeled cohort table.

    Keeps diabetic subjects with an ECG and a known neuropathy outcome
    (CDED: qualifying visit only), then merges CDED and CPD with CDED
    taking priority for shared identifiers.
    """
    from neurocohort.config.loader import load_config
    from neurocohort.cohort.builder import NeuropathyCohortBuilder

    config_path = _resolve_config_path(ctx.obj["config_path"])

    try:
        config = load_config(config_path)
        output_path = output or config.output.cohort_path

        click.echo("Building neuropathy cohort...")
        click.echo(f"  CDED: {config.cded.path}")
        click.echo(f"  CPD: {config.cpd.path}")
        click.echo(f"  Output: {output_path}")
        click.echo("")

        builder = NeuropathyCohortBuilder(config)
        cohort, stats = builder.build_cohort(output_path=output_path)

        click.echo("")
        click.echo(click.style("Cohort built successfully!", fg="green", bold=True))
        click.echo(f"  Total subjects: {cohort.height:,}")
        click.echo(f"  Neuropathy: {stats.get('final_neuropathy', 0):,}")
        click.echo(f"  Output saved to: {output_path}")

        click.echo("")
        click.echo("Exclusion statistics:")
        for key, value in stats.items():
            click.echo(f"  {key}: {value:,}")

    except Exception as e:
        _fail(ctx, e)


@cli.command("overlap")
@click.pass_context
def show_overlap(ctx):
    """Show identifier overlap between the raw exports and the cohorts."""
    from neurocohort.config.loader import load_config
    from neurocohort.cohort.builder import NeuropathyCohortBuilder
    from neurocohort.cohort.overlap import compute_overlap, summarize_cohort

    config_path = _resolve_config_path(ctx.obj["config_path"])

    try:
        config = load_config(config_path)
        builder = NeuropathyCohortBuilder(config)

        records = builder.subject_records()
        click.echo("All subjects:")
        _echo_table(compute_overlap({tag.value: r for tag, r in records.items()}))

        cohort, _stats = builder.build_cohort()
        click.echo("Qualifying subjects:")
        _echo_table(builder.overlap)

        click.echo("Merged cohort:")
        _echo_table(summarize_cohort(cohort))

    except Exception as e:
        _fail(ctx, e)


@cli.command("route")
@click.option("--cohort", "cohort_path", default=None, help="Cohort CSV (default: from config)")
@click.option("--dry-run", is_flag=True, help="Write the routing plan without copying files")
@click.pass_context
def route(ctx, cohort_path, dry_run):
    """Route signal files of an existing cohort into bucket folders."""
    from neurocohort.config.loader import load_config
    from neurocohort.cohort.builder import read_cohort
    from neurocohort.pipeline import route_cohort_files
    from neurocohort.routing import Bucket

    config_path = _resolve_config_path(ctx.obj["config_path"])

    try:
        config = load_config(config_path)
        cohort = read_cohort(cohort_path or config.output.cohort_path)

        routes, counts = route_cohort_files(config, cohort, copy_files=not dry_run)

        n_neuropathy = sum(1 for b in routes.values() if b is Bucket.NEUROPATHY)
        click.echo(click.style(f"Routed {len(routes):,} files", fg="green", bold=True))
        click.echo(f"  neuropathy: {n_neuropathy:,}")
        click.echo(f"  healthy: {len(routes) - n_neuropathy:,}")
        click.echo(f"  Routing plan: {config.output.routes_path}")
        if dry_run:
            click.echo(click.style("Dry run - no files copied", fg="yellow"))
        else:
            for key, value in counts.items():
                click.echo(f"  {key}: {value:,}")

    except Exception as e:
        _fail(ctx, e)


@cli.command("run")
@click.option("--dry-run", is_flag=True, help="Write outputs without copying files")
@click.pass_context
def run(ctx, dry_run):
    """Build the cohort and route the signal files."""
    from neurocohort.config.loader import load_config
    from neurocohort.pipeline import run_pipeline

    config_path = _resolve_config_path(ctx.obj["config_path"])

    try:
        config = load_config(config_path)
        result = run_pipeline(config, copy_files=not dry_run)

        click.echo(click.style("Pipeline complete!", fg="green", bold=True))
        click.echo(f"  Cohort: {result.cohort.height:,} subjects -> {config.output.cohort_path}")
        click.echo(f"  Routed files: {len(result.routes):,} -> {config.output.routes_path}")

    except Exception as e:
        _fail(ctx, e)


@cli.command("init")
@click.option("--output", "-o", default=DEFAULT_CONFIG, help="Output file")
def init_config(output):
    """Create a default neurocohort configuration file."""
    from neurocohort.config.loader import create_default_config

    output_path = create_default_config(output)
    click.echo(f"Created configuration file: {output_path}")
    click.echo("Edit this file to point at your dataset exports.")


@cli.command("version")
def show_version():
    """Show neurocohort version."""
    from neurocohort import __version__

    click.echo(f"neurocohort version {__version__}")


if __name__ == "__main__":
    cli()
