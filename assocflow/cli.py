"""
Command-line interface for AssocFlow
"""

import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__, check_dependencies, get_info
from .config import Config, get_default_config, load_config, save_config
from .core import AssocFlowAnalysis
from .errors import AssocFlowError
from .permutation import designed_overlap_query, make_rng, random_label_set
from .utils import load_labels, setup_logging


class CLIContext:
    def __init__(self):
        self.config_file: Optional[Path] = None
        self.config: Optional[Config] = None
        self.verbose: bool = False
        self.quiet: bool = False

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.verbose else "WARNING" if self.quiet else "INFO"


@click.group()
@click.version_option(__version__)
@click.option(
    "--config", "-c", type=click.Path(exists=True), help="Configuration file path"
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Enable quiet mode (minimal output)")
@click.option("--log-file", type=click.Path(), help="Also write log records to this file")
@click.option("--no-color", is_flag=True, help="Plain console log output")
@click.pass_context
def main(ctx, config, verbose, quiet, log_file, no_color):
    """
    AssocFlow: permutation-based association analysis with normalized z-scores

    Compares a query label set with a reference label set, sweeps over query
    sub-sample sizes and replicates the sweep to assess how stable ZS and
    nZS are at each sample size.
    """
    cli_ctx = CLIContext()
    cli_ctx.verbose = verbose
    cli_ctx.quiet = quiet

    if config:
        cli_ctx.config_file = Path(config)
        cli_ctx.config = load_config(cli_ctx.config_file)

    settings = cli_ctx.config or get_default_config()
    setup_logging(
        level=cli_ctx.log_level,
        log_file=log_file or settings.log_file,
        use_colors=settings.log_colors and not no_color,
    )

    ctx.obj = cli_ctx


@main.command()
def info():
    """Show AssocFlow package information"""

    info_data = get_info()

    click.echo("=" * 50)
    click.echo(f"AssocFlow v{info_data['version']}")
    click.echo("=" * 50)
    click.echo(f"Description: {info_data['description']}")
    click.echo(f"Python version: {info_data['python_version']}")
    click.echo()

    click.echo("Dependency status:")
    for dep, available in check_dependencies().items():
        status = "✓" if available else "✗"
        click.echo(f"  {status} {dep}")


@main.command()
@click.argument("output_file", type=click.Path())
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_config(output_file, force):
    """Initialize a new AssocFlow configuration file (YAML or JSON by suffix)"""

    output_path = Path(output_file)

    if output_path.exists() and not force:
        if not click.confirm(f"File {output_path} already exists. Overwrite?"):
            click.echo("Configuration initialization cancelled.")
            return

    save_config(get_default_config(), output_path)
    click.echo(f"Configuration file created: {output_path}")
    click.echo("Edit this file to customize your analysis parameters.")


def _apply_overrides(config: Config, output, iterations, replicates, seed, jobs):
    if output:
        config.output_dir = str(output)
    if iterations is not None:
        config.permutation["iterations"] = iterations
    if replicates is not None:
        config.permutation["replicate_count"] = replicates
    if seed is not None:
        config.random_seed = seed
    if jobs is not None:
        config.n_threads = jobs


def _run_and_report(config: Config, name, query, reference):
    analysis = AssocFlowAnalysis(config, log_level=None)
    analysis.run_comparison(name, query, reference)

    summary = analysis.summarize(name)
    click.echo(summary.to_string(index=False))

    if config.output_dir:
        files = analysis.save_results(name)
        for kind, path in files.items():
            click.echo(f"Saved {kind}: {path}")


_common_options = [
    click.option("--name", default="comparison", help="Comparison name"),
    click.option("--output", "-o", type=click.Path(), help="Output directory"),
    click.option("--iterations", type=int, help="Permutations per test"),
    click.option("--replicates", type=int, help="Number of replicate sweeps"),
    click.option("--seed", type=int, help="Random seed"),
    click.option("--jobs", "-j", type=int, help="Parallel workers (-1 for all cores)"),
]


def common_options(func):
    for option in reversed(_common_options):
        func = option(func)
    return func


@main.command()
@click.argument("query_file", type=click.Path(exists=True))
@click.argument("reference_file", type=click.Path(exists=True))
@common_options
@click.pass_context
def run(ctx, query_file, reference_file, name, output, iterations, replicates, seed, jobs):
    """Compare QUERY_FILE with REFERENCE_FILE (one integer label per line)"""

    cli_ctx = ctx.obj
    config = cli_ctx.config or get_default_config()
    _apply_overrides(config, output, iterations, replicates, seed, jobs)

    try:
        universe_size = config.permutation["universe_size"]
        query = load_labels(query_file, universe_size=universe_size)
        reference = load_labels(reference_file, universe_size=universe_size)
        _run_and_report(config, name, query, reference)
    except (AssocFlowError, ValueError, FileNotFoundError) as e:
        click.echo(f"Analysis failed: {e}", err=True)
        sys.exit(1)


@main.command()
@click.option("--reference-size", default=1000, show_default=True, type=int)
@click.option("--shared", default=50, show_default=True, type=int,
              help="Query labels taken from the reference")
@click.option("--random", "n_random", default=200, show_default=True, type=int,
              help="Query labels drawn from the universe")
@common_options
@click.pass_context
def simulate(ctx, reference_size, shared, n_random, name, output, iterations,
             replicates, seed, jobs):
    """Run a comparison on a synthetic query with designed overlap"""

    cli_ctx = ctx.obj
    config = cli_ctx.config or get_default_config()
    _apply_overrides(config, output, iterations, replicates, seed, jobs)

    try:
        universe_size = config.permutation["universe_size"]
        rng = make_rng(config.random_seed)
        reference = random_label_set(universe_size, reference_size, rng)
        query = designed_overlap_query(reference, shared, n_random, universe_size, rng)
        click.echo(
            f"Synthetic query: {len(query)} labels, {shared} shared with a "
            f"{len(reference)}-label reference"
        )
        _run_and_report(config, name, query, reference)
    except (AssocFlowError, ValueError) as e:
        click.echo(f"Simulation failed: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
