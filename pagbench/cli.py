#!/usr/bin/env python3
"""
Command-Line Interface for the aggregation gateway load generator.

Usage:
    # Push one labeled iteration to the gateway in PAG_HOST
    python3 -m pagbench run

    # Push 20 unlabeled iterations with a fixed seed
    python3 -m pagbench run --host http://localhost:80 --mode unlabeled -n 20 --seed 7

    # Print a payload without sending it
    python3 -m pagbench render --seed 7
"""

import logging
import random
import sys
from pathlib import Path
from typing import Optional

import click
import httpx
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import VALID_METHODS, VALID_ROUTING_MODES, ConfigValidationError, load_config
from .generator import (
    COUNTER_BOUNDS,
    GAUGE_BOUNDS,
    JOBS,
    LABEL_VALUES,
    LABELS,
    REQUESTS_TOTAL_BOUNDS,
    WorkloadGenerator,
    draw_samples,
    render_payload,
)

# Set up logging with rich handler
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[RichHandler(rich_tracebacks=True, show_time=False)],
)
logger = logging.getLogger(__name__)
console = Console()


class CLIContext:
    """Context object for CLI commands."""

    def __init__(self):
        self.verbose = False
        self.config_path: Optional[Path] = None


pass_context = click.make_pass_decorator(CLIContext, ensure=True)


@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output"
)
@click.option(
    "-c", "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file"
)
@click.version_option(version="0.1.0", prog_name="pagbench")
@pass_context
def cli(ctx: CLIContext, verbose: bool, config: Optional[Path]):
    """
    Synthetic push traffic for Prometheus aggregation gateway benchmarks.
    """
    ctx.verbose = verbose
    ctx.config_path = config

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose mode enabled")


@cli.command()
@click.option(
    "--host",
    type=str,
    default=None,
    help="Gateway base URL (defaults to $PAG_HOST)"
)
@click.option(
    "--mode", "-m",
    type=click.Choice(VALID_ROUTING_MODES, case_sensitive=False),
    default=None,
    help="Push to the labeled or the unlabeled endpoint"
)
@click.option(
    "--method",
    type=click.Choice(VALID_METHODS, case_sensitive=False),
    default=None,
    help="HTTP method for the push"
)
@click.option(
    "--iterations", "-n",
    type=click.IntRange(min=1),
    default=1,
    help="Number of sequential iterations"
)
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Request timeout in seconds"
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for the random source"
)
@click.option(
    "--content-type",
    type=str,
    default=None,
    help="Content-Type header sent with the payload"
)
@click.option(
    "--auth",
    type=str,
    default=None,
    help="Basic auth account as user=password"
)
@pass_context
def run(
    ctx: CLIContext,
    host: Optional[str],
    mode: Optional[str],
    method: Optional[str],
    iterations: int,
    timeout: Optional[float],
    seed: Optional[int],
    content_type: Optional[str],
    auth: Optional[str],
):
    """
    Push synthetic metrics to the gateway.

    Exits 0 when every iteration was accepted, 1 otherwise.
    """
    try:
        config = load_config(
            config_path=ctx.config_path,
            base_host=host,
            routing_mode=mode,
            method=method,
            content_type=content_type,
            auth=auth,
            timeout_seconds=timeout,
        )
    except (ConfigValidationError, FileNotFoundError, yaml.YAMLError) as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {e}", style="red")
        for error in getattr(e, "errors", []):
            console.print(f"  • {error}")
        sys.exit(2)

    console.print(f"\n[bold blue]Aggregation Gateway Push[/bold blue]")
    console.print(f"Host: [cyan]{config.base_host}[/cyan]")
    console.print(f"Mode: [cyan]{config.routing_mode.value}[/cyan]")

    rng = random.Random(seed)
    generator = WorkloadGenerator(config)

    results = []
    with httpx.Client(timeout=config.timeout_seconds) as client:
        for _ in range(iterations):
            results.append(generator.run_iteration(rng=rng, client=client))

    _display_results(results)

    accepted = sum(1 for r in results if r.accepted)
    sys.exit(0 if accepted == len(results) else 1)


def _display_results(results):
    """Display iteration results in a formatted table."""
    table = Table(title="Push Results", show_header=True, header_style="bold magenta")
    table.add_column("URL", style="cyan")
    table.add_column("Status", justify="right")
    table.add_column("Accepted")
    table.add_column("Time", justify="right")

    for result in results:
        status = str(result.status_code) if result.status_code is not None else result.error
        accepted = "[green]✓[/green]" if result.accepted else "[red]✗[/red]"
        table.add_row(result.target.url, status, accepted, f"{result.elapsed_seconds:.3f}s")

    console.print(table)

    accepted_count = sum(1 for r in results if r.accepted)
    style = "green" if accepted_count == len(results) else "red"
    console.print(f"[{style}]{accepted_count}/{len(results)} accepted[/{style}]")


@cli.command()
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed for the random source"
)
def render(seed: Optional[int]):
    """
    Print one rendered payload without sending it.
    """
    payload = render_payload(draw_samples(random.Random(seed)))
    click.echo(payload, nl=False)


@cli.command()
def info():
    """
    Show routing modes, candidate path segments and sample bounds.
    """
    console.print(f"\n[bold blue]Aggregation Gateway Push Generator[/bold blue]")

    console.print("\n[bold]Routing Modes:[/bold]")
    console.print("  • labeled    /metrics/job/{job}/{label}/{value}")
    console.print("  • unlabeled  /metrics/")

    console.print("\n[bold]Path Segments:[/bold]")
    console.print(f"  jobs:   {', '.join(JOBS)}")
    console.print(f"  labels: {', '.join(LABELS)}")
    console.print(f"  values: {', '.join(LABEL_VALUES)}")

    table = Table(title="Sample Bounds", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Range", justify="right")
    table.add_row("some_metric", f"[{COUNTER_BOUNDS[0]}, {COUNTER_BOUNDS[1]})")
    table.add_row("another_metric", f"[{GAUGE_BOUNDS[0]}, {GAUGE_BOUNDS[1]})")
    table.add_row(
        "k6_http_requests_total",
        f"[{REQUESTS_TOTAL_BOUNDS[0]}, {REQUESTS_TOTAL_BOUNDS[1]})",
    )
    console.print(table)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
