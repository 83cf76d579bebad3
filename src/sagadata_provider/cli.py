"""Saga Data provider CLI (sagadata).

Drives single lifecycle operations against the API and prints the
resulting record as YAML, so it can be stored by whatever keeps state.

Usage:
    sagadata create network.yaml          # Create and wait until settled
    sagadata read private_network <id>    # Read current remote state
    sagadata update network.yaml          # Partial update (file must carry id)
    sagadata delete private_network <id>  # Delete and wait until gone
    sagadata cluster-credentials <id>     # Cluster details + credentials

Provider settings come from SAGADATA_ENDPOINT, SAGADATA_TOKEN and
SAGADATA_POLLING_INTERVAL.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import click
import yaml

from .config import Config, ConfigurationError
from .engine import OperationOutcome
from .errors import ContractViolationError
from .logging_config import setup_logging
from .provider import Provider
from .spec_loader import KIND_TO_CONFIG, SpecLoadError, load_resource
from .timeouts import OperationContext, Timeouts

KIND_CHOICE = click.Choice(sorted(KIND_TO_CONFIG))


def load_config() -> Config:
    """Load provider configuration from the environment.

    Raises:
        click.ClickException: If the configuration is invalid.
    """
    try:
        return Config.from_env()
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e


def run_operation(
    operation: Callable[[Provider, OperationContext], Awaitable[OperationOutcome[Any]]],
) -> None:
    """Run one operation and report its outcome.

    The record is printed even when the operation failed, so partial
    progress can still be stored.

    Raises:
        click.ClickException: If the operation failed.
    """
    config = load_config()

    async def _run() -> OperationOutcome[Any]:
        with Provider(config) as provider:
            with OperationContext.background() as ctx:
                return await operation(provider, ctx)

    try:
        outcome = asyncio.run(_run())
    except (ContractViolationError, ConfigurationError) as e:
        raise click.ClickException(str(e)) from e

    if outcome.record is not None:
        click.echo(yaml.safe_dump(outcome.record.model_dump(mode="json"), sort_keys=True))

    if outcome.error is not None:
        raise click.ClickException(str(outcome.error))


def _load(path: Path) -> Any:
    try:
        return load_resource(path)
    except SpecLoadError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log polling at debug level.")
@click.version_option(version="0.1.0", prog_name="sagadata")
def cli(verbose: bool) -> None:
    """Saga Data provider - drive resources to their desired state."""
    setup_logging(logging.DEBUG if verbose else logging.INFO, stream=sys.stderr)


@cli.command()
@click.argument("resource_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def create(resource_file: Path) -> None:
    """Create the resource in RESOURCE_FILE and wait until it settles."""
    spec = _load(resource_file)
    run_operation(lambda provider, ctx: provider.engine_for(spec.kind).create(ctx, spec.desired))


@cli.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("identity")
@click.option("--timeout", default=None, help="Read timeout (e.g. 30s, 5m).")
def read(kind: str, identity: str, timeout: str | None) -> None:
    """Read resource IDENTITY of KIND."""
    timeouts = Timeouts(read=timeout)
    run_operation(lambda provider, ctx: provider.engine_for(kind).read(ctx, identity, timeouts))


@cli.command()
@click.argument("resource_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--id", "identity", default=None, help="Resource identity (overrides file).")
def update(resource_file: Path, identity: str | None) -> None:
    """Apply the attributes set in RESOURCE_FILE as a partial update."""
    spec = _load(resource_file)
    target = identity or spec.id
    if not target:
        raise click.ClickException("update requires an identity: set 'id' in the file or --id")
    run_operation(
        lambda provider, ctx: provider.engine_for(spec.kind).update(ctx, target, spec.desired)
    )


@cli.command()
@click.argument("kind", type=KIND_CHOICE)
@click.argument("identity")
@click.option("--timeout", default=None, help="Delete timeout (e.g. 20m).")
def delete(kind: str, identity: str, timeout: str | None) -> None:
    """Delete resource IDENTITY of KIND and wait until it is gone."""
    timeouts = Timeouts(delete=timeout)
    run_operation(lambda provider, ctx: provider.engine_for(kind).delete(ctx, identity, timeouts))
    click.echo(f"Deleted {kind} {identity}")


@cli.command("cluster-credentials")
@click.argument("identity")
def cluster_credentials(identity: str) -> None:
    """Show Kubernetes cluster IDENTITY with its kubeconfig and join command."""
    run_operation(lambda provider, ctx: provider.read_kubernetes_cluster(ctx, identity))


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
