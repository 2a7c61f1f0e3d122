"""
Deploy - Create the ERC-20 token contract.

Loads the compiled CustomToken artifact (optionally compiling it first
with hardhat), deploys it with the configured gas ceiling and records the
new address as CONTRACT_ADDRESS in the .env file.
"""

from __future__ import annotations

from typing import Optional

import click

from ..chain.abi import compile_contracts, load_artifact
from ..chain.receipts import ConfirmationPoller
from ..chain.rpc import ChainClient
from ..config import save_env_value
from ..engine.deployment import DeploymentCoordinator
from ..errors import TeadropError
from ..units import parse_decimals, parse_units
from ._common import build_context, fail, load_settings, print_field, print_header


@click.command()
@click.option("--name", prompt="Enter Contract Name", help="Token name")
@click.option("--symbol", prompt="Enter Contract Symbol", help="Token symbol")
@click.option(
    "--decimals",
    prompt="Enter Decimals",
    default="18",
    show_default=True,
    help="Token decimals",
)
@click.option(
    "--total-supply",
    prompt="Enter Total Supply (e.g., 100000)",
    help="Total supply in whole tokens",
)
@click.option(
    "--compile/--no-compile",
    "compile_first",
    default=False,
    help="Run 'npx hardhat compile' before loading the artifact",
)
@click.option("--gas-limit", type=int, default=None, help="Gas limit for the creation transaction")
@click.pass_context
def deploy(
    ctx: click.Context,
    name: str,
    symbol: str,
    decimals: str,
    total_supply: str,
    compile_first: bool,
    gas_limit: Optional[int],
) -> None:
    """
    Deploy a new ERC-20 token contract.

    \b
    Examples:
      teadrop deploy
      teadrop deploy --name "Tea Token" --symbol TEAT --decimals 18 --total-supply 100000
    """
    settings = load_settings(ctx)

    try:
        parse_units(total_supply, parse_decimals(decimals), label="Total Supply")
    except TeadropError as exc:
        fail(exc)

    print_header("Deploy Token")
    print_field("Name:", name, fg="bright_white")
    print_field("Symbol:", symbol, fg="bright_white")
    print_field("Decimals:", decimals)
    print_field("Supply:", total_supply)
    click.echo()

    def artifact_source():
        if compile_first:
            compile_contracts()
        return load_artifact(settings.artifact_path)

    def persist(address: str) -> None:
        path = save_env_value("CONTRACT_ADDRESS", address, settings.env_path)
        click.echo(click.style("  .env updated: ", dim=True) + f"CONTRACT_ADDRESS={address} ({path})")

    try:
        context = build_context(settings)
        with ChainClient(settings.rpc_url) as client:
            coordinator = DeploymentCoordinator(
                context,
                client,
                artifact_source,
                persist=persist,
                gas_policy=settings.gas_policy(),
                poller=ConfirmationPoller(
                    client,
                    poll_interval=settings.poll_interval,
                    timeout=settings.confirm_timeout,
                ),
                gas_limit=gas_limit or settings.deploy_gas_limit,
            )
            contract = coordinator.deploy(name, symbol, decimals, total_supply)
    except TeadropError as exc:
        fail(exc)

    click.echo()
    click.secho("  Contract deployed!", fg="green", bold=True)
    print_field("Address:", contract.address, fg="bright_white")
    click.echo()
