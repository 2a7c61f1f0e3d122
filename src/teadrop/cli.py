"""
teadrop CLI

Deploy an ERC-20 token on TEA Sepolia and airdrop it to a list of
verified addresses, one transaction at a time.

Commands:
  deploy      - Deploy a new token contract
  distribute  - Send tokens to every address in the recipient file
  balance     - Show native and token balance of the wallet
  whoami      - Show current wallet address
  info        - Show configuration
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from . import __version__
from .chain.abi import ERC20_ABI, decode_result, encode_call
from .chain.rpc import ChainClient
from .errors import TeadropError
from .logs import LEVELS, configure_logging
from .sigil.eth import get_address
from .units import format_units
from .commands._common import build_context, fail, load_settings, print_field


# ============ Banner ============


def _print_banner() -> None:
    click.echo(
        click.style("  ◆ ", fg="cyan")
        + click.style("T E A D R O P", fg="bright_white", bold=True)
        + click.style(f"  v{__version__}", dim=True)
    )
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="teadrop")
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="ENV_FILE",
    default=".env",
    show_default=True,
    help="Configuration file (also receives CONTRACT_ADDRESS after deploy)",
)
@click.option(
    "--log-level",
    envvar="TEADROP_LOG_LEVEL",
    type=click.Choice(LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
)
@click.pass_context
def cli(ctx: click.Context, env_file: Path, log_level: str) -> None:
    """teadrop — ERC-20 deploy & airdrop tool."""
    configure_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["env_file"] = env_file
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .commands.deploy import deploy
from .commands.distribute import distribute

cli.add_command(deploy)
cli.add_command(distribute)


# ============ Identity ============


@cli.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Show current wallet address."""
    settings = load_settings(ctx)
    try:
        click.echo(f"Address: {get_address(settings.private_key or '')}")
    except TeadropError as exc:
        fail(exc)


@cli.command()
@click.pass_context
def balance(ctx: click.Context) -> None:
    """Show native and token balance of the wallet."""
    settings = load_settings(ctx)
    try:
        context = build_context(settings)
        address = context.address
        with ChainClient(settings.rpc_url) as client:
            native = client.get_balance(address)
            click.echo(f"=== Balance (chain {settings.chain_id}) ===")
            click.echo()
            print_field("Wallet:", address, fg="bright_white")
            print_field("Native:", f"{format_units(native, 18)} TEA", fg="bright_white")

            if settings.contract_address:
                token = context.rehydrate(settings.contract_address, ERC20_ABI, client=client).address
                decimals = int(
                    decode_result(
                        ERC20_ABI, "decimals", client.call(token, encode_call(ERC20_ABI, "decimals", []))
                    )
                )
                symbol = decode_result(
                    ERC20_ABI, "symbol", client.call(token, encode_call(ERC20_ABI, "symbol", []))
                )
                raw = decode_result(
                    ERC20_ABI,
                    "balanceOf",
                    client.call(token, encode_call(ERC20_ABI, "balanceOf", [address])),
                )
                print_field("Token:", f"{format_units(raw, decimals)} {symbol}", fg="green", bold=True)
            else:
                print_field("Token:", "not deployed (run: teadrop deploy)", fg="yellow")
    except TeadropError as exc:
        fail(exc)
    click.echo()


# ============ Info ============


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show configuration."""
    _print_banner()
    settings = load_settings(ctx, require_key=False)

    click.secho("  Settings ───────────────────────────────", fg="cyan")
    click.echo()

    if settings.private_key:
        try:
            address = get_address(settings.private_key)
            print_field("Wallet:", address, fg="bright_white")
        except TeadropError as exc:
            print_field("Wallet:", str(exc), fg="red")
    else:
        print_field("Wallet:", "MAIN_PRIVATE_KEY not set", fg="yellow")

    print_field("RPC:", settings.rpc_url)
    print_field("Chain:", str(settings.chain_id))
    print_field("Token:", settings.contract_address or "not deployed", fg=None if settings.contract_address else "yellow")
    print_field("Artifact:", str(settings.artifact_path))
    print_field("Recipients:", str(settings.recipients_file))
    print_field("Delay:", f"{settings.tx_delay:g}s between transactions")
    click.echo()


# ============ Entry Points ============


def main() -> None:
    """teadrop CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass  # Fallback: old Python or non-tty
    cli()


if __name__ == "__main__":
    main()
