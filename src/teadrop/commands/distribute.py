"""
Distribute - Send the token to every address in the recipient file.

Transfers are sent one at a time with a pause between them. A failed
transfer is reported and skipped; the summary lists every failure so it
can be reconciled by hand. Nothing is checkpointed: running the command
again sends to the whole list again.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click

from ..chain.abi import ERC20_ABI
from ..chain.receipts import ConfirmationPoller
from ..chain.rpc import ChainClient
from ..engine.distribution import DistributionCoordinator, DistributionReport
from ..errors import NotDeployedError, TeadropError
from ..recipients import read_recipients
from ._common import build_context, fail, load_settings, print_field, print_header


@click.command()
@click.option(
    "--amount",
    prompt="Enter the token amount per transaction (e.g., 0.001)",
    help="Tokens per recipient, in whole-token units",
)
@click.option(
    "--recipients",
    "recipients_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Recipient file (default: RECIPIENTS_FILE or address_KYC.txt)",
)
@click.option("--contract", "contract_address", default=None, help="Token address (default: CONTRACT_ADDRESS)")
@click.option("--delay", type=float, default=None, help="Seconds between transactions (default: 420)")
@click.option("--json", "as_json", is_flag=True, help="Print the final report as JSON")
@click.pass_context
def distribute(
    ctx: click.Context,
    amount: str,
    recipients_file: Optional[Path],
    contract_address: Optional[str],
    delay: Optional[float],
    as_json: bool,
) -> None:
    """
    Send tokens to the verified (KYC) addresses.

    \b
    Examples:
      teadrop distribute --amount 0.001
      teadrop distribute --amount 5 --recipients batch2.txt --delay 60
    """
    settings = load_settings(ctx)
    address = contract_address or settings.contract_address
    path = recipients_file or settings.recipients_file

    try:
        if not address:
            raise NotDeployedError(
                "Contract not deployed. Run 'teadrop deploy' first or set CONTRACT_ADDRESS."
            )
        context = build_context(settings)
        with ChainClient(settings.rpc_url) as client:
            context.rehydrate(address, ERC20_ABI, client=client)
            coordinator = DistributionCoordinator(
                context,
                client,
                lambda: read_recipients(path),
                gas_policy=settings.gas_policy(),
                poller=ConfirmationPoller(
                    client,
                    poll_interval=settings.poll_interval,
                    timeout=settings.confirm_timeout,
                ),
                retry_policy=settings.retry_policy(),
                tx_delay=settings.tx_delay if delay is None else delay,
            )
            report = coordinator.run(amount)
    except TeadropError as exc:
        fail(exc)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _print_report(report)

    if report.failed:
        sys.exit(1)


def _print_report(report: DistributionReport) -> None:
    click.echo()
    print_header("Distribution Summary")
    print_field("Attempted:", str(report.attempted), fg="bright_white")
    print_field("Succeeded:", str(report.succeeded), fg="green")
    print_field("Failed:", str(report.failed), fg="red" if report.failed else None)
    click.echo()

    for outcome in report.outcomes:
        click.echo(
            click.style("  ok    ", fg="green")
            + f"{outcome.recipient}  {outcome.tx_hash}"
            + click.style(f"  nonce={outcome.nonce} attempts={outcome.attempts}", dim=True)
        )
    for failure in report.failures:
        click.echo(
            click.style("  FAIL  ", fg="red")
            + f"{failure.recipient}  {failure.tx_hash or '-'}"
            + click.style(f"  {failure.error_type}: {failure.message}", dim=True)
        )
    click.echo()
