"""Click CLI for operating the faucet."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from lotus_faucet.audit.logger import validate_audit_chain
from lotus_faucet.chain.dispatcher import TokenDispatcher
from lotus_faucet.config import FaucetSettings
from lotus_faucet.errors import InternalError, UserFacingError
from lotus_faucet.interactions.validator import ParameterValidator

logger = logging.getLogger(__name__)


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Root log level.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str) -> None:
    """Lotus testnet token faucet."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj.setdefault("settings", FaucetSettings.from_env())


@cli.command()
@click.option("--host", default="127.0.0.1", help="Bind address.")
@click.option("--port", default=8000, type=int, help="Bind port.")
def serve(host: str, port: int) -> None:
    """Serve the interaction webhook."""
    import uvicorn

    uvicorn.run(
        "lotus_faucet.server.app:create_app_from_env",
        factory=True,
        host=host,
        port=port,
    )


@cli.command()
@click.argument("address")
@click.option("--network", default="goerli", help="Target network.")
@click.option("--requester", default="cli-operator", help="Identity recorded for the drip.")
@click.pass_context
def dispense(ctx: click.Context, address: str, network: str, requester: str) -> None:
    """Send the payment and collateral drips to ADDRESS."""
    settings: FaucetSettings = ctx.obj["settings"]
    dispatcher: TokenDispatcher = ctx.obj.get("dispatcher") or TokenDispatcher(settings)
    try:
        request = ParameterValidator(settings.supported_network).check(address, network, requester)
        payment, collateral = asyncio.run(dispatcher.dispense(request))
    except (UserFacingError, InternalError) as exc:
        raise click.ClickException(str(exc)) from exc
    except Exception as exc:
        logger.exception("Dispense to %s failed", address)
        raise click.ClickException("Dispense failed; see the log for details") from exc

    output = [o.model_dump(mode="json") for o in (payment, collateral)]
    click.echo(json.dumps(output, indent=2))


@cli.group("audit")
def audit_group() -> None:
    """Inspect the audit trail."""


@audit_group.command("verify")
@click.argument("log_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def audit_verify(log_path: Path) -> None:
    """Check the hash chain of an audit log."""
    result = validate_audit_chain(log_path)
    if not result.valid:
        click.echo(f"Chain broken at line {result.broken_at_line}", err=True)
        sys.exit(1)
    click.echo(f"Chain intact ({result.entries} entries)")
