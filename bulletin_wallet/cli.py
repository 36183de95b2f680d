"""
bulletin-wallet - command line entry point

Commands:
  serve         Wait for wallet setup if needed, then run the wallet JSON-RPC service
  create        Create a wallet from a passphrase (and optional hex seed)
  newaddress    Derive and print a new address
"""
from __future__ import annotations

import threading
from dataclasses import replace
from pathlib import Path

import click

from bulletin_wallet import __version__
from bulletin_wallet.chain.client import RPCChainClient
from bulletin_wallet.core import WalletConfig, WalletError, PassphraseTooShort, SetupTimeout, configure_logging, \
    get_logger
from bulletin_wallet.database.tx_store import StoreFlusher
from bulletin_wallet.rpc.bootstrap import wait_for_setup
from bulletin_wallet.rpc.handlers import HANDLERS, HandlerContext
from bulletin_wallet.rpc.server import RPCDispatcher, RPCServer
from bulletin_wallet.wallet.wallet import Wallet

logger = get_logger(__name__)


def _unlock(wallet: Wallet, passphrase: str | None):
    if not wallet.manager.is_locked:
        return
    if passphrase is None:
        passphrase = click.prompt("Wallet passphrase", hide_input=True)
    try:
        wallet.unlock(passphrase.encode("utf-8"))
    except WalletError as e:
        raise click.ClickException(str(e))


@click.group()
@click.version_option(version=__version__, prog_name="bulletin-wallet")
@click.option("--datadir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Wallet data directory (overrides BULLETIN_DATA_DIR).")
@click.option("--network", type=click.Choice(["mainnet", "testnet"]), default=None,
              help="Network (overrides BULLETIN_NETWORK).")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default=None, help="Log level (overrides BULLETIN_LOG_LEVEL).")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Also write log records to this file (overrides BULLETIN_LOG_FILE).")
@click.pass_context
def main(ctx: click.Context, datadir: Path | None, network: str | None, log_level: str | None,
         log_file: Path | None):
    """Bulletin wallet - fund, sign and broadcast board messages."""
    config = WalletConfig.from_env()
    overrides = {}
    if datadir is not None:
        overrides["data_dir"] = datadir
    if network is not None:
        overrides["network"] = network
    if log_level is not None:
        overrides["log_level"] = log_level.upper()
    if log_file is not None:
        overrides["log_file"] = log_file
    config = replace(config, **overrides)
    configure_logging(config.log_level, config.log_file)
    ctx.obj = config


@main.command()
@click.option("--passphrase", envvar="BULLETIN_PASSPHRASE", default=None,
              help="Unlock passphrase for an existing wallet. Prompted for if not given.")
@click.option("--flush-interval", type=float, default=10.0, show_default=True,
              help="Seconds between store flushes.")
@click.pass_obj
def serve(config: WalletConfig, passphrase: str | None, flush_interval: float):
    """Run the wallet service, serving the bootstrap gate first if no wallet exists."""
    try:
        wallet = wait_for_setup(config)
    except (SetupTimeout, WalletError) as e:
        raise click.ClickException(str(e))
    _unlock(wallet, passphrase)

    chain = RPCChainClient(config.chain_server_url, config.chain_user, config.chain_password)
    context = HandlerContext(wallet, chain, config.store_retries)
    server = RPCServer(RPCDispatcher(HANDLERS, context), config.rpc_host, config.listen_port, name="wallet")
    flusher = StoreFlusher(wallet.store, flush_interval)

    flusher.start()
    server.start()
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        click.echo("Shutting down")
    finally:
        server.shutdown()
        flusher.stop()


@main.command()
@click.option("--passphrase", prompt=True, hide_input=True, confirmation_prompt=True,
              help="Passphrase protecting the wallet seed.")
@click.option("--seed", default=None, help="Hex seed (16 to 64 bytes). Random if omitted.")
@click.pass_obj
def create(config: WalletConfig, passphrase: str, seed: str | None):
    """Create a new wallet and print its first address."""
    try:
        seed_bytes = bytes.fromhex(seed) if seed is not None else None
    except ValueError:
        raise click.BadParameter("seed must be hex", param_hint="--seed")
    try:
        wallet = Wallet.create(config, passphrase.encode("utf-8"), seed_bytes)
    except (WalletError, PassphraseTooShort, ValueError) as e:
        raise click.ClickException(str(e))
    click.echo(wallet.manager.addresses()[0].encode())


@main.command()
@click.option("--passphrase", envvar="BULLETIN_PASSPHRASE", default=None,
              help="Unlock passphrase. Prompted for if not given.")
@click.pass_obj
def newaddress(config: WalletConfig, passphrase: str | None):
    """Derive a new address and print it."""
    if not config.wallet_exists():
        raise click.ClickException(f"No wallet found in {config.network_dir}")
    try:
        wallet = Wallet.open(config)
    except WalletError as e:
        raise click.ClickException(str(e))
    _unlock(wallet, passphrase)
    with wallet.hold_unlock():
        click.echo(wallet.manager.next_address().encode())


if __name__ == "__main__":
    main()
