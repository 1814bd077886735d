"""
Command-line memo encryption.

Example:
    memo encode --key 5K... --to STM7... "#meet at noon"
    memo decode --key 5J... "#2Ab9..."
"""

from __future__ import annotations

import logging
from typing import Optional

import click

from memo_ledger import memo
from memo_ledger.errors import MemoError
from memo_ledger.keys import PrivateKey, PublicKey
from memo_ledger.settings import Settings

logger = logging.getLogger(__name__)


def _private_key(wif: str) -> PrivateKey:
    try:
        return PrivateKey.from_wif(wif)
    except MemoError as e:
        raise click.BadParameter(str(e), param_hint="--key") from e

def _public_key(s: str, prefix: str) -> PublicKey:
    try:
        return PublicKey.from_string(s, prefix=prefix)
    except MemoError as e:
        raise click.BadParameter(str(e), param_hint="--to") from e


@click.group()
@click.pass_context
def cli(ctx: click.Context):
    """Encrypt and decrypt transaction memos."""
    settings = Settings.load()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = settings


@cli.command()
@click.option("--key", envvar="MEMO_PRIVATE_KEY", required=True, help="Sender's private memo key (WIF)")
@click.option("--to", "to", required=True, help="Recipient's public memo key")
@click.option("--nonce", type=click.IntRange(0, 2**64 - 1), default=None, help="Fixed nonce (reproducible output)")
@click.argument("text")
@click.pass_obj
def encode(settings: Settings, key: str, to: str, nonce: Optional[int], text: str):
    """
    Encrypt TEXT for the recipient.

    Only text starting with '#' is encrypted; anything else is echoed back.
    """
    sender = _private_key(key)
    recipient = _public_key(to, settings.ADDRESS_PREFIX)
    try:
        click.echo(memo.encode(sender, recipient, text, nonce=nonce))
    except MemoError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.option("--key", envvar="MEMO_PRIVATE_KEY", required=True, help="Sender's or recipient's private memo key (WIF)")
@click.argument("text")
@click.pass_obj
def decode(settings: Settings, key: str, text: str):
    """Decrypt an encrypted memo with either party's key."""
    reader = _private_key(key)
    try:
        click.echo(memo.decode(reader, text, strict_framing=settings.STRICT_FRAMING))
    except MemoError as e:
        logger.debug(f"Decode failed: {type(e).__name__}")
        raise click.ClickException(str(e)) from e


@cli.command()
@click.argument("text")
@click.pass_obj
def inspect(settings: Settings, text: str):
    """Show the envelope fields of an encrypted memo without decrypting it."""
    try:
        envelope = memo.parse(text)
    except MemoError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"from:      {envelope.from_key.to_string(settings.ADDRESS_PREFIX)}")
    click.echo(f"to:        {envelope.to.to_string(settings.ADDRESS_PREFIX)}")
    click.echo(f"nonce:     {envelope.nonce}")
    click.echo(f"check:     {envelope.check}")
    click.echo(f"encrypted: {len(envelope.encrypted)} bytes")


@cli.command()
@click.option("--key", envvar="MEMO_PRIVATE_KEY", required=True, help="Private memo key (WIF)")
@click.pass_obj
def pubkey(settings: Settings, key: str):
    """Print the public key for a private memo key."""
    click.echo(_private_key(key).public_key(prefix=settings.ADDRESS_PREFIX).to_string())


@cli.command()
@click.option("--username", required=True, help="Account name")
@click.option("--password", prompt=True, hide_input=True, help="Account master password")
@click.option("--role", default=None, help="Key role (default: MEMO_KEY_ROLE or 'memo')")
@click.pass_obj
def keygen(settings: Settings, username: str, password: str, role: Optional[str]):
    """Derive a key pair from account credentials."""
    priv = PrivateKey.from_login(username, password, role=role or settings.KEY_ROLE)
    click.echo(f"private: {priv.to_wif()}")
    click.echo(f"public:  {priv.public_key(prefix=settings.ADDRESS_PREFIX).to_string()}")


def main():
    cli()


if __name__ == "__main__":
    main()
