"""Tessera CLI - Main Entry Point."""

import asyncio
import logging
from typing import Optional

import click

from . import __version__, __cli_name__
from tessera.config import SessionConfig, create_keyspace, load_session_config
from tessera.faults import Fault
from tessera.sessions import TicketSessionManager


def success(message: str) -> None:
    """Print success message in green."""
    click.echo(click.style(message, fg="green"))


def error(message: str) -> None:
    """Print error message in red on stderr."""
    click.echo(click.style(message, fg="red"), err=True)


def kv(key: str, value: str, key_width: int = 22) -> None:
    """Print an aligned key-value pair."""
    click.echo(f"  {key.ljust(key_width)}{click.style(str(value), fg='cyan')}")


def _run(ctx: click.Context, operation):
    """Run ``operation(manager)`` on a fresh manager; faults exit with status 1."""
    config: SessionConfig = ctx.obj["config"]

    async def _main():
        keyspace = create_keyspace(config)
        try:
            manager = TicketSessionManager(keyspace, config)
            return await operation(manager)
        finally:
            close = getattr(keyspace, "close", None)
            if close is not None:
                await close()

    try:
        return asyncio.run(_main())
    except Fault as fault:
        error(f"{fault.code}: {fault.message}")
        ctx.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--env-file', type=click.Path(dir_okay=False), default=None, help='Load TESSERA_* settings from a .env file')
@click.option('--backend', type=click.Choice(['memory', 'redis']), default=None, help='Record store backend')
@click.option('--redis-url', type=str, default=None, help='Redis URL for the redis backend')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, env_file: Optional[str], backend: Optional[str], redis_url: Optional[str], verbose: bool):
    """Issue and resolve session tickets and relay tokens.

    \b
    Quick start:
      tessera --backend redis provision
      tessera --backend redis issue 100
      tessera --backend redis token <ticket>
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    overrides = {}
    if backend:
        overrides["backend"] = backend
    if redis_url:
        overrides["redis_url"] = redis_url

    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_session_config(env_file=env_file, overrides=overrides)
    except Fault as fault:
        error(f"{fault.code}: {fault.message}")
        ctx.exit(1)


@cli.command('config')
@click.pass_context
def show_config(ctx):
    """Print the resolved configuration."""
    for key, value in ctx.obj["config"].to_dict().items():
        kv(key, value)


@cli.command('provision')
@click.pass_context
def provision_cmd(ctx):
    """Create the session and ticket families if missing."""
    handles = _run(ctx, lambda manager: manager.ready())
    success(f"Ready: store={handles.store.name} ticket={handles.ticket.name}")


@cli.command('issue')
@click.argument('user_id')
@click.option('--ttl', type=click.IntRange(min=1), default=None, help='Ticket TTL in seconds')
@click.pass_context
def issue(ctx, user_id: str, ttl: Optional[int]):
    """Issue a ticket for USER_ID."""
    click.echo(_run(ctx, lambda manager: manager.create_ticket(user_id, ttl)))


@cli.command('whoami')
@click.argument('ticket')
@click.pass_context
def whoami(ctx, ticket: str):
    """Print the user id bound to TICKET."""
    user_id = _run(ctx, lambda manager: manager.get_id(ticket))
    if user_id is None:
        error("Unknown or expired ticket")
        ctx.exit(1)
    click.echo(user_id)


@cli.command('token')
@click.argument('ticket')
@click.pass_context
def token(ctx, ticket: str):
    """Create a relay token for TICKET."""
    click.echo(_run(ctx, lambda manager: manager.create_token(ticket)))


@cli.command('exchange')
@click.argument('token')
@click.pass_context
def exchange(ctx, token: str):
    """Exchange TOKEN for its ticket."""
    click.echo(_run(ctx, lambda manager: manager.exchange_token(token)))


def main():
    """Entry point for `tessera` command."""
    cli(obj={})


if __name__ == '__main__':
    main()
