"""
Command Line Interface for the browser sync coordinator
"""
import asyncio
import sys
import uuid
import aiohttp
import click
from browser_sync.core.config import Config
from browser_sync.client.sync_client import SyncClient, SyncClientError
from browser_sync.server.app import SyncServer
from browser_sync.utils.logger import setup_logging

STATUS_ICONS = {
    'leader': '👑',
    'online': '🟢',
    'warning': '🟡',
}


def _load_config(config_file):
    if config_file:
        return Config.load_from_file(config_file)
    return Config.from_env()


def _run(coro):
    try:
        return asyncio.run(coro)
    except (SyncClientError, aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option('--config', '-c', help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, config, verbose):
    """Browser sync coordinator CLI"""
    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose


@cli.command()
@click.option('--host', default=None, help='Host to bind to')
@click.option('--port', default=None, type=int, help='Port to bind to')
@click.option('--log-file', default=None, help='Also write logs to this file')
@click.pass_context
def serve(ctx, host, port, log_file):
    """Start the sync server"""
    config = _load_config(ctx.obj['config_file'])
    if host:
        config.server.host = host
    if port:
        config.server.port = port
    if log_file:
        config.logging.file = log_file

    level = 'DEBUG' if ctx.obj['verbose'] else config.logging.level
    setup_logging(level, config.logging.file, config.logging.format)

    server = SyncServer(config)

    async def run_forever():
        await server.start()
        try:
            await asyncio.Event().wait()
        finally:
            await server.stop()

    try:
        asyncio.run(run_forever())
    except KeyboardInterrupt:
        click.echo("\nShutting down sync server...")


@cli.command()
@click.option('--server', default='http://localhost:3000', help='Sync server URL')
def status(server):
    """Show leader and connected browsers"""
    async def get_status():
        client = SyncClient(server)
        health = await client.health()
        browsers = await client.get_browsers()
        return health, browsers

    health, browsers = _run(get_status())

    click.echo("Server Status:")
    click.echo(f"  Status: {health.get('status', 'unknown')}")
    click.echo(f"  Version: {health.get('version', '?')}")
    click.echo(f"  Leader: {health.get('leader', 'none')}")

    browser_list = browsers.get('browsersList', [])
    click.echo(f"\nBrowsers ({browsers.get('browsersOnline', 0)}/{browsers.get('totalBrowsers', 0)}):")
    if browser_list:
        for browser in browser_list:
            icon = STATUS_ICONS.get(browser['status'], '🔴')
            click.echo(f"  {icon} {browser['id']} tf={browser['tf']} last seen {browser['lastSeen']}")
    else:
        click.echo("  No browsers connected")


@cli.command()
@click.option('--server', default='http://localhost:3000', help='Sync server URL')
@click.option('--browser-id', default=None, help='Browser id to claim as (random if omitted)')
@click.option('--force', is_flag=True, help='Take over even if a leader is active')
@click.option('--tf', default=None, help='Interval hint to report')
def claim(server, browser_id, force, tf):
    """Claim leadership"""
    browser_id = browser_id or f"cli-{uuid.uuid4().hex}"
    client = SyncClient(server, browser_id=browser_id, tf=tf)
    result = _run(client.claim_leader(force=force))

    if result.get('success'):
        click.echo(f"Leadership acquired by {browser_id}")
    else:
        click.echo(f"Claim rejected: {result.get('reason', 'unknown reason')}")
        sys.exit(2)


@cli.command()
@click.option('--server', default='http://localhost:3000', help='Sync server URL')
@click.option('--browser-id', required=True, help='Browser id to heartbeat as')
@click.option('--leader', is_flag=True, help='Also renew leadership if this browser is leader')
def heartbeat(server, browser_id, leader):
    """Send one heartbeat"""
    client = SyncClient(server, browser_id=browser_id)
    result = _run(client.heartbeat(is_leader=leader))
    click.echo(f"Heartbeat sent ({result.get('totalBrowsers', 0)} browsers connected)")


@cli.command()
@click.option('--server', default='http://localhost:3000', help='Sync server URL')
@click.confirmation_option(prompt='Clear all browsers, leadership and shared state?')
def reset(server):
    """Reset server state"""
    result = _run(SyncClient(server).reset())
    click.echo(result.get('message', 'State reset'))


@cli.command()
@click.option('--output', '-o', default='sync_config.json', help='Output configuration file')
def init_config(output):
    """Initialize a configuration file with default settings"""
    Config().save_to_file(output)
    click.echo(f"Configuration file created: {output}")
    click.echo("Edit the file to customize settings, then use:")
    click.echo(f"  browser-sync -c {output} serve")


def main():
    """Main entry point"""
    cli()


if __name__ == '__main__':
    main()
