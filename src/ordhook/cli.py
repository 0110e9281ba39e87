"""
Command-line interface for the inscription webhook.
"""

import sys
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from ordhook import __version__
from ordhook.core.logging import get_logger, setup_logging
from ordhook.core.settings import load_settings
from ordhook.exceptions import ConfigurationException
from ordhook.webhook import create_webhook_server
from ordhook.webhook.security import compute_signature

console = Console()
logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="ordhook")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, debug):
    """Signed webhook that inscribes files with the ord wallet."""
    # Load environment variables from .env file
    load_dotenv()
    ctx.obj = {'debug': debug}


@cli.command()
@click.option('--host', default=None, help='Host to bind webhook server to')
@click.option('--port', type=int, default=None, help='Port to bind webhook server to')
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    help='Path to configuration file'
)
@click.pass_context
def serve(ctx, host: Optional[str], port: Optional[int], config: Optional[Path]):
    """Start the webhook server."""
    try:
        settings = load_settings(config)
    except ConfigurationException as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    setup_logging(settings.logging, level="DEBUG" if ctx.obj['debug'] else None)

    if settings.webhook.secret_key is None:
        console.print("[yellow]Warning: no webhook secret is configured, every request will be rejected![/yellow]")
        console.print("Set the ORDHOOK_WEBHOOK_SECRET_KEY environment variable")

    table = Table(title="ordhook", show_header=False)
    table.add_row("Listen", f"{host or settings.webhook.host}:{port or settings.webhook.port}")
    table.add_row("Route", f"POST {settings.webhook.path}")
    table.add_row("Signature header", settings.webhook.signature_header)
    table.add_row("ord binary", settings.wallet.ord_binary)
    table.add_row("Wallet", settings.wallet.wallet_name)
    table.add_row("Download dir", str(settings.download.download_dir))
    console.print(table)

    try:
        server = create_webhook_server(settings)
        server.run(host=host, port=port)
    except KeyboardInterrupt:
        console.print("\nShutting down webhook server...")


EXAMPLE_CONFIG = """# ordhook configuration example
# Save this as .ordhook.yaml or set via environment variables

webhook:
  host: "0.0.0.0"
  port: 3010
  path: "/webhook"
  # Shared HMAC secret; prefer ORDHOOK_WEBHOOK_SECRET_KEY in production
  # secret_key: "your-signing-secret"
  signature_header: "ordinals-sig"
  shutdown_grace_seconds: 30

wallet:
  ord_binary: "~/bin/ord"
  wallet_name: "ilyaFriends"
  # command_timeout_seconds: 600

download:
  download_dir: "image-folder"
  # timeout_seconds: 60

logging:
  log_format: "text"
  # log_dir: "logs"
"""


@cli.command()
@click.option(
    '--output',
    type=click.Path(path_type=Path),
    default=Path('.ordhook.yaml'),
    help='Output file for example configuration'
)
def init(output: Path):
    """Generate example configuration."""
    if output.exists():
        click.echo(f"{output} already exists, not overwriting", err=True)
        sys.exit(1)

    output.write_text(EXAMPLE_CONFIG)
    click.echo(f"Example configuration written to {output}")


@cli.command()
@click.argument('body_file', type=click.File('rb'))
@click.option(
    '--secret',
    envvar='ORDHOOK_WEBHOOK_SECRET_KEY',
    required=True,
    help='Signing secret (defaults to ORDHOOK_WEBHOOK_SECRET_KEY)'
)
def sign(body_file, secret: str):
    """Print the signature header value for a request body.

    Pass '-' to read the body from stdin.
    """
    click.echo(compute_signature(secret, body_file.read()))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
