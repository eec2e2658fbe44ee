"""CLI commands for API management.

This module provides commands for managing the registry REST API,
including starting the server, generating tokens, and checking status.
"""

import sys
from datetime import timedelta
from pathlib import Path
from typing import Optional

import click

from endpoint_registry.api.auth import create_token_for_user
from endpoint_registry.api.server import run_server
from endpoint_registry.core.config import ConfigManager
from endpoint_registry.core.database import Database
from endpoint_registry.core.log import setup_logging


def _load_config(ctx: click.Context) -> ConfigManager:
    config_path = (ctx.obj or {}).get("config_path")
    return ConfigManager(Path(config_path) if config_path else None)


@click.group()
def api() -> None:
    """API server management commands."""
    pass


@api.command()
@click.option("--host", default=None, help="Host address (default: from config)")
@click.option("--port", type=int, default=None, help="Port number (default: from config)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--ssl-cert", type=click.Path(exists=True), help="Path to SSL certificate file")
@click.option("--ssl-key", type=click.Path(exists=True), help="Path to SSL key file")
@click.pass_context
def serve(
    ctx: click.Context,
    host: Optional[str],
    port: Optional[int],
    reload: bool,
    ssl_cert: Optional[str],
    ssl_key: Optional[str],
) -> None:
    """Start the API server.

    Examples:
        endpoint-registry api serve
        endpoint-registry api serve --host 0.0.0.0 --port 8080
        endpoint-registry api serve --reload  # Development mode
        endpoint-registry api serve --ssl-cert cert.pem --ssl-key key.pem
    """
    config = _load_config(ctx)

    if not config.get("api.enabled", False):
        click.echo(click.style("⚠️  API is not enabled in configuration", fg="yellow"), err=True)
        click.echo("\nTo enable the API, run:")
        click.echo("  endpoint-registry config set api.enabled true")
        click.echo("\nOr add to your config file:")
        click.echo("  api:")
        click.echo("    enabled: true")
        sys.exit(1)

    config.ensure_api_secret_key()
    log_file = config.get("logging.file")
    setup_logging(config.get("logging.level", "INFO"), Path(log_file).expanduser() if log_file else None)

    final_host = host or config.get("api.host", "localhost")
    final_port = port or config.get("api.port", 8000)

    ssl_cert_path = None
    ssl_key_path = None
    if ssl_cert and ssl_key:
        ssl_cert_path = Path(ssl_cert)
        ssl_key_path = Path(ssl_key)
    elif config.get("api.ssl.enabled", False):
        cert_file = config.get("api.ssl.cert_file")
        key_file = config.get("api.ssl.key_file")
        if cert_file and key_file:
            ssl_cert_path = Path(cert_file)
            ssl_key_path = Path(key_file)

    database_url = (ctx.obj or {}).get("database_url")
    database = Database(database_url) if database_url else None

    protocol = "https" if ssl_cert_path and ssl_key_path else "http"
    click.echo("🚀 Starting Endpoint Registry API server...")
    click.echo(f"   URL: {protocol}://{final_host}:{final_port}")
    click.echo(f"   Docs: {protocol}://{final_host}:{final_port}/docs")
    if reload:
        click.echo("   Mode: Development (auto-reload enabled)")
    click.echo()

    try:
        run_server(
            config=config,
            database=database,
            host=final_host,
            port=final_port,
            reload=reload,
            workers=config.get("api.workers", 1),
            ssl_certfile=ssl_cert_path,
            ssl_keyfile=ssl_key_path,
        )
    except KeyboardInterrupt:
        click.echo("\n\n👋 Shutting down API server...")
    except Exception as e:
        click.echo(click.style(f"❌ Error starting server: {e}", fg="red"), err=True)
        sys.exit(1)


@api.group()
def token() -> None:
    """Manage API authentication tokens."""
    pass


@token.command("create")
@click.argument("user_id")
@click.option(
    "--expires",
    type=int,
    help="Token expiry time in hours (default: from config)",
)
@click.pass_context
def create_token_cmd(ctx: click.Context, user_id: str, expires: Optional[int]) -> None:
    """Create a bearer token for a user.

    The token only proves identity; the user's role comes from the role
    store (see ``endpoint-registry roles``).

    Examples:
        endpoint-registry api token create alice
        endpoint-registry api token create alice --expires 48
    """
    config = _load_config(ctx)

    if expires is None:
        expires = config.get("api.authentication.token_expiry_hours", 24)

    token_data = create_token_for_user(
        config, user_id=user_id, expires_delta=timedelta(hours=expires)
    )

    click.echo("✅ Token created successfully!")
    click.echo()
    click.echo(f"Token: {token_data['access_token']}")
    click.echo(f"User: {user_id}")
    click.echo(f"Expires in: {expires} hours")
    click.echo()
    click.echo("Use this token in API requests:")
    click.echo(f"  Authorization: Bearer {token_data['access_token']}")
    click.echo()
    click.echo("Example curl command:")
    host = config.get("api.host", "localhost")
    port = config.get("api.port", 8000)
    click.echo(
        f'  curl -H "Authorization: Bearer {token_data["access_token"]}" '
        f"http://{host}:{port}/api/v1/me"
    )


@api.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show API configuration status.

    Examples:
        endpoint-registry api status
    """
    config = _load_config(ctx)

    click.echo("📊 Endpoint Registry API Status")
    click.echo("=" * 50)

    enabled = config.get("api.enabled", False)
    status_icon = "✅" if enabled else "❌"
    click.echo(f"\n{status_icon} API Enabled: {enabled}")

    if not enabled:
        click.echo("\nTo enable the API:")
        click.echo("  endpoint-registry config set api.enabled true")
        return

    click.echo("\n🌐 Server Configuration:")
    host = config.get("api.host", "localhost")
    port = config.get("api.port", 8000)
    workers = config.get("api.workers", 1)
    click.echo(f"  Host: {host}")
    click.echo(f"  Port: {port}")
    click.echo(f"  Workers: {workers}")

    click.echo("\n🔐 Authentication:")
    expiry = config.get("api.authentication.token_expiry_hours", 24)
    has_secret = bool(config.get("api.authentication.secret_key"))
    click.echo(f"  Token Expiry: {expiry} hours")
    click.echo(f"  Secret Key: {'Set' if has_secret else 'Not set'}")
    if not has_secret:
        click.echo(click.style("  ⚠️  Run 'endpoint-registry api serve' to generate", fg="yellow"))

    click.echo("\n🌍 CORS:")
    cors_enabled = config.get("api.cors.enabled", True)
    cors_icon = "✅" if cors_enabled else "❌"
    click.echo(f"  {cors_icon} Enabled: {cors_enabled}")
    if cors_enabled:
        origins = config.get("api.cors.origins", [])
        click.echo(f"  Allowed Origins: {len(origins)}")
        for origin in origins:
            click.echo(f"    - {origin}")

    click.echo("\n🖼  Uploads:")
    uploads_enabled = config.get("uploads.enabled", True)
    click.echo(f"  {'✅' if uploads_enabled else '❌'} Enabled: {uploads_enabled}")
    if uploads_enabled:
        click.echo(f"  Bucket: {config.get('uploads.bucket', 'endpoint-icons')}")
        click.echo(f"  Storage: {config.get('uploads.storage_dir')}")

    click.echo("\n🔒 SSL/TLS:")
    ssl_enabled = config.get("api.ssl.enabled", False)
    ssl_icon = "✅" if ssl_enabled else "❌"
    click.echo(f"  {ssl_icon} Enabled: {ssl_enabled}")
    if ssl_enabled:
        cert_file = config.get("api.ssl.cert_file")
        key_file = config.get("api.ssl.key_file")
        click.echo(f"  Certificate: {cert_file or 'Not set'}")
        click.echo(f"  Key: {key_file or 'Not set'}")

    click.echo("\n🚀 Quick Start:")
    protocol = "https" if ssl_enabled else "http"
    click.echo("  1. Start server: endpoint-registry api serve")
    click.echo("  2. Create token: endpoint-registry api token create <user-id>")
    click.echo(f"  3. Open docs: {protocol}://{host}:{port}/docs")
