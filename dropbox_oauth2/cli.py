"""
Flask CLI commands for Dropbox OAuth2 plugin management.

These commands help with setup and debugging of the Dropbox integration.
"""

import click
import httpx

from .config import DEFAULTS_BY_API_VERSION, DropboxStrategyConfig
from .errors import ConfigurationError


@click.group("dropbox")
def dropbox_cli():
    """Dropbox OAuth2 strategy management commands."""
    pass


@dropbox_cli.command("show-config")
def show_config():
    """Display the resolved Dropbox strategy configuration."""
    try:
        config = DropboxStrategyConfig.from_env()
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    click.echo("=== Dropbox Strategy Configuration ===")
    click.echo(f"API Version: {config.api_version.value}")
    click.echo(f"Authorization URL: {config.authorization_url}")
    click.echo(f"Token URL: {config.token_url}")
    click.echo(f"Profile URL: {config.profile_url}")
    click.echo(f"Callback URL: {config.callback_url or 'Not configured'}")
    click.echo(f"Scope: {config.scope_separator.join(config.scope) or 'Not configured'}")
    click.echo(f"Scope Separator: {config.scope_separator!r}")
    click.echo(f"Client ID: {config.client_id[:8] + '...' if config.client_id else 'Not configured'}")
    click.echo(f"Client Secret: {'Configured' if config.client_secret else 'Not configured'}")

    if config.custom_headers:
        click.echo("\n=== Custom Headers ===")
        for name, value in config.custom_headers.items():
            click.echo(f"  {name}: {value}")


@dropbox_cli.command("list-api-versions")
def list_api_versions():
    """List the supported Dropbox API versions and their endpoints."""
    click.echo("=== Supported Dropbox API Versions ===\n")

    for version, defaults in DEFAULTS_BY_API_VERSION.items():
        click.echo(f"{version.value}:")
        click.echo(f"  Authorization URL: {defaults.authorization_url}")
        click.echo(f"  Token URL: {defaults.token_url}")
        click.echo(f"  Profile: {defaults.profile_method} {defaults.profile_url}")
        headers = ", ".join(f"{k}: {v}" for k, v in defaults.custom_headers.items())
        click.echo(f"  Headers: {headers or 'none'}")
        click.echo()


@dropbox_cli.command("validate-config")
def validate_config():
    """Validate the current configuration."""
    errors = []
    warnings = []

    try:
        config = DropboxStrategyConfig.from_env()
    except ConfigurationError as e:
        errors.append(str(e))
        config = None

    if config is not None:
        if not config.client_id:
            errors.append("DROPBOX_CLIENT_ID not configured")
        if not config.client_secret:
            errors.append("DROPBOX_CLIENT_SECRET not configured")
        if not config.callback_url:
            errors.append("DROPBOX_CALLBACK_URL not configured")
        if config.callback_url.startswith("http://") and "localhost" not in config.callback_url:
            warnings.append("DROPBOX_CALLBACK_URL is not HTTPS (Dropbox requires HTTPS except for localhost)")

    if warnings:
        click.echo("=== Warnings ===")
        for warning in warnings:
            click.echo(f"  ! {warning}")

    if errors:
        click.echo("\n=== Errors ===")
        for error in errors:
            click.echo(f"  x {error}")
        click.echo(f"\nConfiguration validation failed with {len(errors)} error(s)")
        raise SystemExit(1)

    click.echo("\n[OK] Configuration is valid!")


@dropbox_cli.command("test-connection")
def test_connection():
    """Test connectivity to the Dropbox OAuth2 endpoints."""
    try:
        config = DropboxStrategyConfig.from_env()
    except ConfigurationError as e:
        raise click.ClickException(str(e))

    click.echo("=== Testing Dropbox Connectivity ===\n")

    try:
        with httpx.Client() as client:
            client.head(config.authorization_url, follow_redirects=True, timeout=10)
        click.echo(f"[OK] Authorization URL reachable: {config.authorization_url}")
    except httpx.HTTPError as e:
        click.echo(f"[FAIL] Authorization URL: {e}")

    try:
        with httpx.Client() as client:
            # Without credentials the token endpoint answers 400, which is fine here
            client.post(config.token_url, timeout=10)
        click.echo(f"[OK] Token URL reachable: {config.token_url}")
    except httpx.HTTPError as e:
        click.echo(f"[FAIL] Token URL: {e}")
