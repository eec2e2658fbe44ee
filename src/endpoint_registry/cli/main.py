"""Main CLI application."""

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, NoReturn, Optional

import click
from rich.console import Console
from rich.table import Table

from endpoint_registry import __version__
from endpoint_registry.cli.api_commands import api
from endpoint_registry.cli.config_commands import config
from endpoint_registry.core.authorization import Caller, classify_caller
from endpoint_registry.core.config import ConfigManager
from endpoint_registry.core.database import Database
from endpoint_registry.core.errors import RegistryError
from endpoint_registry.core.log import setup_logging
from endpoint_registry.core.models import (
    Endpoint,
    EndpointFilter,
    EndpointRequest,
    EndpointStatus,
    UserRole,
)
from endpoint_registry.core.results import ActionResult, run_action
from endpoint_registry.core.service import RegistryService

console = Console()
error_console = Console(stderr=True)


def get_config(ctx: click.Context) -> ConfigManager:
    """Get the configuration manager for this invocation."""
    if "config" not in ctx.obj:
        config_path = ctx.obj.get("config_path")
        ctx.obj["config"] = ConfigManager(Path(config_path) if config_path else None)
    config_mgr: ConfigManager = ctx.obj["config"]
    return config_mgr


def get_service(ctx: click.Context) -> RegistryService:
    """Get a registry service with its tables created."""
    if "service" not in ctx.obj:
        config_mgr = get_config(ctx)
        database_url = ctx.obj.get("database_url")
        db = Database(database_url) if database_url else Database.from_config(config_mgr)
        db.create_all()
        ctx.obj["service"] = RegistryService.from_config(config_mgr, db)
    service: RegistryService = ctx.obj["service"]
    return service


def get_caller(ctx: click.Context, user_id: str) -> Caller:
    """Classify the user an admin command runs as."""
    return classify_caller(user_id, get_service(ctx).roles)


def format_datetime(dt: Optional[datetime]) -> str:
    """Format datetime for display."""
    return dt.strftime("%Y-%m-%d %H:%M:%S") if dt else "-"


def fail(result: ActionResult[Any]) -> NoReturn:
    """Print a failed action result and exit."""
    error_console.print(f"[red]Error ({result.kind}):[/red] {result.message}")
    for field, messages in result.errors.items():
        if messages == [result.message]:
            continue
        for message in messages:
            error_console.print(f"  {field}: {message}")
    sys.exit(1)


def print_requests(requests: list[EndpointRequest], title: str) -> None:
    table = Table(title=f"{title} ({len(requests)})")
    table.add_column("ID", style="dim")
    table.add_column("Submitted", style="cyan")
    table.add_column("Company", style="bold")
    table.add_column("Title")
    table.add_column("Protocol", style="magenta")
    table.add_column("Tags", style="green")
    table.add_column("Status", style="yellow")

    for request in requests:
        table.add_row(
            request.id,
            format_datetime(request.created_at),
            request.fields.company,
            request.fields.title,
            request.fields.protocol.value,
            ", ".join(sorted(tag.slug for tag in request.tags)),
            request.review_status.value,
        )
    console.print(table)


def print_endpoints(endpoints: list[Endpoint]) -> None:
    table = Table(title=f"Endpoints (showing {len(endpoints)})")
    table.add_column("ID", style="dim")
    table.add_column("Company", style="bold")
    table.add_column("Title")
    table.add_column("Protocol", style="magenta")
    table.add_column("Address", style="cyan")
    table.add_column("Tags", style="green")

    for endpoint in endpoints:
        table.add_row(
            endpoint.id,
            endpoint.fields.company,
            endpoint.fields.title,
            endpoint.fields.protocol.value,
            endpoint.fields.address,
            ", ".join(sorted(endpoint.tag_slugs)),
        )
    console.print(table)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", type=click.Path(), help="Path to config file")
@click.option("--database-url", help="Database URL (overrides database.url)")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("-v", "--verbose", is_flag=True, help="Log debug output")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[str],
    database_url: Optional[str],
    no_color: bool,
    verbose: bool,
) -> None:
    """Endpoint Registry - moderated directory of API endpoints.

    Seed tags, grant roles, review submissions and run the API server.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["database_url"] = database_url

    if no_color:
        console.no_color = True

    if verbose:
        setup_logging("DEBUG")


cli.add_command(api)
cli.add_command(config)


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the registry tables.

    Example:
        endpoint-registry init-db
    """
    service = get_service(ctx)
    console.print(f"[green]✓[/green] Database ready: {service.db.url}")


# ============================================================================
# Tags
# ============================================================================


@cli.group()
def tags() -> None:
    """Manage tags."""
    pass


@tags.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def tags_list(ctx: click.Context, as_json: bool) -> None:
    """List all tags."""
    all_tags = get_service(ctx).tags.list_tags()

    if as_json:
        print(json.dumps([tag.to_dict() for tag in all_tags], indent=2))
        return

    if not all_tags:
        console.print("[yellow]No tags found[/yellow]")
        return

    table = Table(title="Tags")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Slug", style="cyan")
    table.add_column("Color")
    for tag in all_tags:
        table.add_row(tag.id, tag.name, tag.slug, f"[{tag.color}]{tag.color}[/]")
    console.print(table)


@tags.command("add")
@click.argument("name")
@click.argument("slug")
@click.option("--color", default="#3b82f6", show_default=True, help="Hex color code")
@click.pass_context
def tags_add(ctx: click.Context, name: str, slug: str, color: str) -> None:
    """Create a tag.

    Example:
        endpoint-registry tags add Authentication authentication --color "#ef4444"
    """
    result = run_action(get_service(ctx).tags.create, name, slug, color)
    if not result.success or result.data is None:
        fail(result)
    console.print(f"[green]✓[/green] Created tag {result.data.slug} ({result.data.id})")


# ============================================================================
# Roles
# ============================================================================


@cli.group()
def roles() -> None:
    """Manage user roles."""
    pass


@roles.command("grant")
@click.argument("user_id")
@click.option(
    "--role",
    type=click.Choice([r.value for r in UserRole]),
    default=UserRole.ADMIN.value,
    show_default=True,
)
@click.pass_context
def roles_grant(ctx: click.Context, user_id: str, role: str) -> None:
    """Give a user a role (admin by default).

    Example:
        endpoint-registry roles grant alice
        endpoint-registry roles grant bob --role user
    """
    try:
        get_service(ctx).roles.set_role(user_id, UserRole(role))
    except RegistryError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        sys.exit(1)
    console.print(f"[green]✓[/green] {user_id} is now {role}")


@roles.command("revoke")
@click.argument("user_id")
@click.pass_context
def roles_revoke(ctx: click.Context, user_id: str) -> None:
    """Remove a user's role record (they fall back to the default role)."""
    if get_service(ctx).roles.remove(user_id):
        console.print(f"[green]✓[/green] Removed role record of {user_id}")
    else:
        console.print(f"[yellow]No role record for {user_id}[/yellow]")


@roles.command("show")
@click.argument("user_id")
@click.pass_context
def roles_show(ctx: click.Context, user_id: str) -> None:
    """Show how a user is classified."""
    caller = get_caller(ctx, user_id)
    console.print(f"{user_id}: {caller.role.value}")


# ============================================================================
# Endpoints
# ============================================================================


@cli.group()
def endpoints() -> None:
    """Browse endpoints."""
    pass


@endpoints.command("list")
@click.option(
    "--status",
    type=click.Choice([s.value for s in EndpointStatus]),
    default=EndpointStatus.ACTIVE.value,
    show_default=True,
)
@click.option("-t", "--tag", "tag_slugs", multiple=True, help="Tag slug (repeatable, match any)")
@click.option("-q", "--search", help="Search title, company and description")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def endpoints_list(
    ctx: click.Context,
    status: str,
    tag_slugs: tuple[str, ...],
    search: Optional[str],
    as_json: bool,
) -> None:
    """List published endpoints.

    Example:
        endpoint-registry endpoints list
        endpoint-registry endpoints list -t payments -q stripe
    """
    service = get_service(ctx)
    endpoint_filter = EndpointFilter(
        status=EndpointStatus(status), tag_slugs=list(tag_slugs), search_text=search
    )
    result = run_action(service.list_endpoints, Caller.anonymous(), endpoint_filter)
    if not result.success:
        fail(result)
    found = result.data or []

    if as_json:
        print(json.dumps([e.to_dict() for e in found], indent=2))
        return

    if not found:
        console.print("[yellow]No endpoints found[/yellow]")
        return
    print_endpoints(found)


# ============================================================================
# Review queue
# ============================================================================


@cli.group()
def requests() -> None:
    """Review submitted endpoint requests."""
    pass


@requests.command("pending")
@click.option("--as", "as_user", required=True, help="Admin user id to act as")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def requests_pending(ctx: click.Context, as_user: str, as_json: bool) -> None:
    """List pending requests, oldest first.

    Example:
        endpoint-registry requests pending --as alice
    """
    service = get_service(ctx)
    result = run_action(service.list_pending_requests, get_caller(ctx, as_user))
    if not result.success:
        fail(result)
    pending = result.data or []

    if as_json:
        print(json.dumps([r.to_dict() for r in pending], indent=2))
        return

    if not pending:
        console.print("[yellow]No pending requests[/yellow]")
        return
    print_requests(pending, "Pending requests")


@requests.command("approve")
@click.argument("request_id")
@click.option("--as", "as_user", required=True, help="Admin user id to act as")
@click.pass_context
def requests_approve(ctx: click.Context, request_id: str, as_user: str) -> None:
    """Approve a pending request and publish it.

    Example:
        endpoint-registry requests approve 3f1c... --as alice
    """
    service = get_service(ctx)
    result = run_action(service.approve_request, get_caller(ctx, as_user), request_id)
    if not result.success or result.data is None:
        fail(result)
    request, endpoint = result.data
    console.print(f"[green]✓[/green] Approved: {request.fields.title}")
    console.print(f"  Endpoint: {endpoint.id}")


@requests.command("reject")
@click.argument("request_id")
@click.option("--as", "as_user", required=True, help="Admin user id to act as")
@click.pass_context
def requests_reject(ctx: click.Context, request_id: str, as_user: str) -> None:
    """Reject a pending request."""
    service = get_service(ctx)
    result = run_action(service.reject_request, get_caller(ctx, as_user), request_id)
    if not result.success or result.data is None:
        fail(result)
    console.print(f"[green]✓[/green] Rejected: {result.data.fields.title}")


@cli.command()
@click.option("--as", "as_user", required=True, help="Admin user id to act as")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def stats(ctx: click.Context, as_user: str, as_json: bool) -> None:
    """Show dashboard counters."""
    service = get_service(ctx)
    result = run_action(service.get_admin_stats, get_caller(ctx, as_user))
    if not result.success or result.data is None:
        fail(result)

    if as_json:
        print(json.dumps(result.data.to_dict(), indent=2))
        return

    table = Table(title="Registry Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="bold")
    for key, value in result.data.to_dict().items():
        table.add_row(key.replace("_", " ").capitalize(), str(value))
    console.print(table)


if __name__ == "__main__":
    cli(obj={})
