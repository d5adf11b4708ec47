"""agentreg CLI — manage and query the unified agent registry."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from agentreg import __version__
from agentreg.config import Settings, load_settings, settings_to_dict
from agentreg.errors import AgentNotFoundError, AgentRegistryError
from agentreg.query.models import FilterParams, SearchParams, SortField, SortOrder, SortParams
from agentreg.runtime import Registry, open_registry
from agentreg.store.models import AgentStatus, ContractStatus, Permission

console = Console()

_STATUS_STYLE = {
    "active": "green",
    "inactive": "yellow",
    "stopped": "dim",
    "error": "red",
    "draft": "cyan",
    "deprecated": "magenta",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@contextmanager
def _registry(ctx: click.Context) -> Iterator[Registry]:
    """Open the registry for one command; report domain errors and exit 1."""
    settings: Settings = ctx.obj["settings"]
    try:
        with open_registry(settings) as reg:
            yield reg
    except AgentRegistryError as e:
        console.print(f"[red]Error:[/] {e}")
        ctx.exit(1)


def _echo_json(data: object) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _status(value: str) -> str:
    style = _STATUS_STYLE.get(value, "white")
    return f"[{style}]{value}[/]"


def _agents_table(title: str, items: list) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Status", justify="center")
    table.add_column("Chain", justify="center")
    table.add_column("Capabilities")
    for item in items:
        chain = "[green]Y[/]" if item.ledger.is_on_chain else "[dim]-[/]"
        table.add_row(
            item.id,
            item.name,
            item.type,
            _status(item.status.value),
            chain,
            ", ".join(item.capabilities)[:40],
        )
    return table


@click.group()
@click.version_option(version=__version__)
@click.option("--home", default=None, envvar="AGENTREG_HOME", help="Registry home directory")
@click.option("--config", "config_path", default=None, help="Path to a config.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, home: Optional[str], config_path: Optional[str], verbose: bool):
    """agentreg — unified agent record store and query engine.

    One store holds every agent record. Discovery, management and ledger
    views all read and write through it.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    try:
        ctx.obj["settings"] = load_settings(config_path, home=home)
    except AgentRegistryError as e:
        console.print(f"[red]Error:[/] {e}")
        ctx.exit(1)


# ── Agents ───────────────────────────────────────────────────────────


@main.command(name="list")
@click.option("--status", type=click.Choice([s.value for s in AgentStatus]), default=None)
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_context
def list_agents(ctx: click.Context, status: Optional[str], as_json: bool):
    """List every agent in the store."""
    with _registry(ctx) as reg:
        items = reg.discovery.filter(status=status)
        if as_json:
            _echo_json([i.model_dump(mode="json") for i in items])
            return
        if not items:
            console.print("[yellow]No agents found.[/]")
            return
        console.print(_agents_table(f"Agents ({len(items)})", items))


@main.command()
@click.argument("agent_id")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def show(ctx: click.Context, agent_id: str, as_json: bool):
    """Show one agent in full."""
    with _registry(ctx) as reg:
        item = reg.discovery.get_agent_details(agent_id)
        if item is None:
            raise AgentNotFoundError(agent_id)
        if as_json:
            _echo_json(item.model_dump(mode="json"))
            return

        lines = [
            f"[bold]{item.name}[/] ({item.id}) v{item.version}",
            f"Type: {item.type}    Status: {_status(item.status.value)}",
            f"Capabilities: {', '.join(item.capabilities) or '-'}",
            f"Tags: {', '.join(item.tags) or '-'}",
            f"Permissions: {', '.join(p.value for p in item.permissions) or '-'}",
        ]
        if item.description:
            lines.insert(1, item.description)
        if item.ledger.is_on_chain:
            lines.append(
                f"Ledger: {item.ledger.network} block {item.ledger.block_number} "
                f"({item.ledger.verification_status.value})"
            )
        lines.append(f"Created: {item.created_at}    Updated: {item.updated_at}")
        console.print(Panel("\n".join(lines), title="Agent"))


@main.command()
@click.argument("name")
@click.option("--description", "-d", default="", help="Free-text description")
@click.option("--type", "agent_type", default=None, help="Agent type label")
@click.option("--capability", "-c", multiple=True, help="Capability tag (repeatable)")
@click.option("--tag", "-t", multiple=True, help="Metadata tag (repeatable)")
@click.option("--status", type=click.Choice([s.value for s in AgentStatus]), default=None)
@click.option("--language", default=None)
@click.option("--json", "as_json", is_flag=True, help="Print the created agent as JSON")
@click.pass_context
def create(
    ctx: click.Context,
    name: str,
    description: str,
    agent_type: Optional[str],
    capability: tuple,
    tag: tuple,
    status: Optional[str],
    language: Optional[str],
    as_json: bool,
):
    """Create an agent."""
    fields: dict = {"name": name, "description": description}
    if agent_type:
        fields["type"] = agent_type
    if capability:
        fields["capabilities"] = list(capability)
    if tag:
        fields["metadata"] = {"tags": list(tag)}
    if status:
        fields["status"] = status
    if language:
        fields["language"] = language

    with _registry(ctx) as reg:
        item = reg.discovery.add_agent(fields)
        if as_json:
            _echo_json(item.model_dump(mode="json"))
            return
        console.print(f"  Created: [cyan]{item.id}[/] {item.name}")


@main.command()
@click.argument("agent_id")
@click.option("--name", default=None)
@click.option("--description", "-d", default=None)
@click.option("--type", "agent_type", default=None)
@click.option("--capability", "-c", multiple=True, help="Replace capabilities (repeatable)")
@click.option("--status", type=click.Choice([s.value for s in AgentStatus]), default=None)
@click.option("--language", default=None)
@click.pass_context
def update(
    ctx: click.Context,
    agent_id: str,
    name: Optional[str],
    description: Optional[str],
    agent_type: Optional[str],
    capability: tuple,
    status: Optional[str],
    language: Optional[str],
):
    """Merge-patch an agent; only the given options change."""
    patch: dict = {}
    for key, value in (
        ("name", name),
        ("description", description),
        ("type", agent_type),
        ("status", status),
        ("language", language),
    ):
        if value is not None:
            patch[key] = value
    if capability:
        patch["capabilities"] = list(capability)
    if not patch:
        console.print("[yellow]Nothing to update.[/]")
        return

    with _registry(ctx) as reg:
        item = reg.discovery.update_agent(agent_id, patch)
        console.print(f"  Updated: [cyan]{item.id}[/] ({', '.join(sorted(patch))}) at {item.updated_at}")


@main.command()
@click.argument("agent_id")
@click.pass_context
def delete(ctx: click.Context, agent_id: str):
    """Delete an agent. Its contracts are kept."""
    with _registry(ctx) as reg:
        reg.discovery.delete_agent(agent_id)
        console.print(f"  Deleted: [cyan]{agent_id}[/]")


# ── Query ────────────────────────────────────────────────────────────


@main.command()
@click.argument("text", required=False, default="")
@click.option("--status", "-s", multiple=True, type=click.Choice([s.value for s in AgentStatus]))
@click.option("--type", "types", multiple=True, help="Agent type (repeatable)")
@click.option("--capability", "-c", multiple=True, help="Any-of capability (repeatable)")
@click.option("--tag", "-t", multiple=True, help="Any-of metadata tag (repeatable)")
@click.option("--language", "-l", multiple=True)
@click.option("--network", multiple=True)
@click.option("--verified/--unverified", default=None)
@click.option("--on-chain/--off-chain", "on_chain", default=None)
@click.option("--featured", is_flag=True, help="Only featured agents")
@click.option("--min-rating", type=float, default=None)
@click.option("--sort", "sort_field", type=click.Choice([f.value for f in SortField]), default=SortField.CREATED_AT.value)
@click.option("--order", type=click.Choice([o.value for o in SortOrder]), default=SortOrder.DESC.value)
@click.option("--page", type=int, default=1)
@click.option("--page-size", type=int, default=None)
@click.option("--json", "as_json", is_flag=True, help="Print the page as JSON")
@click.pass_context
def search(
    ctx: click.Context,
    text: str,
    status: tuple,
    types: tuple,
    capability: tuple,
    tag: tuple,
    language: tuple,
    network: tuple,
    verified: Optional[bool],
    on_chain: Optional[bool],
    featured: bool,
    min_rating: Optional[float],
    sort_field: str,
    order: str,
    page: int,
    page_size: Optional[int],
    as_json: bool,
):
    """Search agents: filter, free text, sort and paginate."""
    with _registry(ctx) as reg:
        params = SearchParams(
            text=text,
            page=page,
            page_size=page_size or reg.settings.default_page_size,
        )
        filters = FilterParams(
            statuses=list(status) or None,
            types=list(types) or None,
            capabilities=list(capability) or None,
            tags=list(tag) or None,
            languages=list(language) or None,
            networks=list(network) or None,
            is_verified=verified,
            is_on_chain=on_chain,
            is_featured=True if featured else None,
            min_rating=min_rating,
        )
        result = reg.discovery.search_agents(params, SortParams(sort_field, order), filters)
        if as_json:
            _echo_json(result.model_dump(mode="json"))
            return

        info = result.page_info
        if not result.items:
            console.print("[yellow]No matching agents found.[/]")
            return
        title = f"Results (page {info.page}/{info.total_pages}, {info.total} total)"
        console.print(_agents_table(title, result.items))


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def stats(ctx: click.Context, as_json: bool):
    """Show registry statistics."""
    with _registry(ctx) as reg:
        data = reg.discovery.get_statistics()
        if as_json:
            _echo_json(data.model_dump(mode="json"))
            return

        console.print(
            Panel(
                f"Total: {data.total_agents}    Active: {data.active_agents}    "
                f"Inactive: {data.inactive_agents}\n"
                f"Verified: {data.verified_agents}    On chain: {data.on_chain_agents}    "
                f"Avg rating: {data.average_rating:.1f}",
                title="Registry Stats",
            )
        )
        if data.top_capabilities:
            table = Table(title="Top Capabilities")
            table.add_column("Capability", style="cyan")
            table.add_column("Agents", justify="right")
            table.add_column("%", justify="right")
            for d in data.top_capabilities:
                table.add_row(d.label, str(d.count), f"{d.percentage:.0f}")
            console.print(table)


# ── Ledger ───────────────────────────────────────────────────────────


@main.group()
def contracts():
    """Manage agent identity contracts."""


@contracts.command(name="list")
@click.option("--json", "as_json", is_flag=True, help="Print JSON")
@click.pass_context
def list_contracts(ctx: click.Context, as_json: bool):
    """List identity contracts."""
    with _registry(ctx) as reg:
        views = reg.ledger.fetch_agent_contracts()
        if as_json:
            _echo_json([v.model_dump(mode="json") for v in views])
            return
        if not views:
            console.print("[yellow]No contracts registered.[/]")
            return

        table = Table(title=f"Contracts ({len(views)})")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name")
        table.add_column("Agent")
        table.add_column("Status", justify="center")
        table.add_column("Network")
        for v in views:
            agent = v.agent.name if v.agent else f"[dim]{v.agent_id} (deleted)[/]"
            table.add_row(v.id, v.contract_name, agent, v.status.value, v.ledger.network)
        console.print(table)


@contracts.command()
@click.argument("agent_id")
@click.argument("contract_name")
@click.option("--permission", type=click.Choice([p.value for p in Permission]), default=Permission.ADMIN.value)
@click.option("--description", "-d", default="")
@click.option("--tag", "-t", multiple=True)
@click.pass_context
def register(ctx: click.Context, agent_id: str, contract_name: str, permission: str, description: str, tag: tuple):
    """Register an identity contract for an agent."""
    with _registry(ctx) as reg:
        view = reg.ledger.register_agent_contract(
            {
                "agent_id": agent_id,
                "contract_name": contract_name,
                "permission": permission,
                "description": description,
                "tags": list(tag),
            }
        )
        console.print(f"  Registered: [cyan]{view.id}[/] at {view.contract_address}")


@contracts.command(name="status")
@click.argument("contract_id")
@click.argument("status", type=click.Choice([s.value for s in ContractStatus]))
@click.pass_context
def contract_status(ctx: click.Context, contract_id: str, status: str):
    """Change a contract's status."""
    with _registry(ctx) as reg:
        view = reg.ledger.update_agent_contract_status(contract_id, status)
        console.print(f"  [cyan]{view.id}[/] is now {view.status.value}")


@contracts.command(name="delete")
@click.argument("contract_id")
@click.pass_context
def delete_contract(ctx: click.Context, contract_id: str):
    """Delete a contract."""
    with _registry(ctx) as reg:
        reg.ledger.delete_agent_contract(contract_id)
        console.print(f"  Deleted: [cyan]{contract_id}[/]")


@main.command()
@click.argument("agent_id")
@click.pass_context
def anchor(ctx: click.Context, agent_id: str):
    """Anchor an agent on the ledger."""
    with _registry(ctx) as reg:
        agent = reg.ledger.anchor_agent(agent_id)
        console.print(
            f"  Anchored: [cyan]{agent.id}[/] on {agent.ledger.network} "
            f"block {agent.ledger.block_number} ({agent.ledger.verification_status.value})"
        )


# ── Config ───────────────────────────────────────────────────────────


@main.command(name="config")
@click.pass_context
def show_config(ctx: click.Context):
    """Print the effective settings."""
    settings: Settings = ctx.obj["settings"]
    table = Table(title="Settings")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in settings_to_dict(settings).items():
        table.add_row(key, str(value))
    console.print(table)
