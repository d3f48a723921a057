"""starpin CLI: the main entry point for scaffolding and maintaining Star Frame programs."""

import functools
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from starpin import __version__
from starpin.errors import StarpinError

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=verbose)],
        force=True,
    )


def _handle_errors(func):
    """Print a :class:`StarpinError` in red with its hint and exit 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StarpinError as e:
            console.print(f"[red]Error:[/] {escape(e.message)}")
            if e.hint:
                console.print(f"[dim]Hint:[/] {escape(e.hint)}")
            sys.exit(1)

    return wrapper


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def main(verbose: bool):
    """starpin: Star Frame project tooling.

    Scaffold new Solana programs, keep the program ID in src/lib.rs and
    Starpin.toml in agreement, and keep Cargo.toml dependencies current.
    """
    _configure_logging(verbose)


# ── Init ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@click.option(
    "--template", "-t", default="counter",
    type=click.Choice(["counter", "simple_counter", "simple-counter", "marketplace"]),
    help="Project template",
)
@click.option("--path", "-p", default=".", help="Parent directory for the project")
@click.option("--version", "star_frame_version", default=None, help="Pin the star_frame version")
@_handle_errors
def init(name: str, template: str, path: str, star_frame_version: str | None):
    """Create a new Star Frame project NAME."""
    from starpin.scaffold.project import ProjectScaffold
    from starpin.versions.resolver import STAR_FRAME, resolve_dependency_versions

    console.print(f"\n[bold blue]starpin[/] Creating Star Frame project: {name}\n")

    versions = resolve_dependency_versions(star_frame_version=star_frame_version)
    if STAR_FRAME in versions.fallbacks:
        console.print(f"  [yellow]![/] Registry unavailable, using star_frame {versions.star_frame}")
    else:
        console.print(f"  Using star_frame {versions.star_frame}")

    result = ProjectScaffold(path).generate(name, template, versions)

    console.print(f"  Location:   {result['path']}")
    console.print(f"  Template:   {template}")
    console.print(f"  Program ID: [cyan]{result['program_id']}[/]")
    console.print(f"\n[green]Project '{name}' created.[/]")
    console.print("\nNext steps:")
    console.print(f"  cd {result['path']}")
    console.print("  starpin sync      # keep lib.rs and Starpin.toml in agreement")
    console.print("  starpin update    # bump star_frame to the latest release")


# ── Sync ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--from-lib", is_flag=True, help="On conflict, copy the ID from src/lib.rs to Starpin.toml")
@click.option("--program", default=None, help="Program name in Starpin.toml (default: crate name)")
@click.option("--dir", "project_dir", default=".", help="Project directory")
@_handle_errors
def sync(from_lib: bool, program: str | None, project_dir: str):
    """Synchronize the program ID between src/lib.rs and Starpin.toml."""
    from starpin.sync.reconciler import ProgramIdSync

    result = ProgramIdSync(project_dir, program_name=program).sync(favor_source=from_lib)
    _print_sync_result(result)
    if not result.synchronized:
        sys.exit(1)


# ── Keys ─────────────────────────────────────────────────────────────


@main.command()
@click.option("--program", default=None, help="Program name in Starpin.toml (default: crate name)")
@click.option("--dir", "project_dir", default=".", help="Project directory")
@_handle_errors
def keys(program: str | None, project_dir: str):
    """Generate a new program keypair and write its ID into both files."""
    from starpin.sync.reconciler import ProgramIdSync

    result = ProgramIdSync(project_dir, program_name=program).rotate()
    console.print(f"\n[bold blue]starpin[/] New keypair: {result.keypair_file}\n")
    _print_sync_result(result)
    if not result.synchronized:
        sys.exit(1)


def _print_sync_result(result) -> None:
    style = "green" if result.synchronized else "red"
    console.print(Panel(result.summary(), title="Program ID Sync", border_style=style))

    if result.manifest_changed:
        console.print(f"  Starpin.toml entries updated: {result.manifest_sites_updated}")
    for w in result.warnings:
        console.print(f"  [yellow]![/] {escape(w)}")
    if result.mismatch is not None:
        console.print(f"  [red]x[/] {escape(result.mismatch.message)}")


# ── Update ───────────────────────────────────────────────────────────


@main.command()
@click.option("--star-frame", "star_frame_version", default=None, help="Target star_frame version")
@click.option("--dry-run", is_flag=True, help="Show what would change without writing")
@click.option("--dir", "project_dir", default=".", help="Project directory")
@_handle_errors
def update(star_frame_version: str | None, dry_run: bool, project_dir: str):
    """Update Star Frame dependencies in Cargo.toml."""
    from starpin.versions.resolver import resolve_dependency_versions
    from starpin.versions.updater import update_project

    console.print("\n[bold blue]starpin[/] Checking for dependency updates\n")

    versions = resolve_dependency_versions(star_frame_version=star_frame_version)
    report = update_project(project_dir, versions, dry_run=dry_run)

    for name, current in report.up_to_date.items():
        console.print(f"  [green]✓[/] {name} is up to date ({current})")

    if not report.has_updates:
        console.print("\n[green]All dependencies are up to date.[/]")
        return

    table = Table(title=f"Dependency Updates ({len(report.updates)})")
    table.add_column("Crate", style="cyan")
    table.add_column("Current", justify="right")
    table.add_column("Target", justify="right", style="green")
    for u in report.updates:
        table.add_row(u.name, u.current, u.target)
    console.print(table)

    if report.dry_run:
        console.print("\n[yellow]Dry run: no changes written.[/]")
    else:
        console.print(f"\n[green]Updated[/] {report.cargo_path}")
        console.print("  Run 'cargo update' to refresh Cargo.lock")


# ── Clean ────────────────────────────────────────────────────────────


@main.command()
@click.option("--dir", "project_dir", default=".", help="Project directory")
@_handle_errors
def clean(project_dir: str):
    """Remove build artifacts, keeping program keypairs."""
    from starpin.utils.cleanup import clean_project

    cleaned = clean_project(project_dir)
    if not cleaned:
        console.print("[green]Project is already clean.[/]")
        return

    console.print("[green]Removed:[/]")
    for item in cleaned:
        console.print(f"  - {item}")
    console.print("[dim]Program keypairs preserved.[/]")


# ── Network ──────────────────────────────────────────────────────────


@main.command()
@click.argument("cluster", required=False)
def network(cluster: str | None):
    """Show the Solana CLI configuration and the known networks.

    With CLUSTER (e.g. localhost, devnet, mainnet), print that cluster's
    canonical name and RPC URL instead.
    """
    from starpin.utils.network import NETWORKS, lookup_network, solana_config

    if cluster:
        net = lookup_network(cluster)
        console.print(f"[cyan]{net.name}[/]  {net.url}")
        console.print(f"\nSet it with: solana config set --url {net.url}")
        return

    config = solana_config()
    if config.available:
        console.print(Panel(escape(config.output.rstrip()), title="Solana Config"))
        return

    console.print(f"[yellow]Could not get Solana config:[/] {escape(config.error)}")

    table = Table(title="Available Networks")
    table.add_column("Name", style="cyan")
    table.add_column("RPC URL")
    table.add_column("Description", style="dim")
    for net in NETWORKS.values():
        table.add_row(net.name, net.url, net.description)
    console.print(table)
    console.print("\nSet the network with: solana config set --url <network>")


if __name__ == "__main__":
    main()
