"""Block and cluster management commands."""

import click
from mahallu.cli.error_handling import handle_domain_error
from mahallu.domain.errors import DomainError
from mahallu.domain.hierarchy import HierarchyService


@click.group("block")
def block_group():
    """Manage blocks."""
    pass


@block_group.command("create")
@click.argument("name", metavar="BLOCK_NAME")
@click.pass_context
def create_block(ctx, name: str):
    """Create a block with clusters A, B, C and D.

    Creating a block that already exists leaves it unchanged.

    Examples:
        mahallu block create "North"
    """
    service = HierarchyService(ctx.obj["store"])

    try:
        block = service.create_block(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    clusters = ", ".join(c.name for c in block.clusters)
    click.echo(f"Block '{block.name}' (clusters: {clusters})")


@block_group.command("list")
@click.pass_context
def list_blocks(ctx):
    """List blocks with their clusters."""
    service = HierarchyService(ctx.obj["store"])

    blocks = service.list_blocks()
    if not blocks:
        click.echo("No blocks found.")
        return

    click.echo("\nBlocks:")
    click.echo("-" * 60)
    for block in blocks:
        clusters = ", ".join(sorted(c.name for c in block.clusters)) or "-"
        click.echo(f"{block.name:20s} | Clusters: {clusters}")


@block_group.command("delete")
@click.argument("name", metavar="BLOCK_NAME")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_block(ctx, name: str, yes: bool):
    """Delete a block with its clusters, members and their transactions."""
    service = HierarchyService(ctx.obj["store"])

    try:
        block = service.get_block(name)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(
        f"Delete block '{block.name}' with all of its clusters, members and transactions?"
    ):
        click.echo("Deletion cancelled.")
        return

    service.delete_block(block.name)
    click.echo(f"Deleted block '{block.name}'")


@click.group("cluster")
def cluster_group():
    """Manage clusters within blocks."""
    pass


@cluster_group.command("add")
@click.argument("block_name", metavar="BLOCK_NAME")
@click.argument("cluster_name", metavar="CLUSTER_NAME")
@click.pass_context
def add_cluster(ctx, block_name: str, cluster_name: str):
    """Add a cluster to a block.

    Examples:
        mahallu cluster add "North" E
    """
    service = HierarchyService(ctx.obj["store"])

    try:
        cluster = service.create_cluster(block_name, cluster_name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created cluster '{cluster.name}' in block '{block_name}'")


@cluster_group.command("delete")
@click.argument("block_name", metavar="BLOCK_NAME")
@click.argument("cluster_name", metavar="CLUSTER_NAME")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_cluster(ctx, block_name: str, cluster_name: str, yes: bool):
    """Delete a cluster with its members and their transactions."""
    service = HierarchyService(ctx.obj["store"])

    try:
        block, cluster = service.get_cluster(block_name, cluster_name)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(
        f"Delete cluster '{cluster.name}' of block '{block.name}' with all of its members and transactions?"
    ):
        click.echo("Deletion cancelled.")
        return

    service.delete_cluster(block.name, cluster.name)
    click.echo(f"Deleted cluster '{cluster.name}' of block '{block.name}'")


def register_commands(cli):
    """Register block and cluster commands with main CLI."""
    cli.add_command(block_group)
    cli.add_command(cluster_group)
