#!/usr/bin/env python3
"""Lease worker VMs from an OpenStack cloud.

Prerequisites: LEASEVM_ENDPOINT, LEASEVM_IDENTITY (user:project),
LEASEVM_CREDENTIAL and LEASEVM_FINGERPRINT set in the environment or .env.

Usage: uv run leasevm <noun> <verb> [options]

Examples:
    uv run leasevm catalog images
    uv run leasevm instance create worker-1 --image debian-12 --flavor m1.small --network private
    uv run leasevm instance list
    uv run leasevm instance delete 6f1c7e0e-...
"""

import cyclopts
from rich import print
from rich.table import Table

from .errors import LeaseVMError
from .floating_ips import get_public_address
from .providers import OpenStackProvider, get_provider
from .session import PROVIDER_ERRORS
from .utils import error, log, setup_logging

app = cyclopts.App(
    name="leasevm", help="Lease worker VMs from an OpenStack cloud", sort_key=None
)

catalog_app = cyclopts.App(name="catalog", help="Browse networks, images and flavors", sort_key=1)
instance_app = cyclopts.App(name="instance", help="Manage leased instances", sort_key=2)

app.command(catalog_app)
app.command(instance_app)


def _print_catalog(title: str, resources: list) -> None:
    if not resources:
        log(f"No {title.lower()} found")
        return
    table = Table(title=title)
    table.add_column("NAME")
    table.add_column("ID")
    for r in resources:
        table.add_row(r.name or "", r.id)
    print(table)


def _print_server(server) -> None:
    print(f"  Name: {server.name}")
    print(f"  ID: {server.id}")
    print(f"  Status: {server.status}")
    print(f"  IP: {get_public_address(server) or 'N/A'}")


@catalog_app.command(name="networks")
def list_networks(*, region: str | None = None):
    """List networks sorted by name.

    :param region: Cloud region (default: LEASEVM_REGION)
    """
    _print_catalog("Networks", get_provider(region=region).get_sorted_networks())


@catalog_app.command(name="images")
def list_images(*, region: str | None = None):
    """List images sorted by name.

    :param region: Cloud region (default: LEASEVM_REGION)
    """
    _print_catalog("Images", get_provider(region=region).get_sorted_images())


@catalog_app.command(name="flavors")
def list_flavors(*, region: str | None = None):
    """List flavors sorted by name.

    :param region: Cloud region (default: LEASEVM_REGION)
    """
    _print_catalog("Flavors", get_provider(region=region).get_sorted_flavors())


@instance_app.command(name="create")
def create_instance(
    name: str,
    *,
    image: str,
    flavor: str,
    network: list[str] | None = None,
    key_name: str | None = None,
    floating_ip: bool = False,
    timeout: int | None = None,
    region: str | None = None,
):
    """Boot an instance and wait until it is ACTIVE.

    On any failure the instance and its floating IP are deleted again.

    :param name: Instance name
    :param image: Image name or id
    :param flavor: Flavor name or id
    :param network: Network name or id, repeat for several
    :param key_name: Keypair to inject
    :param floating_ip: Allocate and attach a floating IP
    :param timeout: Seconds to wait for ACTIVE (default: LEASEVM_BOOT_TIMEOUT or 600)
    :param region: Cloud region (default: LEASEVM_REGION)
    """
    p = get_provider(region=region, boot_timeout=timeout)
    request = p.build_request(
        name, image=image, flavor=flavor, networks=network, key_name=key_name
    )

    log(f"Booting instance '{name}' ('{flavor}', '{image}')...")
    server = p.create_instance(request, floating_ip=floating_ip)

    log("Instance ready!")
    _print_server(server)


@instance_app.command(name="list")
def list_instances(*, region: str | None = None):
    """List running instances owned by this orchestrator.

    :param region: Cloud region (default: LEASEVM_REGION)
    """
    p = get_provider(region=region)
    instances = p.list_instances()

    if not instances:
        log("No instances found")
        return

    table = Table()
    for column in ["NAME", "ID", "IP ADDRESS", "STATUS"]:
        table.add_column(column)
    for i in instances:
        table.add_row(i["name"], i["id"], i["ip"], i["status"])
    print(table)


@instance_app.command(name="show")
def show_instance(server_id: str, *, region: str | None = None):
    """Show fresh details of an instance.

    :param server_id: Instance id
    :param region: Cloud region (default: LEASEVM_REGION)
    """
    _print_server(get_provider(region=region).get_server_by_id(server_id))


def _owned_server(p: OpenStackProvider, server_id: str):
    server = p.get_server_by_id(server_id)
    if not p.ownership.is_ours(server):
        error(f"Instance '{server_id}' was not created by this orchestrator")
    return server


@instance_app.command(name="delete")
def delete_instance(server_id: str, *, force: bool = False, region: str | None = None):
    """Delete an instance and release its floating IPs.

    :param server_id: Instance id
    :param force: Skip confirmation prompt
    :param region: Cloud region (default: LEASEVM_REGION)
    """
    p = get_provider(region=region)
    server = _owned_server(p, server_id)

    print("[yellow]Instance to delete:[/yellow]")
    _print_server(server)

    if not force:
        confirm = input("Delete this instance? (yes/no): ")
        if confirm != "yes":
            log("Cancelled")
            return

    log("Deleting instance...")
    p.destroy_server(server)
    log("Instance deleted")


@instance_app.command(name="assign-ip")
def assign_ip(server_id: str, *, region: str | None = None):
    """Allocate a floating IP and attach it to an instance.

    :param server_id: Instance id
    :param region: Cloud region (default: LEASEVM_REGION)
    """
    p = get_provider(region=region)
    server = _owned_server(p, server_id)
    ip = p.assign_floating_ip(server)
    log(f"Floating IP {ip.floating_ip_address} assigned to '{server.name}'")


def main() -> None:
    setup_logging()
    try:
        app()
    except (LeaseVMError, *PROVIDER_ERRORS) as e:
        error(str(e))


if __name__ == "__main__":
    main()
