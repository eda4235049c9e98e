"""Floating IP allocation, attachment and release."""

from .errors import ActionFailed, ResourceNotFound
from .inventory import sort_by_name
from .session import Session
from .types import FloatingIPAssignment
from .utils import debug, warn

ADDRESS_TYPE_KEY = "OS-EXT-IPS:type"


def get_public_address(server) -> str | None:
    """Extract public address from server info.

    :param server: Server resource with ``addresses`` keyed by network name
    :return: Floating IP, if there is none the last fixed IP, None if there is none either
    """
    fixed = None
    for addresses in (server.addresses or {}).values():
        for addr in addresses:
            if addr.get(ADDRESS_TYPE_KEY) == "floating":
                return addr.get("addr")
            fixed = addr.get("addr")

    # No floating IP found - use fixed
    return fixed


class FloatingIPManager:
    """Allocates floating IPs from a pool and binds them to server ports.

    :param session: Authenticated session
    :param pool: External network name or id, default: first external network by name
    """

    def __init__(self, session: Session, *, pool: str | None = None):
        self._session = session
        self._pool = pool

    def _pool_network(self):
        externals = sort_by_name(self._session.network.networks(is_router_external=True))
        if self._pool:
            match = next(
                (n for n in externals if self._pool in (n.id, n.name)), None
            )
            if match is None:
                raise ResourceNotFound(f"No external network '{self._pool}' to allocate floating IPs from")
            return match
        if not externals:
            raise ResourceNotFound("No external network available to allocate floating IPs from")
        return externals[0]

    def _server_ports(self, server) -> list:
        return list(self._session.network.ports(device_id=server.id))

    def try_assign(self, server) -> FloatingIPAssignment:
        """Allocate a floating IP and attach it, releasing it again if the attach fails.

        The attach is not retried.

        :param server: Server to attach to
        :return: Assignment result; ``outcome`` tells whether cleanup was needed and worked
        """
        network = self._session.network
        debug("Allocating floating IP for %s", server.name)
        pool = self._pool_network()
        ip = network.create_ip(floating_network_id=pool.id)
        debug("Floating IP allocated %s", ip.floating_ip_address)

        try:
            debug("Assigning floating IP to %s", server.name)
            ports = self._server_ports(server)
            if not ports:
                raise ActionFailed(f"Server '{server.name}' has no port to attach a floating IP to")
            ip = network.update_ip(ip, port_id=ports[0].id)
            debug("Floating IP assigned")
        except Exception as attach_error:
            try:
                network.delete_ip(ip)
            except Exception as cleanup_error:
                warn(
                    f"Floating IP {ip.floating_ip_address} ({ip.id}) could not be released "
                    f"after failed attach: {cleanup_error}"
                )
                return FloatingIPAssignment("cleanup_failed", ip, attach_error, cleanup_error)
            debug("Floating IP deallocated after failed attach: %s", ip.floating_ip_address)
            return FloatingIPAssignment("attach_failed", ip, attach_error)

        return FloatingIPAssignment("assigned", ip)

    def assign(self, server):
        """Allocate and attach a floating IP.

        :param server: Server to attach to
        :return: The bound floating IP
        :raises Exception: The original attach error, once the allocation was released
        :raises ActionFailed: If the attach failed and the allocation could not be released
        """
        result = self.try_assign(server)
        if result.outcome == "attach_failed":
            raise result.error
        if result.outcome == "cleanup_failed":
            ip = result.floating_ip
            raise ActionFailed(
                f"Failed to attach floating IP {ip.floating_ip_address} to {server.name}: "
                f"{result.error}; the IP ({ip.id}) is still allocated",
                cause=ActionFailed(f"Failed to deallocate floating IP {ip.id}: {result.cleanup_error}"),
            ) from result.error
        return result.floating_ip

    def bound_to(self, server) -> list:
        """Floating IPs currently bound to one of the server's ports."""
        port_ids = {port.id for port in self._server_ports(server)}
        return [ip for ip in self._session.network.ips() if ip.port_id in port_ids]

    def release(self, server, ip) -> None:
        """Detach the floating IP from the server, then deallocate it."""
        network = self._session.network
        fip = ip.floating_ip_address
        debug("Removing floating IP %s of %s", fip, server.name)
        network.update_ip(ip, port_id=None)
        debug("Floating IP removed: %s", fip)
        network.delete_ip(ip)
        debug("Floating IP deallocated: %s", fip)
