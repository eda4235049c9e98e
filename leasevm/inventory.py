"""Read-only queries against the cloud catalogs and server list."""

from openstack import exceptions as os_exceptions

from .errors import ResourceNotFound, ServerNotFound
from .ownership import OwnershipFilter
from .session import Session


def _by_name(resource) -> str:
    # Plain code point ordering, not locale aware.
    return resource.name or ""


def sort_by_name(resources) -> list:
    return sorted(resources, key=_by_name)


def _find(resources: list, name_or_id: str, kind: str):
    match = next((r for r in resources if r.id == name_or_id), None)
    if match is None:
        match = next((r for r in resources if r.name == name_or_id), None)
    if match is None:
        names = ", ".join(r.name or r.id for r in resources)
        raise ResourceNotFound(f"No {kind} named '{name_or_id}' (available: {names or 'none'})")
    return match


class Inventory:
    """Catalog and server queries. Nothing is cached, every call hits the cloud."""

    def __init__(self, session: Session, ownership: OwnershipFilter):
        self._session = session
        self._ownership = ownership

    def sorted_networks(self) -> list:
        return sort_by_name(self._session.network.networks())

    def sorted_images(self) -> list:
        return sort_by_name(self._session.image.images())

    def sorted_flavors(self) -> list:
        return sort_by_name(self._session.compute.flavors(details=True))

    def find_network(self, name_or_id: str):
        return _find(self.sorted_networks(), name_or_id, "network")

    def find_image(self, name_or_id: str):
        return _find(self.sorted_images(), name_or_id, "image")

    def find_flavor(self, name_or_id: str):
        return _find(self.sorted_flavors(), name_or_id, "flavor")

    def running_nodes(self) -> list:
        """Servers that are both occupied and ours, in no particular order."""
        # Details are needed to inspect status and metadata
        return [
            server
            for server in self._session.compute.servers(details=True)
            if self._ownership.is_occupied(server) and self._ownership.is_ours(server)
        ]

    def get_server_by_id(self, server_id: str):
        """Fetch a fresh copy of the server.

        :param server_id: Server id
        :return: Server resource
        :raises ServerNotFound: If the cloud does not know the id
        """
        try:
            server = self._session.compute.get_server(server_id)
        except os_exceptions.NotFoundException:
            raise ServerNotFound(server_id) from None
        if server is None:
            raise ServerNotFound(server_id)
        return server

    def update_info(self, server):
        """Fetch updated info about the server."""
        return self.get_server_by_id(server.id)
