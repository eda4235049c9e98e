"""OpenStack provider: one object exposing every leasevm operation.

For server manipulation this provider fingerprints the metadata of each
machine it boots, so it never touches servers it does not own. In other
words it pretends that there are no other machines running in the tenant.
"""

from .config import Settings, load_settings
from .errors import ActionFailed, LeaseVMError, chain_errors
from .floating_ips import FloatingIPManager, get_public_address
from .inventory import Inventory
from .lifecycle import Lifecycle
from .ownership import OwnershipFilter
from .session import PROVIDER_ERRORS, Session
from .types import FloatingIPAssignment, InstanceListItem, ServerRequest
from .utils import log


class OpenStackProvider:
    def __init__(
        self,
        session: Session,
        fingerprint: str | None,
        *,
        boot_timeout: int,
        floating_pool: str | None = None,
        wait_interval: int = 2,
    ):
        self.session = session
        self.boot_timeout = boot_timeout
        self.ownership = OwnershipFilter(fingerprint)
        self.inventory = Inventory(session, self.ownership)
        self.floating_ips = FloatingIPManager(session, pool=floating_pool)
        self.lifecycle = Lifecycle(
            session, self.ownership, self.floating_ips, wait_interval=wait_interval
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenStackProvider":
        session = Session(
            settings.endpoint,
            settings.identity,
            settings.credential,
            settings.region,
            domain=settings.domain,
        )
        return cls(
            session,
            settings.fingerprint,
            boot_timeout=settings.boot_timeout,
            floating_pool=settings.floating_pool,
        )

    def get_sorted_networks(self) -> list:
        return self.inventory.sorted_networks()

    def get_sorted_images(self) -> list:
        return self.inventory.sorted_images()

    def get_sorted_flavors(self) -> list:
        return self.inventory.sorted_flavors()

    def get_running_nodes(self) -> list:
        return self.inventory.running_nodes()

    def get_server_by_id(self, server_id: str):
        return self.inventory.get_server_by_id(server_id)

    def update_info(self, server):
        return self.inventory.update_info(server)

    def build_request(
        self,
        name: str,
        *,
        image: str,
        flavor: str,
        networks: list[str] | None = None,
        key_name: str | None = None,
        user_data: str | None = None,
    ) -> ServerRequest:
        """Resolve catalog names or ids into a server request.

        :param name: Server name
        :param image: Image name or id
        :param flavor: Flavor name or id
        :param networks: Network names or ids, default: let the cloud choose
        :param key_name: Keypair to inject
        :param user_data: Cloud-init user data (plain text)
        :return: Untagged request, ready for :meth:`boot_and_wait_active`
        :raises ResourceNotFound: If a name does not resolve
        """
        return ServerRequest(
            name=name,
            image_id=self.inventory.find_image(image).id,
            flavor_id=self.inventory.find_flavor(flavor).id,
            network_ids=[self.inventory.find_network(n).id for n in networks or []],
            key_name=key_name,
            user_data=user_data,
        )

    def boot_and_wait_active(self, request: ServerRequest, timeout: int | None = None):
        if timeout is None:
            timeout = self.boot_timeout
        return self.lifecycle.boot_and_wait_active(request, timeout)

    def destroy_server(self, server) -> None:
        self.lifecycle.destroy_server(server)

    def assign_floating_ip(self, server):
        return self.floating_ips.assign(server)

    def try_assign_floating_ip(self, server) -> FloatingIPAssignment:
        return self.floating_ips.try_assign(server)

    def create_instance(
        self,
        request: ServerRequest,
        *,
        floating_ip: bool = False,
        timeout: int | None = None,
    ):
        """Boot a server and optionally give it a floating IP.

        Anything failing after the boot (pool lookup, allocation, attach or
        the final refresh) destroys the server and its floating IPs before
        the error propagates, so nothing is left behind.

        :return: Fresh server resource
        :raises ActionFailed: Boot or floating IP assignment failed
        """
        server = self.boot_and_wait_active(request, timeout)
        if not floating_ip:
            return server

        try:
            result = self.try_assign_floating_ip(server)
            if result.ok:
                log(f"Floating IP {result.floating_ip.floating_ip_address} assigned to '{server.name}'")
                return self.update_info(server)

            errors = [ActionFailed(f"Failed to assign floating IP to {server.name}: {result.error}")]
            if result.outcome == "cleanup_failed":
                errors.append(
                    ActionFailed(
                        f"Failed to deallocate floating IP {result.floating_ip.id}: {result.cleanup_error}"
                    )
                )
            failure = result.error
        except (LeaseVMError, *PROVIDER_ERRORS) as e:
            errors = [ActionFailed(f"Failed to finish provisioning {server.name}: {e}")]
            failure = e

        try:
            self.destroy_server(server)
        except ActionFailed as destroy_error:
            errors.append(destroy_error)
        raise chain_errors(errors) from failure

    def list_instances(self) -> list[InstanceListItem]:
        return [
            {
                "id": s.id,
                "name": s.name,
                "ip": get_public_address(s) or "N/A",
                "status": s.status,
            }
            for s in self.get_running_nodes()
        ]

    @staticmethod
    def get_public_address(server) -> str | None:
        return get_public_address(server)


def get_provider(
    *,
    region: str | None = None,
    fingerprint: str | None = None,
    boot_timeout: int | None = None,
    floating_pool: str | None = None,
) -> OpenStackProvider:
    """Get a provider built from .env/environment settings with overrides applied."""
    settings = load_settings(
        region=region,
        fingerprint=fingerprint,
        boot_timeout=boot_timeout,
        floating_pool=floating_pool,
    )
    return OpenStackProvider.from_settings(settings)
