"""Boot a server, wait for it, verify it, and destroy it on any failure.

A boot either returns a server confirmed ACTIVE or raises ActionFailed after
the server and its floating IPs were torn down again. When the teardown
fails as well, its error is attached as ``cause`` on the boot failure.
"""

from openstack import exceptions as os_exceptions

from .errors import ActionFailed, UntaggedRequest, chain_errors
from .floating_ips import FloatingIPManager
from .ownership import FINGERPRINT_KEY, OwnershipFilter
from .session import PROVIDER_ERRORS, Session
from .types import ServerRequest
from .utils import debug, logger


def describe_fault(fault) -> str:
    if not fault:
        return "none"
    return f"{fault.get('code')}: {fault.get('message')} ({fault.get('details')})"


class Lifecycle:
    """Provision/verify/rollback transaction for a single server.

    :param session: Authenticated session
    :param ownership: Filter providing the fingerprint stamped on new servers
    :param floating_ips: Used to release floating IPs when destroying
    :param wait_interval: Seconds between status polls while waiting
    """

    def __init__(
        self,
        session: Session,
        ownership: OwnershipFilter,
        floating_ips: FloatingIPManager,
        *,
        wait_interval: int = 2,
    ):
        self._session = session
        self._ownership = ownership
        self._floating_ips = floating_ips
        self._wait_interval = wait_interval

    def boot_and_wait_active(self, request: ServerRequest, timeout: int):
        """Provision a server and wait until it is ready.

        :param request: What to boot; gets the ownership marker added
        :param timeout: Seconds to wait for ACTIVE, passed as is to the SDK wait
        :return: Fresh server resource in ACTIVE status
        :raises ActionFailed: The server did not become ACTIVE (it is deleted in such case)
        """
        if timeout < 0:
            raise ValueError(f"timeout must not be negative, got {timeout}")

        debug("Booting machine %s", request.name)
        request.metadata = self._ownership.tag(request.metadata)
        server = self._submit_and_wait(request, timeout)
        debug("Machine started: %s", server.name)
        self._throw_if_failed(server)
        return server

    def _submit_and_wait(self, request: ServerRequest, timeout: int):
        if request.metadata.get(FINGERPRINT_KEY) != self._ownership.fingerprint():
            raise UntaggedRequest(f"Request for '{request.name}' was not tagged with '{FINGERPRINT_KEY}'")

        compute = self._session.compute
        try:
            server = compute.create_server(**request.to_create_kwargs())
        except PROVIDER_ERRORS as e:
            # Nothing was created, so there is nothing to roll back
            raise ActionFailed(f"Failed to create server {request.name}: {e}") from e
        try:
            try:
                return compute.wait_for_server(
                    server,
                    status="ACTIVE",
                    failures=["ERROR"],
                    interval=self._wait_interval,
                    wait=timeout,
                )
            except (os_exceptions.ResourceTimeout, os_exceptions.ResourceFailure) as e:
                debug("Stopped waiting for %s: %s", request.name, e)
            # The status is classified on a fresh copy
            return compute.get_server(server.id)
        except PROVIDER_ERRORS as e:
            self._rollback(server, ActionFailed(f"Failed to wait for server {request.name}: {e}"))

    def _throw_if_failed(self, server) -> None:
        status = server.status
        if status == "ACTIVE":
            return

        if status == "BUILD":
            msg = "Failed to boot server in time (consider extending timeout setting):"
        else:
            msg = "Failed to boot server:"
        msg += f" status={status} vmState={server.vm_state} fault={describe_fault(server.fault)}"

        self._rollback(
            server,
            ActionFailed(msg, status=status, vm_state=server.vm_state, fault=server.fault),
        )

    def _rollback(self, server, ex: ActionFailed):
        try:
            self.destroy_server(server)
        except ActionFailed as suppressed:
            ex.cause = suppressed
        logger.warning("Machine provisioning failed: %s", ex)
        raise ex

    def destroy_server(self, server) -> None:
        """Destroy the server and release its floating IPs.

        IP cleanup is attempted even when the delete fails; the delete
        failure is raised afterwards.

        :raises ActionFailed: The server could not be deleted or an IP released
        """
        debug("Destroying machine %s", server.name)
        # Not checking the fingerprint here, all servers handed to this
        # method are presumed ours.
        errors: list[ActionFailed] = []

        # Resolved before the delete, the ports vanish with the server.
        try:
            bound = self._floating_ips.bound_to(server)
        except PROVIDER_ERRORS as e:
            bound = []
            errors.append(ActionFailed(f"Failed to list floating IPs of {server.name}: {e}"))

        try:
            self._session.compute.delete_server(server)
        except PROVIDER_ERRORS as e:
            errors.insert(0, ActionFailed(f"Failed to delete server {server.name} ({server.id}): {e}"))
        else:
            debug("Machine destroyed: %s", server.name)

        for ip in bound:
            try:
                self._floating_ips.release(server, ip)
            except PROVIDER_ERRORS as e:
                errors.append(
                    ActionFailed(f"Failed to release floating IP {ip.floating_ip_address} ({ip.id}): {e}")
                )

        if errors:
            raise chain_errors(errors)
