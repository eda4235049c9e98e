"""Error kinds raised by leasevm.

Callers should be able to tell apart:
AuthenticationFailed, which is fatal when a Session is built.
ServerNotFound, which means the provider does not know the id.
ActionFailed, which means a provider action did not succeed. When it was
raised while booting, it also tells what state the server was left in and
whether the rollback itself failed (see ``cause``).
"""

from .types import Fault


class LeaseVMError(Exception):
    """Base class for all leasevm exceptions."""


class ConfigError(LeaseVMError):
    """Raised when required configuration is missing or malformed."""


class AuthenticationFailed(LeaseVMError):
    """Raised when the cloud rejects the credentials at session construction."""


class FingerprintUnavailable(LeaseVMError):
    """Raised when the orchestrator identity is not known yet."""


class ServerNotFound(LeaseVMError):
    """Raised when looking up a server id the provider does not recognize."""

    def __init__(self, server_id: str):
        super().__init__(f"No such server running: {server_id}")
        self.server_id = server_id


class ResourceNotFound(LeaseVMError):
    """Raised when a network, image, flavor or pool cannot be resolved."""


class ActionFailed(LeaseVMError):
    """A provider action (create, delete, attach) did not succeed.

    :param message: Human readable description
    :param status: Server status when raised during provisioning
    :param vm_state: Server vm_state when raised during provisioning
    :param fault: Structured fault reported by the provider, if any
    :param cause: Secondary failure, e.g. the rollback that also failed
    """

    def __init__(
        self,
        message: str,
        *,
        status: str | None = None,
        vm_state: str | None = None,
        fault: Fault | None = None,
        cause: "ActionFailed | None" = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.vm_state = vm_state
        self.fault = fault
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}; caused by: {self.cause}"


class UntaggedRequest(AssertionError):
    """A server request reached submission without the ownership marker.

    This is a programming error and is never handled by leasevm itself.
    """


def chain_errors(errors: list[ActionFailed]) -> ActionFailed:
    """Link errors through ``cause``; the first one is primary."""
    for outer, inner in zip(errors, errors[1:]):
        outer.cause = inner
    return errors[0]
