"""Type definitions for leasevm."""

import base64
from dataclasses import dataclass, field
from typing import Any, Literal, TypedDict, get_args

ServerStatus = Literal[
    "ACTIVE",
    "BUILD",
    "DELETED",
    "ERROR",
    "HARD_REBOOT",
    "MIGRATING",
    "PASSWORD",
    "PAUSED",
    "REBOOT",
    "REBUILD",
    "RESCUE",
    "RESIZE",
    "REVERT_RESIZE",
    "SHELVED",
    "SHELVED_OFFLOADED",
    "SHUTOFF",
    "SOFT_DELETED",
    "SUSPENDED",
    "UNKNOWN",
    "VERIFY_RESIZE",
]

KNOWN_STATUSES: frozenset[str] = frozenset(get_args(ServerStatus))

# Statuses in which a server no longer holds a worker slot.
FREE_STATUSES: frozenset[str] = frozenset({"UNKNOWN", "MIGRATING", "SHUTOFF", "DELETED"})

AssignOutcome = Literal["assigned", "attach_failed", "cleanup_failed"]


class Fault(TypedDict, total=False):
    """Fault reported by the compute service for a failed server."""

    code: int
    message: str
    details: str


class InstanceListItem(TypedDict):
    """Instance information in list results."""

    id: str
    name: str
    ip: str
    status: str


@dataclass
class ServerRequest:
    """Everything needed to ask the compute service for one server.

    Built by the caller from catalog choices; the lifecycle stamps the
    ownership marker into ``metadata`` before submission.
    """

    name: str
    image_id: str
    flavor_id: str
    network_ids: list[str] = field(default_factory=list)
    key_name: str | None = None
    user_data: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)

    def add_metadata_item(self, key: str, value: str) -> "ServerRequest":
        self.metadata[key] = value
        return self

    def to_create_kwargs(self) -> dict[str, Any]:
        """:return: Keyword arguments for ``compute.create_server``"""
        kwargs: dict[str, Any] = {
            "name": self.name,
            "image_id": self.image_id,
            "flavor_id": self.flavor_id,
            "networks": [{"uuid": net_id} for net_id in self.network_ids],
            "metadata": dict(self.metadata),
        }
        if self.key_name:
            kwargs["key_name"] = self.key_name
        if self.user_data:
            kwargs["user_data"] = base64.b64encode(self.user_data.encode()).decode()
        return kwargs


@dataclass
class FloatingIPAssignment:
    """Result of a floating IP allocate+attach attempt.

    ``attach_failed`` means the allocation was released again and nothing
    leaked. ``cleanup_failed`` means the allocated IP could not be released
    and needs manual attention.
    """

    outcome: AssignOutcome
    floating_ip: Any
    error: Exception | None = None
    cleanup_error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.outcome == "assigned"
