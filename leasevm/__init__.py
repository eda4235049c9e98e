"""leasevm - lease ephemeral worker VMs from an OpenStack cloud."""

from .cli import app
from .errors import (
    ActionFailed,
    AuthenticationFailed,
    ConfigError,
    FingerprintUnavailable,
    LeaseVMError,
    ResourceNotFound,
    ServerNotFound,
    UntaggedRequest,
)
from .floating_ips import FloatingIPManager, get_public_address
from .inventory import Inventory
from .lifecycle import Lifecycle
from .ownership import FINGERPRINT_KEY, OwnershipFilter
from .providers import OpenStackProvider, get_provider
from .session import Session, split_identity
from .types import FloatingIPAssignment, InstanceListItem, ServerRequest, ServerStatus
from .utils import error, log, setup_logging, warn

__all__ = [
    "OpenStackProvider",
    "get_provider",
    "Session",
    "split_identity",
    "OwnershipFilter",
    "FINGERPRINT_KEY",
    "Inventory",
    "Lifecycle",
    "FloatingIPManager",
    "get_public_address",
    "app",
    "log",
    "warn",
    "error",
    "setup_logging",
    "ActionFailed",
    "AuthenticationFailed",
    "ConfigError",
    "FingerprintUnavailable",
    "LeaseVMError",
    "ResourceNotFound",
    "ServerNotFound",
    "UntaggedRequest",
    "FloatingIPAssignment",
    "InstanceListItem",
    "ServerRequest",
    "ServerStatus",
]
