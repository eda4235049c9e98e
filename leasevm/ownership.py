"""Ownership fingerprinting of servers in a shared tenant.

Every server booted through leasevm carries the orchestrator fingerprint in
its metadata. Filtering on it lets the rest of leasevm pretend there are no
other machines running in the tenant.
"""

from .errors import FingerprintUnavailable
from .types import FREE_STATUSES, KNOWN_STATUSES
from .utils import warn

FINGERPRINT_KEY = "leasevm-instance"


class OwnershipFilter:
    def __init__(self, fingerprint: str | None):
        self._fingerprint = fingerprint

    def fingerprint(self) -> str:
        """Identification for servers launched by this orchestrator.

        :return: Identifier to filter servers we control
        :raises FingerprintUnavailable: If the orchestrator identity is not known
        """
        if not self._fingerprint:
            raise FingerprintUnavailable(
                "Orchestrator fingerprint is not configured (set LEASEVM_FINGERPRINT)"
            )
        return self._fingerprint

    def tag(self, metadata: dict[str, str]) -> dict[str, str]:
        """Return a copy of metadata carrying the ownership marker."""
        return {**metadata, FINGERPRINT_KEY: self.fingerprint()}

    def is_ours(self, server) -> bool:
        metadata = server.metadata or {}
        return self.fingerprint() == metadata.get(FINGERPRINT_KEY)

    @staticmethod
    def is_occupied(server) -> bool:
        """Determine whether the server holds a worker slot.

        An unrecognized status counts as occupied so a live machine is never
        mistaken for a dead one and leaked.
        """
        status = (server.status or "").upper()
        if status in FREE_STATUSES:
            return False
        if status not in KNOWN_STATUSES:
            warn(f"Server status '{server.status}' not recognized, treating as occupied: {server.id}")
        return True
