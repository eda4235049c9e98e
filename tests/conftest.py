"""Shared fixtures: a mocked cloud for unit tests, a real one for integration tests."""

from types import SimpleNamespace
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from leasevm.ownership import FINGERPRINT_KEY
from leasevm.providers import OpenStackProvider, get_provider

FINGERPRINT = "https://ci.example.com/"


def pytest_addoption(parser):
    parser.addoption(
        "--cloud",
        action="store_true",
        default=False,
        help="Run integration tests against the cloud configured in .env",
    )


def make_server(
    status: str = "ACTIVE",
    *,
    ours: bool = True,
    metadata: dict | None = None,
    addresses: dict | None = None,
    fault: dict | None = None,
    vm_state: str | None = "active",
    server_id: str | None = None,
    name: str = "worker",
):
    if metadata is None:
        metadata = {FINGERPRINT_KEY: FINGERPRINT} if ours else {}
    return SimpleNamespace(
        id=server_id or uuid4().hex,
        name=name,
        status=status,
        vm_state=vm_state,
        fault=fault,
        metadata=metadata,
        addresses=addresses or {},
    )


def make_ip(port_id: str | None = None, address: str = "203.0.113.9"):
    return SimpleNamespace(id=uuid4().hex, floating_ip_address=address, port_id=port_id)


def named(*names: str) -> list:
    return [SimpleNamespace(id=f"id-{n}", name=n) for n in names]


@pytest.fixture
def session():
    """Stand-in for an authenticated Session; compute/network/image are mocks."""
    s = MagicMock()
    s.network.networks.return_value = []
    s.network.ports.return_value = []
    s.network.ips.return_value = []
    return s


@pytest.fixture
def provider(session) -> OpenStackProvider:
    return OpenStackProvider(session, FINGERPRINT, boot_timeout=60, wait_interval=0)


@pytest.fixture(scope="session")
def live_provider(request) -> OpenStackProvider:
    if not request.config.getoption("--cloud"):
        pytest.skip("needs --cloud")
    return get_provider()
