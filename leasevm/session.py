"""Authenticated connection to the OpenStack cloud."""

from keystoneauth1 import exceptions as ks_exceptions
from openstack import connection
from openstack import exceptions as os_exceptions

from .errors import AuthenticationFailed
from .utils import debug

# Anything the SDK or its transport raises for a failed call.
PROVIDER_ERRORS = (os_exceptions.SDKException, ks_exceptions.ClientException)


def split_identity(identity: str) -> tuple[str, str]:
    """Split a ``principal:project`` identity on the first colon.

    A missing colon yields an empty project instead of failing, so a bare
    user name still reaches keystone and fails there if a project is needed.

    :param identity: Compound identity string
    :return: (principal, project)
    """
    principal, _, project = identity.partition(":")
    return principal, project


class Session:
    """Authenticated handle to the cloud, built once and shared.

    Holds nothing but the SDK connection, so it is safe to share between
    threads running independent provisioning operations.
    """

    def __init__(
        self,
        endpoint: str,
        identity: str,
        credential: str,
        region: str | None = None,
        *,
        domain: str = "Default",
    ):
        principal, project = split_identity(identity)
        self._endpoint = endpoint
        self._region = region
        self._principal = principal
        self._project = project

        try:
            self._conn = connection.Connection(
                auth_url=endpoint,
                username=principal,
                password=credential,
                project_name=project,
                user_domain_name=domain,
                project_domain_name=domain,
                region_name=region,
            )
            self._conn.authorize()
        except PROVIDER_ERRORS as e:
            raise AuthenticationFailed(
                f"Authentication to '{endpoint}' as '{principal}' failed: {e}"
            ) from e

        debug("OpenStack client created for %s", endpoint)

    def __repr__(self) -> str:
        return (
            f"Session(endpoint={self._endpoint!r}, principal={self._principal!r}, "
            f"project={self._project!r}, region={self._region!r})"
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def region(self) -> str | None:
        return self._region

    @property
    def principal(self) -> str:
        return self._principal

    @property
    def project(self) -> str:
        return self._project

    @property
    def compute(self):
        return self._conn.compute

    @property
    def image(self):
        return self._conn.image

    @property
    def network(self):
        return self._conn.network
