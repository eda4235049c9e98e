"""Configuration loaded from .env and the environment."""

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError

DEFAULT_BOOT_TIMEOUT = 600


@dataclass(frozen=True)
class Settings:
    endpoint: str
    identity: str
    credential: str
    region: str | None = None
    domain: str = "Default"
    fingerprint: str | None = None
    boot_timeout: int = DEFAULT_BOOT_TIMEOUT
    floating_pool: str | None = None

    def __repr__(self) -> str:
        # The credential must never end up in logs or tracebacks.
        return (
            f"Settings(endpoint={self.endpoint!r}, identity={self.identity!r}, "
            f"region={self.region!r}, domain={self.domain!r}, "
            f"fingerprint={self.fingerprint!r}, boot_timeout={self.boot_timeout!r}, "
            f"floating_pool={self.floating_pool!r})"
        )


def _getenv(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


def _parse_timeout(raw: str | None) -> int:
    if raw is None:
        return DEFAULT_BOOT_TIMEOUT
    try:
        timeout = int(raw)
    except ValueError:
        raise ConfigError(f"LEASEVM_BOOT_TIMEOUT must be an integer, got '{raw}'") from None
    if timeout < 0:
        raise ConfigError(f"LEASEVM_BOOT_TIMEOUT must not be negative, got {timeout}")
    return timeout


def load_settings(**overrides) -> Settings:
    """Load settings from the nearest .env file above the working directory
    and from environment variables.

    Explicit keyword overrides win over the environment; ``None`` overrides
    are ignored so CLI options can be passed straight through.

    :param overrides: Field values for :class:`Settings`
    :return: Populated settings
    :raises ConfigError: If endpoint, identity or credential is missing
    """
    load_dotenv(find_dotenv(usecwd=True))

    settings = {
        "endpoint": _getenv("LEASEVM_ENDPOINT", "OS_AUTH_URL"),
        "identity": _getenv("LEASEVM_IDENTITY"),
        "credential": _getenv("LEASEVM_CREDENTIAL", "OS_PASSWORD"),
        "region": _getenv("LEASEVM_REGION", "OS_REGION_NAME"),
        "domain": _getenv("LEASEVM_DOMAIN") or "Default",
        "fingerprint": _getenv("LEASEVM_FINGERPRINT"),
        "boot_timeout": _parse_timeout(_getenv("LEASEVM_BOOT_TIMEOUT")),
        "floating_pool": _getenv("LEASEVM_FLOATING_POOL"),
    }
    settings.update({k: v for k, v in overrides.items() if v is not None})

    missing = [
        var
        for key, var in [
            ("endpoint", "LEASEVM_ENDPOINT"),
            ("identity", "LEASEVM_IDENTITY"),
            ("credential", "LEASEVM_CREDENTIAL"),
        ]
        if not settings[key]
    ]
    if missing:
        raise ConfigError(
            f"Missing configuration: {', '.join(missing)}\n"
            "Set them in the environment or in a .env file."
        )

    return Settings(**settings)

