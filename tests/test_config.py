import os

import pytest

from leasevm.config import DEFAULT_BOOT_TIMEOUT, load_settings
from leasevm.errors import ConfigError

ENV_VARS = [
    "LEASEVM_ENDPOINT",
    "OS_AUTH_URL",
    "LEASEVM_IDENTITY",
    "LEASEVM_CREDENTIAL",
    "OS_PASSWORD",
    "LEASEVM_REGION",
    "OS_REGION_NAME",
    "LEASEVM_DOMAIN",
    "LEASEVM_FINGERPRINT",
    "LEASEVM_BOOT_TIMEOUT",
    "LEASEVM_FLOATING_POOL",
]


def isolate_env(monkeypatch, path):
    # No stray .env from the working directory
    monkeypatch.chdir(path)
    # setenv first so monkeypatch restores the variables load_dotenv may write
    for var in ENV_VARS:
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    isolate_env(monkeypatch, tmp_path)


@pytest.fixture
def base_env(monkeypatch):
    monkeypatch.setenv("LEASEVM_ENDPOINT", "https://keystone:5000/v3")
    monkeypatch.setenv("LEASEVM_IDENTITY", "alice:ci")
    monkeypatch.setenv("LEASEVM_CREDENTIAL", "s3cret")


def test_load_settings_defaults(base_env):
    settings = load_settings()
    assert settings.endpoint == "https://keystone:5000/v3"
    assert settings.identity == "alice:ci"
    assert settings.region is None
    assert settings.domain == "Default"
    assert settings.fingerprint is None
    assert settings.boot_timeout == DEFAULT_BOOT_TIMEOUT
    assert "s3cret" not in repr(settings)


def test_openstack_fallback_variables(monkeypatch):
    monkeypatch.setenv("OS_AUTH_URL", "https://os:5000/v3")
    monkeypatch.setenv("OS_PASSWORD", "pw")
    monkeypatch.setenv("OS_REGION_NAME", "RegionTwo")
    monkeypatch.setenv("LEASEVM_IDENTITY", "bob:proj")
    settings = load_settings()
    assert (settings.endpoint, settings.credential, settings.region) == (
        "https://os:5000/v3",
        "pw",
        "RegionTwo",
    )


def test_overrides_win_and_none_is_ignored(base_env, monkeypatch):
    monkeypatch.setenv("LEASEVM_REGION", "RegionOne")
    monkeypatch.setenv("LEASEVM_BOOT_TIMEOUT", "30")
    settings = load_settings(region=None, boot_timeout=0, fingerprint="https://ci/")
    assert settings.region == "RegionOne"
    assert settings.boot_timeout == 0
    assert settings.fingerprint == "https://ci/"


def test_dotenv_file_is_read(tmp_path):
    (tmp_path / ".env").write_text(
        "LEASEVM_ENDPOINT=https://from-dotenv\n"
        "LEASEVM_IDENTITY=carol:dev\n"
        "LEASEVM_CREDENTIAL=pw\n"
        "LEASEVM_FINGERPRINT=https://ci.example.com/\n"
    )
    settings = load_settings()
    assert settings.endpoint == "https://from-dotenv"
    assert settings.fingerprint == "https://ci.example.com/"


def test_dotenv_values_do_not_outlive_the_test(tmp_path):
    (tmp_path / ".env").write_text(
        "LEASEVM_ENDPOINT=https://from-dotenv\n"
        "LEASEVM_IDENTITY=carol:dev\n"
        "LEASEVM_CREDENTIAL=pw\n"
    )
    with pytest.MonkeyPatch.context() as mp:
        isolate_env(mp, tmp_path)
        load_settings()
        assert os.environ["LEASEVM_ENDPOINT"] == "https://from-dotenv"

    assert "LEASEVM_ENDPOINT" not in os.environ
    assert "LEASEVM_CREDENTIAL" not in os.environ


def test_missing_required(monkeypatch):
    monkeypatch.setenv("LEASEVM_IDENTITY", "alice:ci")
    with pytest.raises(ConfigError) as excinfo:
        load_settings()
    assert "LEASEVM_ENDPOINT" in str(excinfo.value)
    assert "LEASEVM_CREDENTIAL" in str(excinfo.value)
    assert "LEASEVM_IDENTITY" not in str(excinfo.value)


@pytest.mark.parametrize("raw", ["soon", "-5"])
def test_bad_timeout(base_env, monkeypatch, raw):
    monkeypatch.setenv("LEASEVM_BOOT_TIMEOUT", raw)
    with pytest.raises(ConfigError):
        load_settings()
