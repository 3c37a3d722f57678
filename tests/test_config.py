import os
from pathlib import Path

import pytest

from dockyard.helpers.config import (
    REQUIRED_KEYS,
    ConfigException,
    enabled_services,
    load_settings,
    readiness,
    secrets,
)

from .conftest import FULL_ENV, write_env


def test_missing_env_file(tmp_path: Path):
    path = tmp_path.joinpath(".env")
    with pytest.raises(ConfigException, match=f"Environment file {path} not found"):
        load_settings(path)


@pytest.mark.parametrize("key", REQUIRED_KEYS)
def test_each_required_key(tmp_path: Path, key: str):
    path = tmp_path.joinpath(".env")
    values = dict(FULL_ENV)
    del values[key]
    write_env(path, values)
    with pytest.raises(ConfigException) as excinfo:
        load_settings(path)

    message = str(excinfo.value)
    assert message.startswith(f"Required environment variables missing in {path}: {key}.")


def test_empty_values_count_as_missing(tmp_path: Path):
    path = tmp_path.joinpath(".env")
    path.write_text("".join(f"{key}=\n" for key in REQUIRED_KEYS))
    with pytest.raises(ConfigException) as excinfo:
        load_settings(path)

    assert ", ".join(REQUIRED_KEYS) in str(excinfo.value)


def test_key_without_value_is_missing(tmp_path: Path):
    path = tmp_path.joinpath(".env")
    values = dict(FULL_ENV)
    del values["TZ"]
    write_env(path, values)
    with path.open("a") as f:
        f.write("TZ\n")
    with pytest.raises(ConfigException, match="missing in .*: TZ\\."):
        load_settings(path)


def test_loads_and_interpolates(tmp_path: Path):
    path = tmp_path.joinpath(".env")
    values = dict(FULL_ENV)
    del values["API_URL"]
    write_env(path, values)
    with path.open("a") as f:
        f.write("# the API lives next to the site\n")
        f.write("export API_URL=https://${VIRTUAL_HOST_API}/v1\n")

    settings = load_settings(path)

    assert settings["API_URL"] == "https://api.example.com/v1"
    assert settings["DB_PASSWORD"] == "hunter2"
    assert settings["PROXY_MAX_BODY_SIZE"] == "100m"


def test_settings_are_immutable(tmp_path: Path):
    path = tmp_path.joinpath(".env")
    write_env(path, FULL_ENV)
    settings = load_settings(path)

    with pytest.raises(TypeError):
        settings["DB_NAME"] = "other"  # type: ignore


def test_settings_do_not_leak_into_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.delenv("DB_NAME", raising=False)
    path = tmp_path.joinpath(".env")
    write_env(path, FULL_ENV)
    load_settings(path)

    assert "DB_NAME" not in os.environ


def test_default_services(tmp_path: Path):
    path = tmp_path.joinpath(".env")
    write_env(path, FULL_ENV)
    settings = load_settings(path)

    assert enabled_services(settings) == ["database", "proxy", "frontend"]


def test_backend_can_be_enabled(tmp_path: Path):
    path = tmp_path.joinpath(".env")
    write_env(path, dict(FULL_ENV, ENABLED_SERVICES="database, backend ,"))
    settings = load_settings(path)

    assert enabled_services(settings) == ["database", "backend"]


def test_unknown_service(tmp_path: Path):
    path = tmp_path.joinpath(".env")
    write_env(path, dict(FULL_ENV, ENABLED_SERVICES="frontend,redis"))
    with pytest.raises(ConfigException, match="Unknown services in ENABLED_SERVICES: redis"):
        load_settings(path)


@pytest.mark.parametrize("services", ["", " , "])
def test_empty_service_list(tmp_path: Path, services: str):
    path = tmp_path.joinpath(".env")
    write_env(path, dict(FULL_ENV, ENABLED_SERVICES=services))
    with pytest.raises(ConfigException, match="ENABLED_SERVICES is empty"):
        load_settings(path)


@pytest.mark.parametrize(
    "tries,delay", [("lots", "1"), ("0", "1"), ("3", "-1"), ("3", "soon")]
)
def test_bad_readiness(tmp_path: Path, tries: str, delay: str):
    path = tmp_path.joinpath(".env")
    write_env(path, dict(FULL_ENV, READINESS_TRIES=tries, READINESS_DELAY=delay))
    with pytest.raises(ConfigException):
        load_settings(path)


def test_readiness_and_secrets(tmp_path: Path):
    path = tmp_path.joinpath(".env")
    write_env(path, dict(FULL_ENV, READINESS_TRIES="5", READINESS_DELAY="0.5"))
    settings = load_settings(path)

    assert readiness(settings) == {"tries": 5, "delay": 0.5}
    assert secrets(settings) == ["ghp_s3cr3t", "hunter2"]
