import os
from typing import Dict, List

from dotenv import dotenv_values
from frozendict import frozendict
from typing_extensions import TypedDict

from dockyard import Pathy

ENV_FILE = "./.env"

REQUIRED_KEYS = [
    "DEFAULT_EMAIL",
    "GITHUB_USER",
    "GITHUB_TOKEN",
    "REPO_URL_API",
    "REPO_BRANCH_API",
    "VIRTUAL_HOST_API",
    "LETSENCRYPT_HOST_API",
    "REPO_URL_SITE",
    "REPO_BRANCH_SITE",
    "VIRTUAL_HOST_SITE",
    "LETSENCRYPT_HOST_SITE",
    "TZ",
    "API_URL",
    "DB_USER",
    "DB_PASSWORD",
    "DB_NAME",
]

DEFAULTS: Dict[str, str] = {
    "ENABLED_SERVICES": "database,proxy,frontend",
    "READINESS_TRIES": "30",
    "READINESS_DELAY": "2",
    "PROXY_MAX_BODY_SIZE": "100m",
    "PROXY_READ_TIMEOUT": "300s",
}

SERVICE_NAMES = ["database", "proxy", "frontend", "backend"]

# Values that must never show up in logged commands
SECRET_KEYS = ["GITHUB_TOKEN", "DB_PASSWORD"]

Settings = frozendict[str, str]


class ConfigException(Exception):
    pass


def missing_keys(values: Dict[str, str]) -> List[str]:
    return [key for key in REQUIRED_KEYS if values.get(key, "") == ""]


def load_settings(path: Pathy = ENV_FILE) -> Settings:
    if not os.path.isfile(path):
        raise ConfigException(
            f"Environment file {path} not found. Please create it with the required variables."
        )

    values = dict(DEFAULTS)
    for key, value in dotenv_values(path).items():
        if value is not None:
            values[key] = value.strip()

    missing = missing_keys(values)
    if len(missing) > 0:
        raise ConfigException(
            f"Required environment variables missing in {path}: {', '.join(missing)}. "
            "Please ensure all required variables are set."
        )

    settings: Settings = frozendict(values)
    enabled_services(settings)
    readiness(settings)
    return settings


def enabled_services(settings: Settings) -> List[str]:
    names = [
        name.strip()
        for name in settings["ENABLED_SERVICES"].split(",")
        if name.strip() != ""
    ]
    if len(names) == 0:
        raise ConfigException(
            f"ENABLED_SERVICES is empty. Known services are: {', '.join(SERVICE_NAMES)}"
        )
    unknown = [name for name in names if name not in SERVICE_NAMES]
    if len(unknown) > 0:
        raise ConfigException(
            f"Unknown services in ENABLED_SERVICES: {', '.join(unknown)}. "
            f"Known services are: {', '.join(SERVICE_NAMES)}"
        )
    return names


class Readiness(TypedDict):
    tries: int
    delay: float


def readiness(settings: Settings) -> Readiness:
    try:
        tries = int(settings["READINESS_TRIES"])
        delay = float(settings["READINESS_DELAY"])
    except ValueError as e:
        raise ConfigException(f"Bad readiness setting: {e}")
    if tries < 1 or delay < 0:
        raise ConfigException(
            "READINESS_TRIES must be at least 1 and READINESS_DELAY can't be negative"
        )
    return {"tries": tries, "delay": delay}


def secrets(settings: Settings) -> List[str]:
    return [settings[key] for key in SECRET_KEYS]
