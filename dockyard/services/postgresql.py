from ..deps import Modules
from ..helpers.config import Settings
from ..helpers.docker import ContainerSpec
from .common import deploy

NAME = "postgres-db"
IMAGE = "postgres:17.5-alpine3.22"
PORT = 5432
DATA_VOLUME = "database_data"


def dependencies() -> Modules:
    return []


def container(settings: Settings) -> ContainerSpec:
    return {
        "name": NAME,
        "image": IMAGE,
        "cpus": "0.5",
        "memory": "500m",
        "ports": [f"{PORT}:{PORT}"],
        "env": {
            "POSTGRES_USER": settings["DB_USER"],
            "POSTGRES_PASSWORD": settings["DB_PASSWORD"],
            "POSTGRES_DB": settings["DB_NAME"],
        },
        "volumes": [f"{DATA_VOLUME}:/var/lib/postgresql/data"],
    }


def run(settings: Settings) -> None:
    print("--- Setting up Database ---")
    # Publishes a host port, so the old container has to go first
    deploy(settings, container(settings), "recreate")
