from ..deps import Modules
from ..helpers.config import Settings
from ..helpers.docker import ContainerSpec
from ..helpers.git import Repository
from . import proxy
from .common import deploy

NAME = "frontend"


def dependencies() -> Modules:
    return [proxy]


def repository(settings: Settings) -> Repository:
    return {
        "url": settings["REPO_URL_SITE"],
        "branch": settings["REPO_BRANCH_SITE"],
        "directory": NAME,
    }


def container(settings: Settings) -> ContainerSpec:
    return {
        "name": NAME,
        "image": NAME,
        "build": {"context": f"./{NAME}", "dockerfile": f"./{NAME}/Dockerfile"},
        "cpus": "0.5",
        "memory": "500m",
        "env": {
            "VIRTUAL_HOST": settings["VIRTUAL_HOST_SITE"],
            "LETSENCRYPT_HOST": settings["LETSENCRYPT_HOST_SITE"],
            "NODE_ENV": "production",
            "TZ": settings["TZ"],
            "API_URL": settings["API_URL"],
        },
        "expose": [80],
    }


def run(settings: Settings) -> None:
    print("--- Building and deploying frontend ---")
    deploy(settings, container(settings), "blue_green")
