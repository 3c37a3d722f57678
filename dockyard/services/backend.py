from ..deps import Modules
from ..helpers.config import Settings
from ..helpers.docker import ContainerSpec
from ..helpers.git import Repository
from . import postgresql, proxy
from .common import deploy

NAME = "backend"
PORT = 80
DOCS_CACHE_VOLUME = "api-docs-cache"


def dependencies() -> Modules:
    return [postgresql, proxy]


def repository(settings: Settings) -> Repository:
    return {
        "url": settings["REPO_URL_API"],
        "branch": settings["REPO_BRANCH_API"],
        "directory": NAME,
    }


def container(settings: Settings) -> ContainerSpec:
    return {
        "name": NAME,
        "image": NAME,
        "build": {"context": f"./{NAME}", "dockerfile": f"./{NAME}/Dockerfile"},
        "cpus": "0.9",
        "memory": "900m",
        "env": {
            "VIRTUAL_HOST": settings["VIRTUAL_HOST_API"],
            "LETSENCRYPT_HOST": settings["LETSENCRYPT_HOST_API"],
            "NODE_ENV": "production",
            "TZ": settings["TZ"],
            "PORT": str(PORT),
            "VALID_ORIGIN": f"https://{settings['VIRTUAL_HOST_SITE']}",
            "DB_HOST": postgresql.NAME,
            "DB_PORT": str(postgresql.PORT),
            "DB_USER": settings["DB_USER"],
            "DB_PASSWORD": settings["DB_PASSWORD"],
            "DB_NAME": settings["DB_NAME"],
        },
        "expose": [PORT],
        "volumes": [f"{DOCS_CACHE_VOLUME}:/app/docs-cache"],
    }


def run(settings: Settings) -> None:
    print("--- Building and deploying backend ---")
    deploy(settings, container(settings), "blue_green")
