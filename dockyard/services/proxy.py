from pathlib import Path
from typing import List

from ..deps import Modules
from ..helpers.config import Settings
from ..helpers.docker import ContainerSpec
from ..helpers.fs import set_file_contents_from_template
from .common import deploy

PROXY_NAME = "nginx-proxy"
ACME_NAME = "nginx-proxy-acme"
CUSTOM_CONFIG = Path("custom_proxy.conf")


def dependencies() -> Modules:
    return []


def write_custom_config(settings: Settings) -> bool:
    # Docker makes a directory if a bind mount source is missing, so always
    # have a file there. Local edits win over the template.
    return set_file_contents_from_template(
        CUSTOM_CONFIG,
        "custom_proxy.conf.j2",
        ignore_changes=True,
        PROXY_MAX_BODY_SIZE=settings["PROXY_MAX_BODY_SIZE"],
        PROXY_READ_TIMEOUT=settings["PROXY_READ_TIMEOUT"],
    )


def containers(settings: Settings) -> List[ContainerSpec]:
    return [
        {
            "name": PROXY_NAME,
            "image": "nginxproxy/nginx-proxy",
            "ports": ["80:80", "443:443"],
            "volumes": [
                "html:/usr/share/nginx/html",
                "certs:/etc/nginx/certs:ro",
                "/var/run/docker.sock:/tmp/docker.sock:ro",
                f"{CUSTOM_CONFIG.absolute()}:/etc/nginx/conf.d/custom_proxy.conf:rw",
            ],
        },
        {
            "name": ACME_NAME,
            "image": "nginxproxy/acme-companion",
            "env": {"DEFAULT_EMAIL": settings["DEFAULT_EMAIL"]},
            "volumes_from": [PROXY_NAME],
            "volumes": [
                "certs:/etc/nginx/certs:rw",
                "acme:/etc/acme.sh",
                "/var/run/docker.sock:/var/run/docker.sock:ro",
            ],
        },
    ]


def run(settings: Settings) -> None:
    print("--- Setting up proxy and SSL containers ---")
    write_custom_config(settings)
    for spec in containers(settings):
        deploy(settings, spec, "recreate")
