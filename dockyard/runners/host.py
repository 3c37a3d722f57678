import logging
import shutil

from ..helpers.debian import apt_install, apt_update
from ..helpers.systemd import systemd_set

RUNTIME_BINARY = "docker"
RUNTIME_PACKAGE = "docker.io"
RUNTIME_SERVICE = "docker"


def run() -> bool:
    print("--- Preparing host ---")
    apt_update()

    if shutil.which(RUNTIME_BINARY) is not None:
        logging.info("Docker is already installed.")
        return False

    logging.info("Docker not found, installing...")
    apt_install([RUNTIME_PACKAGE])
    systemd_set(RUNTIME_SERVICE, enable=True, start=True)
    return True
