from typing import List

from ..helpers.docker import create_volume_if_missing
from ..services import backend, postgresql

VOLUMES = ["html", "certs", "acme", backend.DOCS_CACHE_VOLUME, postgresql.DATA_VOLUME]


def run() -> List[str]:
    print("--- Ensuring Docker volumes exist ---")
    return [volume for volume in VOLUMES if create_volume_if_missing(volume)]
