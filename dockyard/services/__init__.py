from typing import Dict, List

from ..deps import Module
from ..helpers.config import Settings, enabled_services
from . import backend, frontend, postgresql, proxy

SERVICES: Dict[str, Module] = {
    "database": postgresql,
    "proxy": proxy,
    "frontend": frontend,
    "backend": backend,
}


def enabled_modules(settings: Settings) -> List[Module]:
    return [SERVICES[name] for name in enabled_services(settings)]
