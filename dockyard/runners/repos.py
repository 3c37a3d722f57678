from typing import List

from ..deps import Modules, runfunc
from ..helpers.config import Settings
from ..helpers.git import Repository, force_sync


def repositories(settings: Settings, modules: Modules) -> List[Repository]:
    return list(runfunc(modules, "repository", settings).values())


def run(settings: Settings, modules: Modules) -> None:
    for repo in repositories(settings, modules):
        force_sync(repo, settings["GITHUB_USER"], settings["GITHUB_TOKEN"])
