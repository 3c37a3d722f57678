import argparse
import logging
from typing import List, Optional

from .deps import generate_dependencies, runfunc
from .helpers.config import ENV_FILE, ConfigException, Settings, load_settings
from .helpers.docker import ContainerFailedException, ContainerNotReadyException
from .helpers.fs import CommandFailedException, MissingCommandException
from .helpers.git import RepositorySyncException
from .runners import host, repos, volumes
from .services import enabled_modules

FAILURES = (
    CommandFailedException,
    MissingCommandException,
    RepositorySyncException,
    ContainerNotReadyException,
    ContainerFailedException,
)


def provision(settings: Settings) -> None:
    modules = generate_dependencies(enabled_modules(settings))

    print("Deploying:")
    for module in modules:
        print(f"* {module.__name__}")
    print("")

    host.run()
    repos.run(settings, modules)
    volumes.run()
    runfunc(modules, "run", settings)

    print("✅ Docker containers have been set up successfully.")


def main(args: Optional[List[str]] = None) -> int:
    logging.basicConfig()
    logging.root.setLevel(logging.INFO)

    parser = argparse.ArgumentParser(
        prog="dockyard",
        description=f"Provision the Docker deployment described by {ENV_FILE}",
    )
    parser.parse_args(args)

    try:
        settings = load_settings()
        provision(settings)
    except ConfigException as e:
        logging.error(e)
        return 1
    except FAILURES as e:
        logging.error("Deploy failed: %s" % e)
        return 1

    return 0
