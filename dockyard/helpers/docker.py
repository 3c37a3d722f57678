import json
import logging
from shlex import quote
from typing import Dict, List, Optional, Sequence, cast

from mergedeep import merge
from retry.api import retry_call
from typing_extensions import Literal, NotRequired, TypedDict

from dockyard import is_dry_run

from .fs import MissingCommandException, command_succeeds, run_command


class BuildSpec(TypedDict):
    context: str
    dockerfile: str


class ContainerSpec(TypedDict):
    name: str
    image: str
    restart: NotRequired[str]
    network: NotRequired[str]
    cpus: NotRequired[str]
    memory: NotRequired[str]
    ports: NotRequired[List[str]]
    expose: NotRequired[List[int]]
    volumes: NotRequired[List[str]]
    volumes_from: NotRequired[List[str]]
    env: NotRequired[Dict[str, str]]
    build: NotRequired[BuildSpec]


Strategy = Literal["recreate", "blue_green"]

CONTAINER_DEFAULTS: Dict[str, object] = {
    "restart": "unless-stopped",
    "network": "bridge",
}

CANDIDATE_SUFFIX = "-next"


class ContainerNotReadyException(Exception):
    pass


class ContainerFailedException(Exception):
    pass


def with_defaults(spec: ContainerSpec) -> ContainerSpec:
    return cast(ContainerSpec, merge({}, CONTAINER_DEFAULTS, cast(Dict[str, object], spec)))


def volume_exists(name: str) -> bool:
    try:
        return command_succeeds(f"docker volume inspect {quote(name)}")
    except MissingCommandException:
        if is_dry_run():
            return False
        raise


def create_volume_if_missing(name: str) -> bool:
    if volume_exists(name):
        logging.info("Docker volume %s already exists." % name)
        return False
    logging.info("Creating Docker volume: %s" % name)
    run_command(f"docker volume create {quote(name)}")
    return True


# None for no such container, otherwise whether it's running
def container_state(name: str) -> Optional[bool]:
    try:
        if not command_succeeds(f"docker container inspect {quote(name)}"):
            return None
    except MissingCommandException:
        if is_dry_run():
            return None
        raise
    state = run_command(
        f"docker container inspect --format '{{{{.State.Running}}}}' {quote(name)}",
        dry_run_safe=True,
    )
    return state.strip() == "true"


def remove_container_if_exists(name: str) -> bool:
    running = container_state(name)
    if running is None:
        return False
    logging.info("Stopping and removing existing container: %s" % name)
    if running:
        run_command(f"docker stop {quote(name)}")
    run_command(f"docker rm {quote(name)}")
    return True


def docker_run_command(spec: ContainerSpec) -> str:
    spec = with_defaults(spec)
    args: List[str] = [
        "docker run -d",
        f"--name {quote(spec['name'])}",
        f"--restart {quote(spec['restart'])}",
    ]
    if "cpus" in spec:
        args.append(f"--cpus={quote(spec['cpus'])}")
    if "memory" in spec:
        args.append(f"--memory={quote(spec['memory'])}")
    for port in spec.get("ports", []):
        args.append(f"-p {quote(port)}")
    for key, value in spec.get("env", {}).items():
        args.append(f"--env {quote(f'{key}={value}')}")
    for exposed in spec.get("expose", []):
        args.append(f"--expose {exposed}")
    for source in spec.get("volumes_from", []):
        args.append(f"--volumes-from {quote(source)}")
    for volume in spec.get("volumes", []):
        args.append(f"-v {quote(volume)}")
    args.append(f"--network {quote(spec['network'])}")
    args.append(quote(spec["image"]))
    return " ".join(args)


def run_container(spec: ContainerSpec, secrets: Sequence[str] = []) -> str:
    return run_command(docker_run_command(spec), secrets=secrets).strip()


def build_image(tag: str, build: BuildSpec) -> None:
    print(f"--- Building {tag} ---")
    run_command(
        f"docker build -t {quote(tag)} -f {quote(build['dockerfile'])} {quote(build['context'])}"
    )


def rename_container(old: str, new: str) -> None:
    run_command(f"docker rename {quote(old)} {quote(new)}")


def check_ready(name: str) -> None:
    raw = run_command(
        f"docker container inspect --format '{{{{json .State}}}}' {quote(name)}",
        dry_run_safe=True,
    )
    state = json.loads(raw)
    status = state.get("Status")
    if status in ["exited", "dead"]:
        raise ContainerFailedException(
            f"Container {name} is {status} (exit code {state.get('ExitCode')})"
        )
    if status != "running":
        raise ContainerNotReadyException(f"Container {name} is {status}")
    health = state.get("Health")
    if health is not None and health.get("Status") != "healthy":
        raise ContainerNotReadyException(
            f"Container {name} is {health.get('Status')}"
        )


def wait_until_ready(name: str, tries: int, delay: float) -> None:
    if is_dry_run():
        logging.info("Would have waited for %s to be ready" % name)
        return
    retry_call(
        check_ready,
        fargs=[name],
        exceptions=ContainerNotReadyException,
        tries=tries,
        delay=delay,
    )
    logging.info("Container %s is ready" % name)


def deploy_container(
    spec: ContainerSpec,
    strategy: Strategy,
    tries: int,
    delay: float,
    secrets: Sequence[str] = [],
) -> None:
    name = spec["name"]
    if strategy == "recreate" or container_state(name) is None:
        remove_container_if_exists(name)
        run_container(spec, secrets)
        wait_until_ready(name, tries, delay)
        return

    candidate = f"{name}{CANDIDATE_SUFFIX}"
    remove_container_if_exists(candidate)
    candidate_spec = cast(ContainerSpec, dict(spec, name=candidate))
    run_container(candidate_spec, secrets)
    try:
        wait_until_ready(candidate, tries, delay)
    except (ContainerNotReadyException, ContainerFailedException):
        logging.error("%s never became ready, keeping the existing %s" % (candidate, name))
        remove_container_if_exists(candidate)
        raise
    remove_container_if_exists(name)
    rename_container(candidate, name)
