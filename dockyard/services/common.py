from ..helpers.config import Settings, readiness, secrets
from ..helpers.docker import ContainerSpec, Strategy, build_image, deploy_container


def deploy(settings: Settings, spec: ContainerSpec, strategy: Strategy) -> None:
    if "build" in spec:
        build_image(spec["image"], spec["build"])
    ready = readiness(settings)
    deploy_container(
        spec,
        strategy,
        tries=ready["tries"],
        delay=ready["delay"],
        secrets=secrets(settings),
    )
