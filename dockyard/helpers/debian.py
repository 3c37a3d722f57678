import os
import re
from typing import Dict, List, Optional, Union

from debian.debian_support import version_compare

from .fs import privileged, run_command

DPKG_INFO = "/var/lib/dpkg/info"

host_arch: Optional[str] = None

_version_pattern = re.compile(r"Version: (\S+)")


def apt_update() -> None:
    run_command(privileged("apt-get update --allow-releaseinfo-change"))


def dpkg_architecture() -> str:
    global host_arch
    if host_arch is None:
        host_arch = run_command(
            "dpkg --print-architecture", dry_run_safe=True
        ).strip()
    return host_arch


def apt_is_installed(package: str, wanted_version: Optional[str] = None) -> bool:
    paths = [
        f"{DPKG_INFO}/{package}.list",
        f"{DPKG_INFO}/{package}:{dpkg_architecture()}.list",
    ]
    for path in paths:
        if not os.path.exists(path):
            continue
        if wanted_version is None:  # existance is enough
            return True
        status = run_command(f"dpkg-query --status {package}", dry_run_safe=True)
        version_pattern_match = _version_pattern.search(status)
        if version_pattern_match is None:
            raise Exception(
                f"Failure to match version pattern in '{status}' for {package}"
            )
        if version_compare(version_pattern_match.group(1), wanted_version) >= 0:
            return True

    return False


# List is just "any version", Dict is a "name => min version" requirement
def apt_install(packages: Union[List[str], Dict[str, Optional[str]]]) -> bool:
    if isinstance(packages, List):
        packages = dict([(p, None) for p in packages])
    to_install = dict(
        [
            (package, wanted_version)
            for (package, wanted_version) in packages.items()
            if not apt_is_installed(package, wanted_version)
        ]
    )
    if to_install == {}:
        return False

    # Confdef is to fix https://unix.stackexchange.com/a/416816/73838
    cmd = (
        'DEBIAN_FRONTEND=noninteractive apt-get satisfy "%s" --no-install-recommends --yes -o DPkg::Options::=--force-confdef'
        % ", ".join(
            [
                name if version is None else f"{name} (>= {version})"
                for (name, version) in to_install.items()
            ]
        )
    )
    run_command(privileged(cmd))
    return True
