import json
import re
import shlex
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

import pytest

from dockyard import DRY_RUN_ENV, Pathy
from dockyard.helpers import debian
from dockyard.helpers.fs import (
    CommandFailedException,
    CommandResult,
    MissingCommandException,
)

FULL_ENV: Dict[str, str] = {
    "DEFAULT_EMAIL": "ops@example.com",
    "GITHUB_USER": "deploy-bot",
    "GITHUB_TOKEN": "ghp_s3cr3t",
    "REPO_URL_API": "https://github.com/example/api.git",
    "REPO_BRANCH_API": "main",
    "VIRTUAL_HOST_API": "api.example.com",
    "LETSENCRYPT_HOST_API": "api.example.com",
    "REPO_URL_SITE": "https://github.com/example/site.git",
    "REPO_BRANCH_SITE": "production",
    "VIRTUAL_HOST_SITE": "www.example.com",
    "LETSENCRYPT_HOST_SITE": "www.example.com",
    "TZ": "Europe/London",
    "API_URL": "https://api.example.com",
    "DB_USER": "app",
    "DB_PASSWORD": "hunter2",
    "DB_NAME": "appdb",
    "READINESS_DELAY": "0",
    "READINESS_TRIES": "3",
}


def write_env(path: Path, values: Dict[str, str]) -> None:
    path.write_text("".join(f'{key}="{value}"\n' for key, value in values.items()))


class Container:
    def __init__(self, command: str):
        self.command = command
        self.running = True
        self.state: Dict[str, object] = {"Status": "running", "Running": True}


class FakeShell:
    """Stands in for `run_command_raw`, recording every command.

    Docker commands are played against an in-memory daemon so tests can look
    at the resulting volumes and containers. Anything else succeeds with
    empty output unless a `respond` pattern matches it.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Optional[Pathy]]] = []
        self.responses: List[Tuple[str, int, str]] = []
        self.volumes: Set[str] = set()
        self.containers: Dict[str, Container] = {}
        self.run_states: Dict[str, Dict[str, object]] = {}

    @property
    def commands(self) -> List[str]:
        return [cmd for (cmd, _) in self.calls]

    def mutating(self) -> List[str]:
        return [
            cmd
            for cmd in self.commands
            if not re.match(r"docker (volume|container) inspect", cmd)
        ]

    def respond(self, pattern: str, returncode: int = 0, stdout: str = "") -> None:
        self.responses.insert(0, (pattern, returncode, stdout))

    def add_container(self, name: str, running: bool = True) -> None:
        container = Container(f"docker run -d --name {name} existing")
        container.running = running
        self.containers[name] = container

    def docker(self, args: List[str]) -> Tuple[int, str]:
        if args[:2] == ["volume", "inspect"]:
            return (0, "[]") if args[2] in self.volumes else (1, "")
        if args[:2] == ["volume", "create"]:
            self.volumes.add(args[2])
            return (0, args[2])
        if args[:2] == ["container", "inspect"]:
            name = args[-1]
            if name not in self.containers:
                return (1, "")
            container = self.containers[name]
            if "--format" not in args:
                return (0, "[]")
            if args[3] == "{{.State.Running}}":
                return (0, "true" if container.running else "false")
            return (0, json.dumps(container.state))
        if args[0] == "stop":
            self.containers[args[1]].running = False
            return (0, args[1])
        if args[0] == "rm":
            if self.containers[args[1]].running:
                return (1, "")
            del self.containers[args[1]]
            return (0, args[1])
        if args[0] == "run":
            name = args[args.index("--name") + 1]
            if name in self.containers:
                return (125, "")
            container = Container(shlex.join(["docker"] + args))
            container.state = self.run_states.get(name, container.state)
            self.containers[name] = container
            return (0, "0123456789ab")
        if args[0] == "rename":
            if args[2] in self.containers:
                return (1, "")
            self.containers[args[2]] = self.containers.pop(args[1])
            return (0, "")
        return (0, "")

    def __call__(
        self,
        cmd: str,
        directory: Optional[Pathy] = None,
        input: Optional[bytes] = None,
        allowed_exit_codes: List[int] = [0],
        dry_run_safe: bool = False,
        secrets: Sequence[str] = [],
    ) -> CommandResult:
        self.calls.append((cmd, directory))
        for pattern, returncode, stdout in self.responses:
            if re.search(pattern, cmd):
                break
        else:
            args = shlex.split(cmd)
            if args[0] == "docker":
                returncode, stdout = self.docker(args[1:])
            else:
                returncode, stdout = (0, "")
        if returncode not in allowed_exit_codes:
            if returncode == 127:
                raise MissingCommandException(cmd)
            raise CommandFailedException(cmd, returncode, stdout.encode("utf-8"), b"")
        return {
            "returncode": returncode,
            "stdout": stdout.encode("utf-8"),
            "stderr": b"",
        }


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(DRY_RUN_ENV, raising=False)
    monkeypatch.delenv("DUMP_COMMAND", raising=False)
    monkeypatch.setattr(debian, "host_arch", "amd64")


@pytest.fixture
def shell(monkeypatch: pytest.MonkeyPatch) -> FakeShell:
    fake = FakeShell()
    monkeypatch.setattr("dockyard.helpers.fs.run_command_raw", fake)
    return fake
