import logging
import os
import pathlib
import subprocess
from difflib import unified_diff
from typing import List, Optional, Sequence, Union

import jinja2
from typing_extensions import TypedDict

from dockyard import Pathy, is_dry_run

_jinja_env: Optional[jinja2.Environment] = None


def jinja_env() -> jinja2.Environment:
    global _jinja_env
    if _jinja_env is None:
        _jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(
                pathlib.Path(__file__).parent.parent.joinpath("templates")
            ),
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
        )
    return _jinja_env


def set_file_contents(
    fname: Pathy, contents: str, ignore_changes: bool = False
) -> bool:
    needs_update = False

    if not os.path.exists(fname):
        needs_update = True
        logging.info("File %s was missing" % fname)
    elif not ignore_changes:
        data = open(fname, "rb").read().decode("utf-8").splitlines(True)
        diff = list(unified_diff(data, contents.splitlines(True)))
        if len(diff) > 0:
            logging.info("File %s was different. Diff is: \n%s" % (fname, "".join(diff)))
            needs_update = True

    if needs_update and not is_dry_run():
        with open(fname, "w") as f:
            f.write(contents)

    return needs_update


def render_template(template: str, **kwargs: object) -> str:
    return jinja_env().get_template(template).render(**kwargs)


def set_file_contents_from_template(
    fname: Pathy, template: str, ignore_changes: bool = False, **kwargs: object
) -> bool:
    return set_file_contents(
        fname,
        render_template(template, **kwargs),
        ignore_changes=ignore_changes,
    )


def privileged(cmd: str) -> str:
    if os.geteuid() == 0:
        return cmd
    return f"sudo {cmd}"


class CommandResult(TypedDict):
    returncode: int
    stdout: bytes
    stderr: bytes


class MissingCommandException(Exception):
    pass


class CommandFailedException(Exception):
    def __init__(self, cmd: str, returncode: int, stdout: bytes, stderr: bytes):
        super().__init__(
            f"'{cmd}' exited with {returncode}: {stderr.decode('utf-8', 'replace').strip()}"
        )
        self.cmd = cmd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


# A secret can show up raw, inside a single-quoted shell argument, or with
# its whitespace collapsed by the command logging
def secret_forms(secret: str) -> List[str]:
    shell_quoted = secret.replace("'", "'\"'\"'")
    forms = [shell_quoted, secret]
    forms.extend([" ".join(form.split()) for form in forms])
    return sorted(
        set([form for form in forms if form.strip() != ""]), key=len, reverse=True
    )


def redact(text: str, secrets: Sequence[str]) -> str:
    for secret in secrets:
        for form in secret_forms(secret):
            text = text.replace(form, "****")
    return text


def run_command_raw(
    cmd: str,
    directory: Optional[Pathy] = None,
    input: Optional[bytes] = None,
    allowed_exit_codes: List[int] = [0],
    dry_run_safe: bool = False,
    secrets: Sequence[str] = [],
) -> CommandResult:
    run_for_real = dry_run_safe or not is_dry_run()
    display = redact(" ".join(redact(cmd, secrets).split()), secrets)
    where = "" if directory is None else f" in {directory}"
    if not run_for_real:
        logging.info("Would have run%s: %s" % (where, display))
        return {"returncode": 0, "stdout": b"", "stderr": b""}

    logging.info("Run%s: %s" % (where, display))
    process = subprocess.run(
        cmd,
        cwd=directory,
        input=input,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        shell=True,
    )
    if os.environ.get("DUMP_COMMAND", "false").lower() == "true":
        print(redact(process.stdout.decode("utf-8", "replace"), secrets), end="")
        print(redact(process.stderr.decode("utf-8", "replace"), secrets), end="")

    if process.returncode not in allowed_exit_codes:
        if b": not found" in process.stderr or process.returncode == 127:
            # missing command
            raise MissingCommandException(display)
        raise CommandFailedException(
            display,
            process.returncode,
            redact(process.stdout.decode("utf-8", "replace"), secrets).encode("utf-8"),
            redact(process.stderr.decode("utf-8", "replace"), secrets).encode("utf-8"),
        )
    return {
        "returncode": process.returncode,
        "stdout": process.stdout,
        "stderr": process.stderr,
    }


def run_command(
    cmd: str,
    directory: Optional[Pathy] = None,
    input: Union[str, bytes, None] = None,
    allowed_exit_codes: List[int] = [0],
    dry_run_safe: bool = False,
    secrets: Sequence[str] = [],
) -> str:
    if input is None or isinstance(input, bytes):
        real_input = input
    else:
        real_input = input.encode("utf-8")
    return run_command_raw(
        cmd,
        directory=directory,
        input=real_input,
        allowed_exit_codes=allowed_exit_codes,
        dry_run_safe=dry_run_safe,
        secrets=secrets,
    )["stdout"].decode("utf-8")


# Read-only check, so it also runs in dry run mode
def command_succeeds(cmd: str, directory: Optional[Pathy] = None) -> bool:
    try:
        run_command_raw(cmd, directory=directory, dry_run_safe=True)
    except CommandFailedException:
        return False
    return True
