import logging
from typing import Dict

from .fs import CommandFailedException, privileged, run_command


def journal(name: str) -> None:
    res = run_command(privileged("journalctl -u %s --no-pager" % name), dry_run_safe=True)
    print(res)


def systemd_status(name: str) -> Dict[str, str]:
    raw = run_command("systemctl show %s --no-page" % name, dry_run_safe=True)
    return dict([line.split("=", 1) for line in raw.splitlines() if "=" in line])


def systemd_set(name: str, enable: bool = False, start: bool = False) -> bool:
    changed = False
    status = systemd_status(name)
    unitFileState = status.get("UnitFileState")
    if unitFileState == "masked":
        logging.info("Unmasking %s" % name)
        run_command(privileged("systemctl unmask %s" % name))
        changed = True
    if enable and unitFileState not in ["enabled", "enabled-runtime"]:
        logging.info("%s is currently %s" % (name, unitFileState))
        run_command(privileged("systemctl enable %s" % name))
        changed = True
    if start:
        sub_state = status.get("SubState")
        if sub_state in ["running", "auto-restart", "start"]:
            return changed
        logging.info("start: %s is %s" % (name, sub_state))
        try:
            run_command(privileged("systemctl start %s" % name))
        except CommandFailedException:
            journal(name)
            raise
        changed = True

    return changed
