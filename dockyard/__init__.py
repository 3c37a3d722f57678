"""Dockyard provisions a small self-hosted Docker deployment on a single Debian/Ubuntu host: a PostgreSQL
database, an [nginx-proxy](https://github.com/nginx-proxy/nginx-proxy) with the ACME companion for automatic TLS,
and a frontend (plus an optional backend) built from Git repositories.

It's designed to be re-run: every step is idempotent, so a second run with no remote changes ends in the same set
of volumes and containers. Containers are replaced on every run, volumes are created once and then left alone, and
the source checkouts are forced to match their remote branch.

Usage
-----

1. `pip install dockyard`
2. Write a `.env` in the directory you want to deploy from. All of `DEFAULT_EMAIL`, `GITHUB_USER`, `GITHUB_TOKEN`,
   `REPO_URL_API`, `REPO_BRANCH_API`, `VIRTUAL_HOST_API`, `LETSENCRYPT_HOST_API`, `REPO_URL_SITE`,
   `REPO_BRANCH_SITE`, `VIRTUAL_HOST_SITE`, `LETSENCRYPT_HOST_SITE`, `TZ`, `API_URL`, `DB_USER`, `DB_PASSWORD` and
   `DB_NAME` must be set.
3. Run `python -m dockyard` (or `dockyard`) from that directory.

Optional settings
---

* `ENABLED_SERVICES` - comma separated list out of `database`, `proxy`, `frontend` and `backend`. Defaults to
  `database,proxy,frontend`. Dependencies of a listed service are always deployed first.
* `READINESS_TRIES`/`READINESS_DELAY` - how many times (and how many seconds apart) to check a new container is up.
* `PROXY_MAX_BODY_SIZE`/`PROXY_READ_TIMEOUT` - used when writing a default `custom_proxy.conf`.

Set `DOCKYARD_DRY_RUN=true` to see what would be changed without changing anything, and `DUMP_COMMAND=true` to see
the output of every command as it runs.

Beware: the `frontend` and `backend` directories are deployment artifacts. Any local changes in them are thrown
away on every run.
"""
import os
from pathlib import Path
from typing import Union

Pathy = Union[str, Path]

DRY_RUN_ENV = "DOCKYARD_DRY_RUN"


def is_dry_run() -> bool:
    return os.environ.get(DRY_RUN_ENV, "false").lower() == "true"