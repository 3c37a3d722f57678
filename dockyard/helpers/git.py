"""Keeps a deployment checkout identical to a remote branch.

`force_sync` is destructive on purpose: the checkout is a build input, not a
working copy. Every run throws away uncommitted edits, local commits and
untracked files (ignored files such as `node_modules` are left alone, as
`git clean -fd` does) and leaves the directory at the tip of the remote
branch. Don't point it at a directory you edit by hand.

Credentials only ever appear on the command line of the network operation.
A fresh clone has its `origin` reset to the plain URL so the token isn't
left behind in `.git/config`.
"""
import logging
import os
from shlex import quote
from urllib.parse import quote as url_quote

from typing_extensions import TypedDict

from .fs import CommandFailedException, MissingCommandException, run_command


class Repository(TypedDict):
    url: str
    branch: str
    directory: str


class RepositorySyncException(Exception):
    pass


def authenticated_url(url: str, user: str, token: str) -> str:
    if "://" not in url:
        raise RepositorySyncException(
            f"Can't add credentials to {url}, as it has no scheme (e.g. https://)"
        )
    credentials = f"{url_quote(user, safe='')}:{url_quote(token, safe='')}"
    return url.replace("://", f"://{credentials}@", 1)


def force_sync(repo: Repository, user: str, token: str) -> None:
    auth_url = authenticated_url(repo["url"], user, token)
    directory = repo["directory"]
    branch = repo["branch"]
    hidden = [token, url_quote(token, safe="")]

    print(f"--- Managing repository: {directory} ---")
    if os.path.isdir(directory):
        logging.info(
            "Directory found. Syncing to the latest changes from branch '%s'..." % branch
        )
        try:
            run_command(
                f"git fetch {quote(auth_url)} {quote(branch)}",
                directory=directory,
                secrets=hidden,
            )
            run_command(
                f"git checkout --force -B {quote(branch)} FETCH_HEAD",
                directory=directory,
            )
            run_command("git clean -fd", directory=directory)
        except (CommandFailedException, MissingCommandException) as e:
            raise RepositorySyncException(
                f"Failed to pull repository {directory}. Check connection, credentials, and branch name. ({e})"
            ) from e
    else:
        logging.info("Cloning repository from branch '%s'..." % branch)
        try:
            run_command(
                f"git clone --branch {quote(branch)} {quote(auth_url)} {quote(directory)}",
                secrets=hidden,
            )
            run_command(
                f"git remote set-url origin {quote(repo['url'])}",
                directory=directory,
            )
        except (CommandFailedException, MissingCommandException) as e:
            raise RepositorySyncException(
                f"Failed to clone repository into {directory}. Check URL, credentials, and branch name. ({e})"
            ) from e
