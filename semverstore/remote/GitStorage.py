"""
Git version store.

The version is a file on a branch. The branch head commit is the
concurrency token: a write is a commit on top of the observed head pushed
without force, so the remote only accepts it as a fast-forward. A rejected
push means somebody else moved the branch first. So does an "up to date"
push: a rival that wrote the same text on the same head in the same second
produced the very same commit.

Work happens in a private clone under a temporary directory:

    <work_dir>/semverstore-git-XXXX/
    ├── repo/        # the clone, origin = configured uri
    └── key          # private key (0600), only when one is configured

The directory lives until close() (or the end of a with block).
"""

import logging
import os
import re
import shlex
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import quote, urlsplit, urlunsplit

from git import Actor, PushInfo, Repo
from git.exc import GitCommandError

from semverstore.driver.exceptions import (
    ConcurrentModificationError,
    InvalidConfigurationError,
    StorageUnavailableError,
)
from semverstore.driver.protocol import MAX_RETRIES
from semverstore.model import DEFAULT_COMMIT_MESSAGE

logger = logging.getLogger(__name__)

DEFAULT_GIT_USER = "semverstore <semverstore@localhost>"

_MISSING_REF_MARKERS = ("couldn't find remote ref", "could not find remote ref")
# "=" (up to date) means an identical commit already landed, so the ref
# moved past our token all the same
_CONFLICT_FLAGS = PushInfo.REJECTED | PushInfo.UP_TO_DATE
_FAILURE_FLAGS = PushInfo.ERROR | PushInfo.REMOTE_REJECTED | PushInfo.REMOTE_FAILURE


def parse_git_user(git_user: Optional[str]) -> Actor:
    """
    Parse a "Name <email>" identity.

    Raises:
        InvalidConfigurationError: If the string does not have that shape
    """
    match = re.match(r"^\s*(.+?)\s*<([^<>]*)>\s*$", git_user or DEFAULT_GIT_USER)
    if not match:
        raise InvalidConfigurationError(
            f"git_user: expected 'Name <email>', got '{git_user}'"
        )
    return Actor(match.group(1), match.group(2))


def authenticated_uri(
    uri: str, username: Optional[str], password: Optional[str]
) -> str:
    """Embed username/password into an HTTP(S) URI; other URIs are unchanged."""
    if not username:
        return uri
    parts = urlsplit(uri)
    if parts.scheme not in ("http", "https"):
        return uri
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    credentials = quote(username, safe="")
    if password:
        credentials += ":" + quote(password, safe="")
    return urlunsplit(parts._replace(netloc=f"{credentials}@{host}"))


def _is_missing_ref(error: GitCommandError) -> bool:
    text = str(error).lower()
    return any(marker in text for marker in _MISSING_REF_MARKERS)


def _push_conflicted(info: PushInfo) -> bool:
    """Whether a push result means the branch is not where we left it."""
    # "[remote rejected]" comes from hooks or protection rules and is fatal
    if info.flags & (PushInfo.REMOTE_REJECTED | PushInfo.REMOTE_FAILURE):
        return False
    return bool(info.flags & _CONFLICT_FLAGS)


class GitVersionStore:
    """
    VersionStore backed by a file on a git branch.

    Args:
        uri: Repository URI (any URL git understands, including local paths)
        branch: Branch holding the version file; created on first write
        file: Path of the version file inside the repository
        private_key: SSH private key used for ssh URIs
        username: HTTP(S) user name
        password: HTTP(S) password or token
        git_user: "Name <email>" used as author and committer
        commit_message: Template; %version% and %file% are substituted
        skip_ssl_verification: Disable TLS verification for HTTPS remotes
        work_dir: Parent directory of the private clone (system temp by default)
        max_attempts: Bound on push attempts for unconditional writes
    """

    def __init__(
        self,
        uri: str,
        branch: str,
        file: str,
        private_key: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        git_user: Optional[str] = None,
        commit_message: Optional[str] = None,
        skip_ssl_verification: bool = False,
        work_dir: Optional[Path] = None,
        max_attempts: int = MAX_RETRIES,
    ):
        self.uri = uri
        self.branch = branch
        self.file = file
        self.private_key = private_key
        self.username = username
        self.password = password
        self.actor = parse_git_user(git_user)
        self.commit_message = commit_message or DEFAULT_COMMIT_MESSAGE
        self.skip_ssl_verification = skip_ssl_verification
        self.work_dir = Path(work_dir) if work_dir else None
        self.max_attempts = max_attempts
        self._repo: Optional[Repo] = None
        self._root: Optional[Path] = None

    def describe(self) -> str:
        return f"{self.uri}#{self.branch}:{self.file}"

    def __enter__(self) -> "GitVersionStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Remove the work clone, including any private key written for it."""
        if self._root is None:
            return
        if self._repo is not None:
            self._repo.close()
        shutil.rmtree(self._root, ignore_errors=True)
        logger.debug(f"Removed work clone {self._root}")
        self._repo = None
        self._root = None

    def _open(self) -> Repo:
        if self._repo is not None:
            return self._repo

        if self.work_dir is not None:
            self.work_dir.mkdir(parents=True, exist_ok=True)
        self._root = root = Path(
            tempfile.mkdtemp(prefix="semverstore-git-", dir=self.work_dir)
        )
        repo = Repo.init(root / "repo")
        repo.create_remote(
            "origin", authenticated_uri(self.uri, self.username, self.password)
        )

        if self.skip_ssl_verification:
            with repo.config_writer() as writer:
                writer.set_value("http", "sslVerify", "false")

        if self.private_key:
            key_path = root / "key"
            key_path.write_text(self.private_key.strip() + "\n")
            os.chmod(key_path, 0o600)
            repo.git.update_environment(
                GIT_SSH_COMMAND=(
                    f"ssh -i {shlex.quote(str(key_path))} "
                    "-o StrictHostKeyChecking=no -o IdentitiesOnly=yes"
                )
            )

        logger.debug(f"Initialized work clone for {self.uri} in {root}")
        self._repo = repo
        return repo

    @property
    def _remote_ref(self) -> str:
        return f"refs/remotes/origin/{self.branch}"

    def read(self) -> Tuple[Optional[str], Optional[str]]:
        repo = self._open()
        try:
            repo.git.fetch(
                "origin", f"+refs/heads/{self.branch}:{self._remote_ref}"
            )
        except GitCommandError as e:
            if _is_missing_ref(e):
                logger.debug(f"Branch {self.branch} does not exist at {self.uri} yet")
                return None, None
            raise StorageUnavailableError(
                f"Failed to fetch {self.describe()}: {e}"
            ) from e

        try:
            repo.git.checkout("-f", "-B", self.branch, self._remote_ref)
        except GitCommandError as e:
            raise StorageUnavailableError(
                f"Failed to check out {self.describe()}: {e}"
            ) from e

        head = repo.head.commit.hexsha
        path = Path(repo.working_tree_dir) / self.file
        if not path.is_file():
            logger.debug(f"No {self.file} on {self.branch} at {head[:8]} yet")
            return None, head
        return path.read_text().strip(), head

    def _commit(self, repo: Repo, text: str, token: Optional[str]) -> None:
        if token is None:
            # first commit of a branch that does not exist remotely
            repo.git.symbolic_ref("HEAD", f"refs/heads/{self.branch}")
        else:
            repo.git.checkout("-f", "-B", self.branch, token)

        path = Path(repo.working_tree_dir) / self.file
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text + "\n")

        message = self.commit_message.replace("%version%", text).replace(
            "%file%", self.file
        )
        repo.index.add([self.file])
        repo.index.commit(message, author=self.actor, committer=self.actor)

    def write_if(self, text: str, token: Optional[str]) -> bool:
        repo = self._open()
        try:
            self._commit(repo, text, token)
        except GitCommandError as e:
            raise StorageUnavailableError(
                f"Failed to commit to {self.describe()}: {e}"
            ) from e

        try:
            results = repo.remote("origin").push(f"HEAD:refs/heads/{self.branch}")
        except GitCommandError as e:
            raise StorageUnavailableError(
                f"Failed to push to {self.describe()}: {e}"
            ) from e

        if not results:
            raise StorageUnavailableError(f"Push to {self.describe()} reported nothing")
        info = results[0]
        if _push_conflicted(info):
            logger.debug(
                f"Push to {self.describe()} did not move the branch: {info.summary.strip()}"
            )
            return False
        if info.flags & _FAILURE_FLAGS:
            raise StorageUnavailableError(
                f"Failed to push to {self.describe()}: {info.summary.strip()}"
            )
        return True

    def write(self, text: str) -> None:
        """
        Commit ``text`` on top of whatever the branch holds now.

        The stored value is not compared; only the push has to be a
        fast-forward, so a moving branch is simply re-read.
        """
        for _ in range(self.max_attempts):
            _, token = self.read()
            if self.write_if(text, token):
                return
        raise ConcurrentModificationError(self.describe(), self.max_attempts)
