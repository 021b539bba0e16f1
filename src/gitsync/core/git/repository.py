"""
GitPython implementation of the repository primitives.

Porcelain commands run through `Repo.git.execute()` so stderr is available
for classification; commit metadata is read through GitPython's object
model. Network commands (fetch, push) are bounded with kill_after_timeout
and their failures are mapped onto the engine's error taxonomy.
"""

from __future__ import annotations

import base64
import logging
import time
from datetime import datetime
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from gitsync.core.git.backend import (
    ConflictSide,
    ConflictSides,
    Identity,
    MergeOutcome,
    RefInfo,
    StatusEntry,
)
from gitsync.core.sync.errors import (
    GitTimeoutError,
    InternalGitError,
    InvalidRepositoryError,
    NetworkError,
)
from gitsync.core.sync.models import ChangeType, CommitSummary, FileChange

logger = logging.getLogger(__name__)

# Lower-cased stderr fragments that mean the remote could not be reached
# or refused our credentials.
NETWORK_ERROR_MARKERS = (
    "could not resolve host",
    "unable to access",
    "could not read from remote repository",
    "connection refused",
    "connection timed out",
    "failed to connect",
    "network is unreachable",
    "authentication failed",
    "could not read username",
    "permission denied",
    "repository not found",
    "does not appear to be a git repository",
)

REJECTION_MARKERS = (
    "[rejected]",
    "[remote rejected]",
    "non-fast-forward",
    "failed to push some refs",
)

REF_FORMAT = "%00".join(
    [
        "%(refname)",
        "%(objectname)",
        "%(upstream:short)",
        "%(contents:subject)",
        "%(authorname)",
        "%(authordate:iso-strict)",
    ]
)

_CHANGE_TYPES = {
    "A": ChangeType.ADDED,
    "D": ChangeType.DELETED,
    "R": ChangeType.RENAMED,
}


def _parse_date(value: str) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def _count(value: str) -> int:
    # numstat reports "-" for binary files
    return int(value) if value.isdigit() else 0


def _output(value: object) -> str:
    """Strip the 'stderr: '...'' wrapper GitCommandError puts around captured output."""
    text = str(value or "").strip()
    for label in ("stderr: '", "stdout: '"):
        if text.startswith(label) and text.endswith("'"):
            text = text[len(label) : -1]
    return text.strip()


def _rejection_reason(stderr: str) -> str:
    for line in stderr.splitlines():
        stripped = line.strip()
        if stripped.startswith("!"):
            return stripped.lstrip("! ").strip()
    for line in stderr.splitlines():
        if line.strip().startswith(("hint:", "error:")):
            return line.strip()
    return stderr.strip() or "remote rejected the update"


def _identity_env(identity: Identity) -> dict[str, str]:
    return {
        "GIT_AUTHOR_NAME": identity.name,
        "GIT_AUTHOR_EMAIL": identity.email,
        "GIT_COMMITTER_NAME": identity.name,
        "GIT_COMMITTER_EMAIL": identity.email,
    }


class GitPythonRepository:
    """
    A working copy opened through GitPython.

    Instances are created by GitPythonBackend.open() and should be used
    via open_repository() so the underlying Repo is closed afterwards.
    """

    def __init__(self, repo: Repo, *, access_token: str | None = None) -> None:
        self._repo = repo
        self._access_token = access_token
        self._path = Path(repo.working_tree_dir or repo.git_dir).resolve()

    @property
    def path(self) -> Path:
        return self._path

    def _run(
        self,
        args: list[str],
        *,
        timeout: float | None = None,
        env: dict[str, str] | None = None,
        config: list[str] | None = None,
    ) -> str:
        """
        Run a git command in the working tree and return its stdout.

        Raises:
            GitCommandError: If git exits non-zero.
        """
        cmd = ["git"]
        for item in config or []:
            cmd.extend(["-c", item])
        cmd.extend(args)

        logger.debug("Running git command: git %s", " ".join(args))

        kwargs: dict[str, object] = {}
        if timeout is not None:
            kwargs["kill_after_timeout"] = timeout
        if env:
            kwargs["env"] = env
        output = self._repo.git.execute(cmd, **kwargs)
        return str(output)

    def _git(self, args: list[str], message: str) -> str:
        """Run a local (non-network) command, converting failures to InternalGitError."""
        try:
            return self._run(args)
        except GitCommandError as e:
            raise InternalGitError(message, command=["git", *args], stderr=_output(e.stderr)) from e

    def _auth_config(self) -> list[str]:
        if not self._access_token:
            return []
        credentials = base64.b64encode(f"oauth2:{self._access_token}".encode()).decode()
        return [f"http.extraHeader=Authorization: Basic {credentials}"]

    def _network(self, args: list[str], *, timeout: float | None, action: str) -> str:
        """Run fetch/push and map failures onto the error taxonomy."""
        started = time.monotonic()
        try:
            return self._run(args, timeout=timeout, config=self._auth_config())
        except GitCommandError as e:
            elapsed = time.monotonic() - started
            stderr = _output(e.stderr)
            lowered = stderr.lower()

            if timeout is not None and (elapsed >= timeout or "timeout:" in lowered):
                raise GitTimeoutError(
                    f"{action} timed out after {timeout:g} seconds", operation=action
                ) from e

            if any(marker in lowered for marker in REJECTION_MARKERS):
                reason = _rejection_reason(stderr)
                raise InternalGitError(
                    f"{action} rejected: {reason}",
                    command=["git", *args],
                    stderr=stderr,
                    operation=action,
                ) from e

            if any(marker in lowered for marker in NETWORK_ERROR_MARKERS):
                raise NetworkError(
                    f"{action} failed: remote unavailable", stderr=stderr, operation=action
                ) from e

            raise InternalGitError(
                f"{action} failed", command=["git", *args], stderr=stderr, operation=action
            ) from e

    # ------------------------------------------------------------------
    # Validation and HEAD
    # ------------------------------------------------------------------

    def ensure_valid(self) -> None:
        git_dir = Path(self._repo.git_dir)
        if not git_dir.is_dir() or not self._path.is_dir():
            raise InvalidRepositoryError(self._path)
        try:
            self._run(["rev-parse", "--git-dir"])
        except GitCommandError as e:
            raise InvalidRepositoryError(self._path) from e

    def head_branch(self) -> str | None:
        try:
            name = self._run(["symbolic-ref", "--quiet", "--short", "HEAD"]).strip()
        except GitCommandError:
            return None
        return name or None

    def head_commit(self) -> str | None:
        return self.branch_tip("HEAD")

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status_entries(self) -> list[StatusEntry]:
        output = self._git(
            ["status", "--porcelain=v1", "-z", "--untracked-files=all"],
            "Failed to read repository status",
        )
        tokens = output.split("\0")
        entries: list[StatusEntry] = []
        i = 0
        while i < len(tokens):
            token = tokens[i]
            i += 1
            if len(token) < 4:
                continue
            index, worktree, path = token[0], token[1], token[3:]
            orig_path = None
            if index in ("R", "C"):
                # -z puts the source path in the following field
                orig_path = tokens[i] if i < len(tokens) else None
                i += 1
            entries.append(
                StatusEntry(path=path, index=index, worktree=worktree, orig_path=orig_path)
            )
        return entries

    # ------------------------------------------------------------------
    # Branches and remotes
    # ------------------------------------------------------------------

    def _refs(self, namespace: str) -> list[RefInfo]:
        output = self._git(
            ["for-each-ref", f"--format={REF_FORMAT}", f"refs/{namespace}/"],
            "Failed to list branches",
        )
        prefix = f"refs/{namespace}/"
        refs: list[RefInfo] = []
        for line in output.splitlines():
            if not line.strip():
                continue
            fields = line.split("\0")
            fields += [""] * (6 - len(fields))
            refname, sha, upstream, subject, author, date = fields[:6]
            refs.append(
                RefInfo(
                    name=refname[len(prefix):] if refname.startswith(prefix) else refname,
                    tip=sha or None,
                    upstream=upstream or None,
                    subject=subject,
                    author=author,
                    date=_parse_date(date),
                )
            )
        return refs

    def local_branches(self) -> list[RefInfo]:
        return self._refs("heads")

    def remotes(self) -> list[str]:
        output = self._git(["remote"], "Failed to list remotes")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def remote_branches(self) -> list[RefInfo]:
        # Longest first so "origin-mirror" wins over "origin" as a prefix
        remotes = sorted(self.remotes(), key=len, reverse=True)
        branches: list[RefInfo] = []
        for ref in self._refs("remotes"):
            if ref.name.endswith("/HEAD"):
                continue
            remote = next((r for r in remotes if ref.name.startswith(f"{r}/")), None)
            branches.append(
                RefInfo(
                    name=ref.name,
                    tip=ref.tip,
                    remote=remote,
                    subject=ref.subject,
                    author=ref.author,
                    date=ref.date,
                )
            )
        return branches

    def branch_tip(self, name: str) -> str | None:
        try:
            sha = self._run(["rev-parse", "--verify", "--quiet", f"{name}^{{commit}}"]).strip()
        except GitCommandError:
            return None
        return sha or None

    def create_tracking_branch(self, name: str, remote_ref: str) -> None:
        self.ensure_valid()
        self._git(
            ["branch", "--track", name, remote_ref],
            f"Failed to create branch {name} from {remote_ref}",
        )
        logger.info("Created branch %s tracking %s", name, remote_ref)

    def checkout(self, name: str) -> None:
        self.ensure_valid()
        self._git(["checkout", name], f"Failed to check out {name}")

    def has_remote(self, name: str) -> bool:
        return name in self.remotes()

    def add_remote(self, name: str, url: str) -> None:
        self.ensure_valid()
        self._git(["remote", "add", name, url], f"Failed to add remote {name}")
        logger.info("Added remote %s", name)

    def fetch(self, remote: str, *, timeout: float | None = None) -> None:
        self.ensure_valid()
        self._network(["fetch", remote], timeout=timeout, action="fetch")

    def push(
        self,
        remote: str,
        branch: str,
        *,
        force: bool = False,
        tags: list[str] | None = None,
        timeout: float | None = None,
    ) -> None:
        self.ensure_valid()
        args = ["push", "--set-upstream"]
        if force:
            args.append("--force")
        args.append(remote)
        args.append(f"refs/heads/{branch}:refs/heads/{branch}")
        for tag in tags or []:
            args.append(f"refs/tags/{tag}:refs/tags/{tag}")
        self._network(args, timeout=timeout, action="push")

    # ------------------------------------------------------------------
    # Merge and conflicts
    # ------------------------------------------------------------------

    def merge(
        self,
        ref: str,
        *,
        strategy_hint: str | None = None,
        identity: Identity | None = None,
    ) -> MergeOutcome:
        """
        Merge ref into the checked-out branch.

        A merge commit is authored as identity when given, so hosts without
        a configured git user can still merge diverged branches.
        """
        self.ensure_valid()
        args = ["merge", "--no-edit"]
        if strategy_hint:
            args.extend(["-X", strategy_hint])
        args.append(ref)

        try:
            output = self._run(args, env=_identity_env(identity) if identity else None)
        except GitCommandError as e:
            conflicted = self.conflicted_paths()
            if conflicted:
                logger.info("Merge of %s stopped with %d conflicts", ref, len(conflicted))
                return MergeOutcome(conflicted=conflicted)
            raise InternalGitError(
                f"Failed to merge {ref}", command=["git", *args], stderr=_output(e.stderr)
            ) from e

        return MergeOutcome(
            up_to_date="up to date" in output.lower(),
            fast_forward="fast-forward" in output.lower(),
        )

    def _unmerged_stages(self) -> dict[str, set[int]]:
        output = self._git(["ls-files", "--unmerged", "-z"], "Failed to list conflicted paths")
        stages: dict[str, set[int]] = {}
        for record in output.split("\0"):
            if "\t" not in record:
                continue
            meta, path = record.split("\t", 1)
            # meta is "<mode> <object> <stage>"
            stage = int(meta.split()[2])
            stages.setdefault(path, set()).add(stage)
        return stages

    def conflicted_paths(self) -> list[str]:
        return sorted(self._unmerged_stages())

    def conflict_sides(self, path: str) -> ConflictSides:
        stages = self._unmerged_stages().get(path, set())
        return ConflictSides(ours_present=2 in stages, theirs_present=3 in stages)

    def checkout_side(self, path: str, side: ConflictSide) -> None:
        self.ensure_valid()
        self._git(["checkout", f"--{side}", "--", path], f"Failed to check out {side} for {path}")

    def stage(self, path: str) -> None:
        self.ensure_valid()
        self._git(["add", "--", path], f"Failed to stage {path}")

    def remove(self, path: str) -> None:
        self.ensure_valid()
        self._git(["rm", "--quiet", "--force", "--", path], f"Failed to remove {path}")

    def commit(self, message: str, identity: Identity) -> str:
        self.ensure_valid()
        args = ["commit", "--no-verify", "-m", message]
        try:
            self._run(args, env=_identity_env(identity))
        except GitCommandError as e:
            stderr = _output(e.stderr) or _output(e.stdout)
            raise InternalGitError(
                "Failed to create commit", command=["git", *args], stderr=stderr
            ) from e

        sha = self.head_commit()
        if sha is None:
            raise InternalGitError("Commit did not produce a HEAD", command=["git", *args])
        return sha

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def rev_list(self, include: list[str], exclude: list[str] | None = None) -> list[str]:
        if not include:
            return []
        args = ["rev-list", *include, *[f"^{ref}" for ref in exclude or []], "--"]
        output = self._git(args, "Failed to list commits")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def _diff_tree(self, fmt: str, sha: str, parent: str | None) -> list[str]:
        args = ["diff-tree", "-r", "-M", fmt, "-z", "--no-commit-id"]
        args.extend([parent, sha] if parent else ["--root", sha])
        return self._git(args, f"Failed to diff commit {sha}").split("\0")

    def _changed_files(self, sha: str, parent: str | None) -> list[FileChange]:
        # --numstat -z: "<add>\t<del>\t<path>" or "<add>\t<del>\t" + old + new for renames
        counts: dict[str, tuple[int, int]] = {}
        tokens = self._diff_tree("--numstat", sha, parent)
        i = 0
        while i < len(tokens):
            fields = tokens[i].split("\t")
            i += 1
            if len(fields) < 3:
                continue
            added, deleted, path = fields[0], fields[1], fields[2]
            if not path:
                path = tokens[i + 1] if i + 1 < len(tokens) else ""
                i += 2
            counts[path] = (_count(added), _count(deleted))

        # --name-status -z: "<status>" + path, or "R<score>" + old + new
        changes: list[FileChange] = []
        tokens = self._diff_tree("--name-status", sha, parent)
        i = 0
        while i < len(tokens):
            status = tokens[i]
            i += 1
            if not status:
                continue
            old_path = None
            if status[0] in ("R", "C"):
                old_path, path = tokens[i], tokens[i + 1]
                i += 2
            else:
                path = tokens[i]
                i += 1
            change_type = _CHANGE_TYPES.get(status[0], ChangeType.MODIFIED)
            added, deleted = counts.get(path, (0, 0))
            changes.append(
                FileChange(
                    path=path,
                    change_type=change_type,
                    old_path=old_path if change_type == ChangeType.RENAMED else None,
                    added_lines=added,
                    deleted_lines=deleted,
                )
            )
        return changes

    def commit_summary(self, sha: str) -> CommitSummary:
        try:
            commit = self._repo.commit(sha)
        except (ValueError, GitCommandError) as e:
            raise InternalGitError(f"Unknown commit: {sha}") from e

        parent = commit.parents[0].hexsha if commit.parents else None
        message = commit.message
        if isinstance(message, bytes):
            message = message.decode("utf-8", errors="replace")

        return CommitSummary(
            sha=commit.hexsha,
            message=message.strip(),
            author_name=commit.author.name or "",
            author_email=commit.author.email or "",
            author_timestamp=commit.authored_datetime,
            committer_name=commit.committer.name or "",
            committer_email=commit.committer.email or "",
            committer_timestamp=commit.committed_datetime,
            changed_files=self._changed_files(commit.hexsha, parent),
        )

    def close(self) -> None:
        self._repo.close()


class GitPythonBackend:
    """
    Opens working copies with GitPython.

    Example:
        >>> backend = GitPythonBackend(access_token=None)
        >>> with open_repository(backend, Path(".")) as repo:
        ...     print(repo.head_branch())
    """

    def __init__(self, access_token: str | None = None) -> None:
        self.access_token = access_token

    def open(self, path: Path) -> GitPythonRepository:
        try:
            repo = Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise InvalidRepositoryError(path) from e

        if repo.bare:
            repo.close()
            raise InvalidRepositoryError(path)

        return GitPythonRepository(repo, access_token=self.access_token)
