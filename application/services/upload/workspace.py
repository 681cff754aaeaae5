"""
Repository workspace for a single upload operation.

Owns a private temporary directory and drives git through the sequence
clone -> branch resolution -> file materialization -> stage -> commit -> push.
Use it as an async context manager: the directory and any SSH key material
are removed on every exit path, and teardown errors are logged, never raised.
"""

import asyncio
import logging
import posixpath
import shutil
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional

from common.config.config import GIT_BINARY, GIT_CLONE_DEPTH, UPLOAD_WORK_DIR
from application.services.upload.credentials import AuthContext, has_authentication
from application.services.upload.errors import (
    CleanupError,
    CloneError,
    FileProcessingError,
    GitCommandError,
    NoChangesError,
    PushError,
    redact_credentials,
)
from application.services.upload.git_command import GitRunner
from application.services.upload.types import MaterializedFile, StatusSummary, WorkspaceState

logger = logging.getLogger(__name__)

NO_CHANGES_MSG = "No changes detected - files may already exist with the same content"

# A failed clone of the requested branch containing any of these is not a
# missing-branch condition, so retrying with the default branch would only
# hide the real cause.
FATAL_CLONE_MARKERS = (
    "authentication failed",
    "could not read username",
    "could not read password",
    "permission denied",
    "repository not found",
    "does not appear to be a git repository",
    "could not resolve host",
    "connection timed out",
    "connection refused",
    "host key verification failed",
)


def is_fatal_clone_failure(stderr: str) -> bool:
    lowered = (stderr or "").lower()
    return any(marker in lowered for marker in FATAL_CLONE_MARKERS)


def resolve_destination(root: Path, name: str) -> Optional[Path]:
    """Map a relative upload path to a location inside root.

    Returns None for paths that must not be written: empty names, hidden or
    dot-relative paths, anything touching a .git directory, absolute paths,
    and paths that would escape root after normalization.
    """
    if not name:
        return None
    candidate = name.replace("\\", "/")
    if candidate.startswith(".") or candidate.startswith("/"):
        return None
    if ".git" in candidate.split("/"):
        return None

    normalized = posixpath.normpath(candidate)
    if normalized in (".", "..") or normalized.startswith("../"):
        return None

    root_resolved = root.resolve()
    destination = (root_resolved / normalized).resolve()
    if root_resolved not in destination.parents:
        return None
    return destination


def parse_porcelain_status(output: str) -> StatusSummary:
    """Bucket `git status --porcelain` lines by change type."""
    summary = StatusSummary()
    for line in output.splitlines():
        if len(line) < 4:
            continue
        index_code, worktree_code, path = line[0], line[1], line[3:]
        if index_code == "?" and worktree_code == "?":
            summary.created.append(path)
            continue
        code = index_code if index_code != " " else worktree_code
        if code == "A":
            summary.created.append(path)
        elif code == "D":
            summary.deleted.append(path)
        elif code in ("R", "C"):
            summary.renamed.append(path)
        else:
            summary.modified.append(path)
    return summary


class RepositoryWorkspace:
    """Exclusively-owned working clone for one upload."""

    def __init__(
        self,
        auth: AuthContext,
        branch: str,
        base_dir: Optional[str] = UPLOAD_WORK_DIR,
        clone_depth: int = GIT_CLONE_DEPTH,
        git_binary: str = GIT_BINARY,
    ):
        self.auth = auth
        self.branch = branch
        self.base_dir = base_dir
        self.clone_depth = clone_depth
        self.git_binary = git_binary
        self.path: Optional[Path] = None
        self.state: Optional[WorkspaceState] = None
        self.created_branch = False
        self.written_files: List[str] = []

    async def __aenter__(self) -> "RepositoryWorkspace":
        try:
            self.path = Path(tempfile.mkdtemp(prefix="git-upload-", dir=self.base_dir))
        except BaseException:
            await self.cleanup()
            raise
        self.state = WorkspaceState.CREATED
        logger.info(f"Created work directory: {self.path}")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc is not None:
            logger.warning(f"Upload failed in state '{self.state.value if self.state else None}': {exc}")
            self.state = WorkspaceState.FAILED
        await self.cleanup()
        return False

    @property
    def git(self) -> GitRunner:
        return GitRunner(cwd=str(self.path), extra_env=self.auth.env, git_binary=self.git_binary)

    def _expect(self, state: WorkspaceState) -> None:
        if self.state != state:
            raise RuntimeError(
                f"Workspace is in state '{self.state}', expected '{state.value}'"
            )

    def _clear_directory(self) -> None:
        for child in self.path.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()

    async def clone(self) -> None:
        """Shallow-clone the requested branch, falling back to the default branch."""
        self._expect(WorkspaceState.CREATED)
        depth_args = [f"--depth={self.clone_depth}"] if self.clone_depth > 0 else []
        remote = self.auth.remote_url

        logger.info(f"Cloning {self.auth.display_url} (branch '{self.branch}')")
        result = await self.git.run(
            "clone", *depth_args, "--single-branch", "--branch", self.branch, remote, "."
        )
        if result.returncode == 0:
            logger.info(f"Successfully cloned branch: {self.branch}")
            self.state = WorkspaceState.CLONED
            return

        first_error = redact_credentials(result.stderr.strip())
        if is_fatal_clone_failure(first_error):
            raise CloneError("Failed to clone repository", details=first_error)

        logger.info(
            f"Branch {self.branch} might not exist, cloning default branch and creating new branch"
        )
        await asyncio.to_thread(self._clear_directory)
        result = await self.git.run("clone", *depth_args, remote, ".")
        if result.returncode != 0:
            second_error = redact_credentials(result.stderr.strip())
            raise CloneError(
                "Failed to clone repository",
                details=f"{first_error}\n{second_error}".strip(),
            )

        self.created_branch = True
        self.state = WorkspaceState.CLONED

    async def prepare_branch(self) -> None:
        """Switch to a new local branch when the clone fell back to the default branch."""
        self._expect(WorkspaceState.CLONED)
        if self.created_branch:
            await self.git.check("checkout", "-b", self.branch)
            logger.info(f"Created and checked out new branch: {self.branch}")
        self.state = WorkspaceState.BRANCH_READY

    async def configure(self, author_name: str, author_email: str) -> None:
        """Set explicit identity and point origin at the authenticated remote."""
        self._expect(WorkspaceState.BRANCH_READY)
        logger.info("Configuring git user and settings")
        await self.git.check("config", "user.name", author_name)
        await self.git.check("config", "user.email", author_email)
        await self.git.check("config", "credential.helper", "")
        await self.git.check("config", "core.askpass", "")

        if not self.auth.uses_ssh:
            await self.git.check("remote", "set-url", "origin", self.auth.remote_url)
            logger.info("Remote URL updated with authentication")

    def _write_files(self, files: Iterable[MaterializedFile]) -> List[str]:
        written = []
        for file in files:
            destination = resolve_destination(self.path, file.path)
            if destination is None:
                logger.info(f"Skipping hidden/git/unsafe file: {file.path!r}")
                continue
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_bytes(file.content)
            except OSError as e:
                logger.error(f"Failed to copy file {file.path}: {e}")
                raise FileProcessingError(f"Failed to copy file {file.path}: {e}") from e
            written.append(file.path)
        return written

    async def write_files(self, files: Iterable[MaterializedFile]) -> List[str]:
        """Materialize files under the workspace root; unsafe paths are skipped."""
        self._expect(WorkspaceState.BRANCH_READY)
        self.written_files = await asyncio.to_thread(self._write_files, list(files))
        logger.info(f"Copied {len(self.written_files)} files to repository")
        self.state = WorkspaceState.FILES_WRITTEN
        return self.written_files

    async def stage(self) -> StatusSummary:
        """Stage everything; an empty change set is a NoChangesError."""
        self._expect(WorkspaceState.FILES_WRITTEN)
        await self.git.check("add", "--all")

        # stdout is parsed unstripped: the leading status column may be a space
        result = await self.git.run("status", "--porcelain")
        if result.returncode != 0:
            raise GitCommandError("git status --porcelain", result.returncode, result.stderr)
        summary = parse_porcelain_status(result.stdout)
        logger.info(
            f"Git status after add: created={len(summary.created)}, "
            f"modified={len(summary.modified)}, deleted={len(summary.deleted)}, "
            f"renamed={len(summary.renamed)}"
        )
        if summary.total == 0:
            raise NoChangesError(NO_CHANGES_MSG)

        self.state = WorkspaceState.STAGED
        return summary

    async def commit(self, message: str) -> None:
        self._expect(WorkspaceState.STAGED)
        await self.git.check("commit", "-m", message)
        logger.info("Changes committed successfully")
        self.state = WorkspaceState.COMMITTED

    async def push(self) -> None:
        """Push the branch and set its upstream; re-applies credentials if origin lost them."""
        self._expect(WorkspaceState.COMMITTED)

        if not self.auth.uses_ssh:
            current = await self.git.run("remote", "get-url", "--push", "origin")
            if current.returncode != 0 or not has_authentication(current.stdout.strip()):
                logger.info("Updating remote URL for push...")
                await self.git.check("remote", "set-url", "origin", self.auth.remote_url)

        result = await self.git.run("push", "--set-upstream", "origin", self.branch)
        if result.returncode != 0:
            raise PushError(
                "Failed to push to remote", details=redact_credentials(result.stderr.strip())
            )

        logger.info("Successfully pushed to remote")
        self.state = WorkspaceState.PUSHED

    def finish(self) -> None:
        self._expect(WorkspaceState.PUSHED)
        self.state = WorkspaceState.DONE

    async def cleanup(self) -> None:
        """Remove the work directory and key material. Never raises."""
        if self.path is not None:
            try:
                await asyncio.to_thread(shutil.rmtree, self.path)
                logger.info(f"Cleaned up work directory: {self.path}")
            except OSError as e:
                error = CleanupError(f"Failed to cleanup work directory {self.path}: {e}")
                logger.error(error.message)
            self.path = None

        try:
            self.auth.close()
        except OSError as e:
            error = CleanupError(f"Failed to cleanup SSH directory: {e}")
            logger.warning(error.message)
