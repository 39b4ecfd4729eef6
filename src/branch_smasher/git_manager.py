"""
Git repository management and operations.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional
from git import Git, Repo, InvalidGitRepositoryError, NoSuchPathError
from git.exc import GitCommandError, GitCommandNotFound

from .models import DetachedHeadError, GitRepositoryError, NotARepositoryError


logger = logging.getLogger(__name__)


def git_reason(error: GitCommandError) -> str:
    """Return the stderr git printed for a failed command, without GitPython's framing."""
    text = (error.stderr or "").strip()
    if text.startswith("stderr:"):
        text = text[len("stderr:"):].strip()
        if len(text) >= 2 and text[0] == text[-1] == "'":
            text = text[1:-1]
    return text.strip()


class GitManager:
    """Runs the git commands a smash needs, one call per workflow step."""

    def __init__(self, repo_path: Optional[Path] = None) -> None:
        """Initialize Git manager with optional repository path."""
        self.repo_path = (repo_path or Path.cwd()).resolve()
        self._repo: Optional[Repo] = None

    @property
    def repo(self) -> Repo:
        """Get the Git repository instance."""
        if self._repo is None:
            self._repo = self._discover_repository()
        return self._repo

    def _discover_repository(self) -> Repo:
        """Discover the Git repository from current or specified path."""
        search_path = self.repo_path

        logger.debug(f"Discovering repository in: {search_path}")
        # Walk up the directory tree to find a Git repository
        while search_path != search_path.parent:
            try:
                repo = Repo(search_path)
                logger.info(f"Found Git repository at: {search_path}")
                return repo
            except (InvalidGitRepositoryError, NoSuchPathError):
                search_path = search_path.parent

        raise NotARepositoryError(
            f"No Git repository found at {self.repo_path} or any parent directory"
        )

    @property
    def working_dir(self) -> Path:
        return Path(self.repo.working_dir)

    # --- Environment checks ---
    def is_git_available(self) -> bool:
        """Return True if the git executable answers `git version`."""
        try:
            version = Git().version()
            logger.debug(f"Using {version.strip()}")
            return True
        except (GitCommandNotFound, GitCommandError, OSError) as e:
            logger.error(f"git executable not usable: {e}")
            return False

    def ensure_repository(self) -> None:
        """Raise NotARepositoryError unless repo_path is inside a work tree."""
        _ = self.repo

    def get_current_branch(self) -> str:
        """Get the current branch name."""
        try:
            return self.repo.active_branch.name
        except TypeError as e:
            # GitPython raises TypeError when HEAD is a bare commit
            logger.error(f"HEAD is detached in {self.repo.working_dir}: {e}")
            raise DetachedHeadError(
                "HEAD is detached; check out a named branch before running"
            ) from e
        except Exception as e:
            logger.error(f"Error getting current branch: {e}")
            raise GitRepositoryError(f"Could not determine current branch: {e}") from e

    # --- Branch operations ---
    def checkout_branch(self, branch_name: str) -> None:
        """Checkout a specific branch."""
        try:
            self.repo.git.checkout(branch_name)

            logger.info(f"Checked out branch: {branch_name}")
        except GitCommandError as e:
            logger.error(f"Error checking out branch {branch_name}: {e}")
            raise GitRepositoryError(
                f"Failed to checkout branch {branch_name}: {e}", git_reason(e)
            ) from e

    def pull_fast_forward(self) -> None:
        """Fast-forward the checked out branch to its upstream."""
        try:
            self.repo.git.pull("--ff-only")
            logger.info(f"Fast-forwarded {self.repo.active_branch.name} from upstream")
        except GitCommandError as e:
            logger.error(f"Failed to fast-forward from upstream: {e}")
            raise GitRepositoryError(f"Failed to pull: {e}", git_reason(e)) from e

    def rebase_interactive(self, target_branch: str) -> None:
        """Run `git rebase -i <target_branch>` attached to the user's terminal.

        GitPython pipes stdout/stderr, which breaks terminal editors, so the
        rebase is spawned directly and only its exit status is inspected.
        Blocks until the editing session ends.
        """
        git_exe = Git.GIT_PYTHON_GIT_EXECUTABLE or "git"
        cmd = [git_exe, "rebase", "-i", target_branch]
        logger.debug(f"Called '{' '.join(cmd)}' in {self.working_dir}")
        try:
            completed = subprocess.run(cmd, cwd=str(self.working_dir), check=False)
        except OSError as e:
            logger.error(f"Could not start rebase: {e}")
            raise GitRepositoryError(f"Could not start rebase: {e}") from e

        if completed.returncode != 0:
            logger.error(f"Rebase onto {target_branch} exited with {completed.returncode}")
            raise GitRepositoryError(
                f"git rebase exited with status {completed.returncode}"
            )
        logger.info(f"Rebase onto {target_branch} completed successfully")

    def is_rebase_in_progress(self) -> bool:
        """Check if a rebase is currently in progress."""
        try:
            git_dir = Path(self.repo.git_dir)

            # Check for rebase-related files
            rebase_files = [git_dir / "rebase-merge", git_dir / "rebase-apply"]
            return any(f.exists() for f in rebase_files)
        except Exception as e:
            logger.error(f"Error checking rebase status: {e}")
            return False

    def merge_fast_forward(self, branch_name: str) -> None:
        """Merge branch_name into the checked out branch, refusing a merge commit."""
        try:
            self.repo.git.merge("--ff-only", branch_name)
            logger.info(f"Fast-forward merged {branch_name}")
        except GitCommandError as e:
            logger.error(f"Failed to fast-forward merge {branch_name}: {e}")
            raise GitRepositoryError(f"Failed to merge {branch_name}: {e}", git_reason(e)) from e

    # --- Remote operations ---
    def force_push(self, force_with_lease: bool = False) -> None:
        """Force push the checked out branch to its upstream."""
        flag = "--force-with-lease" if force_with_lease else "--force"
        try:
            self.repo.git.push(flag)
            logger.info(f"Pushed with {flag}")
        except GitCommandError as e:
            logger.error(f"Force push failed: {e}")
            raise GitRepositoryError(f"Failed to push: {e}", git_reason(e)) from e

    def push(self) -> None:
        """Push the checked out branch to its upstream."""
        try:
            self.repo.git.push()
            logger.info("Pushed to upstream")
        except GitCommandError as e:
            logger.error(f"Push failed: {e}")
            raise GitRepositoryError(f"Failed to push: {e}", git_reason(e)) from e
