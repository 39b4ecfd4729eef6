"""
Main orchestration logic: rebase, force-push and optionally merge back.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from .git_manager import GitManager
from .models import (
    DEFAULT_TARGET_BRANCH,
    DetachedHeadError,
    GitRepositoryError,
    GitStepError,
    GitToolMissingError,
    SmashSession,
    SmashStage,
    SmashStep,
)
from .prompt_interface import MergePrompt, NoOpPrompt


logger = logging.getLogger(__name__)


class BranchSmasher:
    """Runs the fixed rebase/force-push/merge sequence against one repository.

    Every step delegates to git and stops the run on the first failure.
    Nothing is rolled back: the repository is left exactly where the failing
    command left it.
    """

    def __init__(
        self,
        repo_path: Optional[Path] = None,
        prompt: Optional[MergePrompt] = None,
        git_manager: Optional[GitManager] = None,
        force_with_lease: bool = False,
        on_progress: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.repo_path = repo_path or Path.cwd()
        self.git_manager = git_manager or GitManager(self.repo_path)
        self.prompt = prompt or NoOpPrompt()
        self.force_with_lease = force_with_lease
        self.on_progress = on_progress

    def run(self, target_branch: Optional[str] = None) -> SmashSession:
        """Execute the whole workflow and return the finished session."""
        session = SmashSession(repo_path=self.repo_path)

        self.check_preconditions(session)
        self.resolve_target_branch(session, target_branch)
        logger.info(
            f"Smashing {session.current_branch} onto {session.target_branch} in {session.repo_path}"
        )

        self.sync_target_branch(session)
        self.return_to_source_branch(session)
        self.rebase_onto_target(session)
        self.force_push_source(session)

        if self.confirm_merge(session):
            self.merge_back(session)

        session.advance(SmashStage.DONE)
        logger.info(f"Run finished for {session.current_branch}")
        return session

    def check_preconditions(self, session: SmashSession) -> None:
        """Verify git, the repository and an attached HEAD before touching anything."""
        gm = self.git_manager
        if not gm.is_git_available():
            raise GitToolMissingError("git is not installed or not on PATH")

        gm.ensure_repository()
        session.current_branch = gm.get_current_branch()
        if not session.current_branch:
            raise DetachedHeadError("HEAD is detached; check out a named branch before running")

        session.advance(SmashStage.PRECONDITIONS_CHECKED)
        logger.debug(f"Preconditions passed, current branch is {session.current_branch}")

    def resolve_target_branch(
        self, session: SmashSession, target_branch: Optional[str] = None
    ) -> str:
        """Pick the branch to rebase onto; existence is checked by the checkout."""
        session.target_branch = target_branch or DEFAULT_TARGET_BRANCH
        return session.target_branch

    def sync_target_branch(self, session: SmashSession) -> None:
        """Checkout the target and fast-forward it to its upstream."""
        target = session.target_branch
        self._progress(f"Updating {target}")
        self._step(
            SmashStep.CHECKOUT_TARGET,
            f"Failed to checkout {target}",
            self.git_manager.checkout_branch,
            target,
        )
        self._step(
            SmashStep.UPDATE_TARGET,
            f"Failed to update {target} from its upstream remote",
            self.git_manager.pull_fast_forward,
        )
        session.advance(SmashStage.TARGET_SYNCED)

    def return_to_source_branch(self, session: SmashSession) -> None:
        source = session.current_branch
        self._step(
            SmashStep.CHECKOUT_SOURCE,
            f"Failed to checkout {source}",
            self.git_manager.checkout_branch,
            source,
        )
        session.advance(SmashStage.BACK_ON_SOURCE)

    def rebase_onto_target(self, session: SmashSession) -> None:
        """Interactive rebase; blocks while the user edits the todo list."""
        source, target = session.current_branch, session.target_branch
        self._progress(f"Rebasing {source} onto {target}")
        try:
            self.git_manager.rebase_interactive(target)
        except GitRepositoryError as e:
            message = f"Rebase of {source} onto {target} failed or was aborted"
            if self.git_manager.is_rebase_in_progress():
                message += "; finish it with 'git rebase --continue' or undo it with 'git rebase --abort'"
            raise GitStepError(SmashStep.REBASE, message) from e
        session.advance(SmashStage.REBASED)

    def force_push_source(self, session: SmashSession) -> None:
        source = session.current_branch
        self._progress(f"Force pushing {source}")
        self._step(
            SmashStep.FORCE_PUSH,
            f"Failed to force push {source}; does it have an upstream tracking branch?",
            self.git_manager.force_push,
            self.force_with_lease,
        )
        session.advance(SmashStage.FORCE_PUSHED)

    def confirm_merge(self, session: SmashSession) -> bool:
        """Ask once; anything but an explicit yes ends the run successfully."""
        session.merge_confirmed = bool(
            self.prompt.confirm_merge(session.current_branch, session.target_branch)
        )
        if session.merge_confirmed:
            session.advance(SmashStage.CONFIRMED)
        else:
            logger.info(f"Merge into {session.target_branch} declined")
            session.advance(SmashStage.DECLINED)
        return session.merge_confirmed

    def merge_back(self, session: SmashSession) -> None:
        """Fast-forward the target to the rebased branch and push it."""
        source, target = session.current_branch, session.target_branch
        self._progress(f"Merging {source} into {target}")
        self._step(
            SmashStep.CHECKOUT_MERGE_TARGET,
            f"Failed to checkout {target} for the merge",
            self.git_manager.checkout_branch,
            target,
        )
        self._step(
            SmashStep.MERGE,
            f"Could not fast-forward {target} to {source}; {target} has probably diverged",
            self.git_manager.merge_fast_forward,
            source,
        )
        session.advance(SmashStage.MERGED)

        self._progress(f"Pushing {target}")
        self._step(
            SmashStep.PUSH_TARGET,
            f"Failed to push {target}",
            self.git_manager.push,
        )
        session.advance(SmashStage.PUSHED)

    def _step(self, step: SmashStep, message: str, func, *args) -> None:
        try:
            func(*args)
        except GitRepositoryError as e:
            logger.debug(f"Step {step.value} failed", exc_info=True)
            raise GitStepError(step, message, e.reason) from e

    def _progress(self, message: str) -> None:
        if self.on_progress is not None:
            self.on_progress(message)
