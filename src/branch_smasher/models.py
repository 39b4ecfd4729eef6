"""
Data models for the branch smasher workflow.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


DEFAULT_TARGET_BRANCH = "master"


class SmashStage(Enum):
    """States of a single smash run, in the order they are reached."""

    START = "start"
    PRECONDITIONS_CHECKED = "preconditions_checked"
    TARGET_SYNCED = "target_synced"
    BACK_ON_SOURCE = "back_on_source"
    REBASED = "rebased"
    FORCE_PUSHED = "force_pushed"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    MERGED = "merged"
    PUSHED = "pushed"
    DONE = "done"


class SmashStep(Enum):
    """Delegated git calls that can fail after the preconditions pass."""

    CHECKOUT_TARGET = "checkout_target"
    UPDATE_TARGET = "update_target"
    CHECKOUT_SOURCE = "checkout_source"
    REBASE = "rebase"
    FORCE_PUSH = "force_push"
    CHECKOUT_MERGE_TARGET = "checkout_merge_target"
    MERGE = "merge"
    PUSH_TARGET = "push_target"


@dataclass
class SmashSession:
    """Context for one run, threaded through every step."""

    repo_path: Path
    target_branch: str = DEFAULT_TARGET_BRANCH
    current_branch: Optional[str] = None
    merge_confirmed: bool = False
    stage: SmashStage = SmashStage.START

    def __post_init__(self) -> None:
        """Ensure path is absolute."""
        self.repo_path = Path(self.repo_path).resolve()

    def advance(self, stage: SmashStage) -> None:
        self.stage = stage


class SmashError(Exception):
    """Base exception for smash operations."""

    pass


class PreconditionError(SmashError):
    """Raised when the environment is not fit to start a run."""

    pass


class GitToolMissingError(PreconditionError):
    """Exception raised when the git executable cannot be found."""

    pass


class NotARepositoryError(PreconditionError):
    """Exception raised when no repository encloses the working directory."""

    pass


class DetachedHeadError(PreconditionError):
    """Exception raised when HEAD does not point at a named branch."""

    pass


class GitRepositoryError(SmashError):
    """Exception raised for Git repository related errors.

    `reason` holds what git printed on stderr, when it printed anything.
    """

    def __init__(self, message: str, reason: str = "") -> None:
        super().__init__(message)
        self.reason = reason


class GitStepError(SmashError):
    """A delegated git call failed partway through the workflow."""

    def __init__(self, step: SmashStep, message: str, reason: str = "") -> None:
        super().__init__(f"{message}\n{reason}" if reason else message)
        self.step = step
        self.reason = reason
