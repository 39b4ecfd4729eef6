"""
Branch Smasher - rebase, squash and force push the current branch, then merge it back.

This package wraps one Git workflow: update the target branch, interactively rebase
the current branch onto it, force push, and optionally fast-forward the target.
"""

import os

__version__ = "0.1.0"

# GitPython refuses to import without a git executable; defer that to the
# availability check so a missing git is reported like any other precondition.
# The variable is only read while `git` is first imported, so the caller's
# environment is restored right after.
_refresh_setting = os.environ.get("GIT_PYTHON_REFRESH")
os.environ["GIT_PYTHON_REFRESH"] = _refresh_setting or "quiet"
try:
    import git  # noqa: F401
finally:
    if _refresh_setting is None:
        del os.environ["GIT_PYTHON_REFRESH"]
del _refresh_setting

from .smasher import BranchSmasher
from .models import (
    DEFAULT_TARGET_BRANCH,
    SmashSession,
    SmashStage,
    SmashStep,
    SmashError,
    GitStepError,
)
from .git_manager import GitManager
from .prompt_interface import MergePrompt, NoOpPrompt, AutoConfirmPrompt

__all__ = [
    "BranchSmasher",
    "DEFAULT_TARGET_BRANCH",
    "SmashSession",
    "SmashStage",
    "SmashStep",
    "SmashError",
    "GitStepError",
    "GitManager",
    "MergePrompt",
    "NoOpPrompt",
    "AutoConfirmPrompt",
]
