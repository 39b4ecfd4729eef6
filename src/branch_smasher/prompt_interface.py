"""
UI-agnostic prompt interface for user interactions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class MergePrompt(ABC):
    """Abstract interface for asking whether to merge back into the target."""

    @abstractmethod
    def confirm_merge(self, source_branch: str, target_branch: str) -> bool:
        """
        Ask user if the rebased branch should be merged into the target.

        Args:
            source_branch: The branch that was rebased and force-pushed
            target_branch: The branch to fast-forward and push

        Returns:
            True only if the user answered yes, False otherwise
        """
        pass


class NoOpPrompt(MergePrompt):
    """No-operation prompt that always declines the merge."""

    def confirm_merge(self, source_branch: str, target_branch: str) -> bool:
        return False


class AutoConfirmPrompt(MergePrompt):
    """Prompt that always confirms, for unattended runs."""

    def confirm_merge(self, source_branch: str, target_branch: str) -> bool:
        return True
