"""
Shared fixtures: isolated logging and throwaway git repositories.
"""

import shutil
import subprocess
from pathlib import Path
from types import SimpleNamespace

import pytest


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git(*args, cwd: Path) -> str:
    result = subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    )
    return result.stdout.strip()


def commit_change(path: Path, filename: str, message: str) -> str:
    """Append a line to filename, commit it and return the new HEAD sha."""
    with open(path / filename, "a") as f:
        f.write(message + "\n")
    git("add", filename, cwd=path)
    git("commit", "-m", message, cwd=path)
    return git("rev-parse", "HEAD", cwd=path)


def push_upstream_change(sandbox, filename: str = "upstream.txt", branch: str = "master") -> str:
    """Commit to `branch` on the remote from a second clone, as a teammate would."""
    other = sandbox.root / "other"
    if not other.exists():
        git("clone", str(sandbox.remote), str(other), cwd=sandbox.root)
    git("checkout", branch, cwd=other)
    git("pull", "--ff-only", cwd=other)
    sha = commit_change(other, filename, f"upstream change to {filename}")
    git("push", "origin", branch, cwd=other)
    return sha


@pytest.fixture(autouse=True)
def isolated_log(tmp_path, monkeypatch):
    """Keep CLI log files out of the real home directory."""
    log_path = tmp_path / "logs" / "branch-smasher.log"
    monkeypatch.setenv("BRANCH_SMASHER_LOG", str(log_path))
    return log_path


@pytest.fixture()
def git_env(tmp_path, monkeypatch):
    """Deterministic, non-interactive git configuration."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test Author")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test Author")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    # Accept the rebase todo list as-is instead of opening an editor
    monkeypatch.setenv("GIT_SEQUENCE_EDITOR", "true")
    monkeypatch.setenv("GIT_EDITOR", "true")
    monkeypatch.setenv("GIT_TERMINAL_PROMPT", "0")


@pytest.fixture()
def git_sandbox(tmp_path, git_env):
    """A bare remote plus a working clone sitting on `feature`, two commits ahead of master.

    Both master and feature track their origin counterparts.
    """
    seed = tmp_path / "seed"
    seed.mkdir()
    git("init", cwd=seed)
    git("symbolic-ref", "HEAD", "refs/heads/master", cwd=seed)
    commit_change(seed, "README.md", "initial commit")

    remote = tmp_path / "remote.git"
    git("clone", "--bare", str(seed), str(remote), cwd=tmp_path)

    work = tmp_path / "work"
    git("clone", str(remote), str(work), cwd=tmp_path)
    git("checkout", "-b", "feature", cwd=work)
    commit_change(work, "feature.txt", "feature change 1")
    commit_change(work, "feature.txt", "feature change 2")
    git("push", "-u", "origin", "feature", cwd=work)

    return SimpleNamespace(root=tmp_path, seed=seed, remote=remote, work=work)
