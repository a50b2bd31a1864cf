"""Shared test configuration and fixtures for brewtap_core tests.

Provides:
- An isolated git environment (HOME and global config redirected into
  the test's tmp_path) so ``git config --global`` never touches the
  developer's real configuration.
- A local bare tap repository and a source checkout for end-to-end runs
  against real git.

Notes:
    Fixtures that need the git executable skip the test when git is
    not installed.
"""
from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

FORMULA_V1 = 'class Espanso < Formula\n  version "1.0.0"\nend\n'
FORMULA_V2 = 'class Espanso < Formula\n  version "1.2.3"\nend\n'
CARGO_TOML = '[package]\nname = "espanso"\nversion = "1.2.3"\nedition = "2018"\n'


def _git(*args: str, cwd: Path) -> None:
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)


# ---- Fixtures ------------------------------------------------------------------------------------------------


@pytest.fixture
def git_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect HOME and the global git config into tmp_path."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home / ".gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.delenv("GIT_SSH_COMMAND", raising=False)
    return home


@pytest.fixture
def bare_tap(tmp_path: Path, git_home: Path) -> Path:
    """Create a bare tap repository containing Formula/espanso.rb."""
    seed = tmp_path / "seed"
    (seed / "Formula").mkdir(parents=True)
    (seed / "Formula" / "espanso.rb").write_text(FORMULA_V1)

    _git("init", cwd=seed)
    _git("add", "-A", cwd=seed)
    _git(
        "-c", "user.name=Seed", "-c", "user.email=seed@example.com",
        "commit", "-m", "Initial formula",
        cwd=seed,
    )

    bare = tmp_path / "homebrew-espanso.git"
    _git("clone", "--bare", str(seed), str(bare), cwd=tmp_path)
    return bare


@pytest.fixture
def checkout(tmp_path: Path) -> Path:
    """Create a source checkout with a manifest and formula."""
    work = tmp_path / "checkout"
    work.mkdir()
    (work / "Cargo.toml").write_text(CARGO_TOML)
    (work / "espanso.rb").write_text(FORMULA_V2)
    return work


@pytest.fixture
def ssh_dir(tmp_path: Path) -> Path:
    """SSH directory with an existing known_hosts file."""
    directory = tmp_path / "ssh"
    directory.mkdir()
    (directory / "known_hosts").write_text("github.com ssh-rsa AAAAHOSTKEY\n")
    return directory


@pytest.fixture
def git_output(git_home: Path):
    """Run git and return stripped stdout."""

    def _run(*args: str, cwd: Path) -> str:
        completed = subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)
        return completed.stdout.strip()

    return _run
