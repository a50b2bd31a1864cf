"""Tests for the publish pipeline.

Tests PublishOperations including the branch guard, step ordering,
fail-fast behavior, dry runs and credential provisioning. Mocked tests
patch TapRepository; the integration test runs real git.
"""
from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest

from brewtap_core.build import BuildContext
from brewtap_core.models import CredentialBundle
from brewtap_core.models import GitIdentity
from brewtap_core.models import PublishConfig
from brewtap_core.models import TapRemote
from brewtap_core.publish import PublishOperations
from brewtap_core.runner import CommandError
from brewtap_core.runner import CommandRunner


# ---- Fixtures ------------------------------------------------------------------------------------------------


@pytest.fixture
def config(checkout: Path, ssh_dir: Path) -> PublishConfig:
    """Publish config for the test checkout."""
    return PublishConfig(
        tap=TapRemote(url="git@github.com:federico-terzi/homebrew-espanso.git"),
        identity=GitIdentity(email="ci@example.com", name="CI Bot"),
        work_dir=str(checkout),
        ssh_dir=str(ssh_dir),
    )


@pytest.fixture
def on_master() -> BuildContext:
    """Build triggered from the main branch."""
    return BuildContext(source_branch="refs/heads/master", provider="azure")


@pytest.fixture
def on_feature() -> BuildContext:
    """Build triggered from a feature branch."""
    return BuildContext(source_branch="refs/heads/feature/x", provider="azure")


@pytest.fixture
def mock_tap():
    """Patch TapRepository and yield the instance mock."""
    with patch("brewtap_core.publish.TapRepository") as tap_cls:
        instance = MagicMock()
        instance.clone.return_value = Path("/work/homebrew-espanso")
        instance.replace_formula.return_value = Path("/work/homebrew-espanso/Formula/espanso.rb")
        tap_cls.return_value = instance
        yield instance


# ---- Guard Tests ---------------------------------------------------------------------------------------------


class TestPublishGuard:
    """Tests for the branch guard."""

    def test_skips_off_main_branch(self, config: PublishConfig, on_feature: BuildContext, mock_tap: MagicMock) -> None:
        """Test no clone, commit or push happens on another branch."""
        ops = PublishOperations(config, CommandRunner(), on_feature)
        result = ops.publish()

        assert result.skipped is True
        assert result.pushed is False
        assert "feature/x" in result.reason
        mock_tap.clone.assert_not_called()
        mock_tap.commit_and_push.assert_not_called()

    def test_skips_after_failed_step(self, config: PublishConfig, mock_tap: MagicMock) -> None:
        """Test the job does not run when previous steps failed."""
        build = BuildContext(source_branch="refs/heads/master", succeeded=False)
        result = PublishOperations(config, CommandRunner(), build).publish()

        assert result.skipped is True
        mock_tap.clone.assert_not_called()

    def test_force_runs_off_main_branch(self, config: PublishConfig, on_feature: BuildContext, mock_tap: MagicMock) -> None:
        """Test force bypasses the guard."""
        result = PublishOperations(config, CommandRunner(), on_feature).publish(force=True)

        assert result.skipped is False
        assert result.reason.startswith("forced")
        mock_tap.commit_and_push.assert_called_once()

    def test_check(self, config: PublishConfig, on_master: BuildContext) -> None:
        """Test check returns the guard decision."""
        run, _ = PublishOperations(config, CommandRunner(), on_master).check()
        assert run is True


# ---- Pipeline Tests ------------------------------------------------------------------------------------------


class TestPublish:
    """Tests for the publish pipeline with a mocked tap."""

    def test_runs_steps_in_order(self, config: PublishConfig, on_master: BuildContext, mock_tap: MagicMock) -> None:
        """Test identity, clone, replace and commit run in order."""
        result = PublishOperations(config, CommandRunner(), on_master).publish()

        step_names = [name for name, _, _ in mock_tap.method_calls]
        assert step_names == ["configure_identity", "clone", "replace_formula", "commit_and_push"]
        mock_tap.configure_identity.assert_called_once_with(config.identity)
        mock_tap.replace_formula.assert_called_once_with(config.formula_path)
        mock_tap.commit_and_push.assert_called_once_with("Update to version: 1.2.3")

        assert result.version == "1.2.3"
        assert result.commit_message == "Update to version: 1.2.3"
        assert result.pushed is True

    def test_known_hosts_printed_first(self, config: PublishConfig, on_master: BuildContext, mock_tap: MagicMock) -> None:
        """Test known_hosts is echoed before anything else."""
        echoed: list[str] = []
        runner = CommandRunner(echo=echoed.append)
        PublishOperations(config, runner, on_master).publish()

        assert echoed[0].startswith("+ cat ")
        assert echoed[0].endswith("known_hosts")
        assert echoed[1] == "github.com ssh-rsa AAAAHOSTKEY"

    def test_missing_known_hosts_is_fatal(
            self,
            config: PublishConfig,
            on_master: BuildContext,
            mock_tap: MagicMock,
            tmp_path: Path,
    ) -> None:
        """Test the job stops when known_hosts cannot be printed."""
        config.ssh_dir = str(tmp_path / "empty-ssh")

        with pytest.raises(RuntimeError, match="Cannot read"):
            PublishOperations(config, CommandRunner(), on_master).publish()

        mock_tap.configure_identity.assert_not_called()

    def test_empty_version_still_commits(
            self,
            config: PublishConfig,
            on_master: BuildContext,
            mock_tap: MagicMock,
            checkout: Path,
    ) -> None:
        """Test a manifest without version gives the malformed message."""
        (checkout / "Cargo.toml").write_text('[package]\nname = "espanso"\n')

        result = PublishOperations(config, CommandRunner(), on_master).publish()

        assert result.version == ""
        mock_tap.commit_and_push.assert_called_once_with("Update to version: ")

    def test_clone_failure_halts_before_commit(
            self,
            config: PublishConfig,
            on_master: BuildContext,
            mock_tap: MagicMock,
    ) -> None:
        """Test a failing clone stops the job before commit/push."""
        mock_tap.clone.side_effect = CommandError(["git", "clone", config.tap.url], 128, "Permission denied")

        with pytest.raises(CommandError):
            PublishOperations(config, CommandRunner(), on_master).publish()

        mock_tap.replace_formula.assert_not_called()
        mock_tap.commit_and_push.assert_not_called()

    def test_dry_run_skips_commit(self, config: PublishConfig, on_master: BuildContext, mock_tap: MagicMock) -> None:
        """Test dry_run stops after replacing the formula."""
        result = PublishOperations(config, CommandRunner(), on_master).publish(dry_run=True)

        mock_tap.replace_formula.assert_called_once()
        mock_tap.commit_and_push.assert_not_called()
        assert result.pushed is False
        assert result.commit_message == "Update to version: 1.2.3"

    def test_invalid_config_raises(self, config: PublishConfig, on_master: BuildContext, mock_tap: MagicMock) -> None:
        """Test an incomplete config is rejected before any step."""
        config.tap.url = ""

        with pytest.raises(ValueError, match="tap URL"):
            PublishOperations(config, CommandRunner(), on_master).publish()

        mock_tap.clone.assert_not_called()


# ---- Provisioning Tests --------------------------------------------------------------------------------------


class TestProvision:
    """Tests for provision."""

    def test_sets_git_ssh_command_for_custom_dir(self, config: PublishConfig, tmp_path: Path, on_master: BuildContext) -> None:
        """Test a non-default SSH dir exports GIT_SSH_COMMAND."""
        key = tmp_path / "azuressh"
        key.write_text("private")
        runner = CommandRunner()
        ops = PublishOperations(config, runner, on_master)

        installed = ops.provision(CredentialBundle("github.com ssh-rsa A", "ssh-rsa B ci", str(key)))

        assert installed.private_key_path.exists()
        assert str(installed.private_key_path) in runner.env["GIT_SSH_COMMAND"]

    def test_default_dir_leaves_environment(self, tmp_path: Path, on_master: BuildContext, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the default ~/.ssh does not override GIT_SSH_COMMAND."""
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        key = tmp_path / "azuressh"
        key.write_text("private")
        runner = CommandRunner()
        ops = PublishOperations(PublishConfig(), runner, on_master)

        ops.provision(CredentialBundle("github.com ssh-rsa A", "ssh-rsa B ci", str(key)))

        assert "GIT_SSH_COMMAND" not in runner.env
        assert (tmp_path / "home" / ".ssh" / "id_rsa").exists()


# ---- Integration Tests ---------------------------------------------------------------------------------------


class TestPublishWithGit:
    """Full publish against a local bare tap."""

    def test_publish_pushes_version_bump(
            self,
            bare_tap: Path,
            checkout: Path,
            ssh_dir: Path,
            on_master: BuildContext,
            git_output,
    ) -> None:
        """Test the bump lands in the tap with the expected message."""
        config = PublishConfig(
            tap=TapRemote(url=str(bare_tap)),
            identity=GitIdentity(email="ci@example.com", name="CI Bot", name_key="user.name"),
            work_dir=str(checkout),
            ssh_dir=str(ssh_dir),
        )
        runner = CommandRunner(cwd=checkout)

        result = PublishOperations(config, runner, on_master).publish()

        assert result.pushed is True
        assert result.tap_dir == checkout.resolve() / "homebrew-espanso"
        assert git_output("log", "-1", "--format=%s", cwd=bare_tap) == "Update to version: 1.2.3"
        assert git_output("config", "--global", "user.email", cwd=checkout) == "ci@example.com"
        assert result.commands[-1] == "+ git push"
