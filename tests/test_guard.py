"""Tests for featureflow.guard.command_guard module."""

from unittest.mock import patch

import pytest

from featureflow.guard.command_guard import GuardContext, guard_command, guard_context_for


class TestDestructiveRm:
    @pytest.mark.parametrize("command", [
        "rm -rf /",
        "rm -rf ~",
        "rm -fr /",
        "rm -Rrf ~ ",
        "sudo rm -rf --no-preserve-root /",
        "cd /tmp && rm -rf /",
        "rm -Rf /",
        "rm -r -f /",
        "rm --recursive --force /",
        "rm -rf ~/",
        "rm -rf $HOME",
        "rm -rf ${HOME}",
        "/bin/rm -rf /",
        "rm -rf -- /",
        "echo done; rm -fR '/'",
    ])
    def test_rejected(self, command):
        verdict = guard_command(command)
        assert not verdict.allowed
        assert verdict.rule == "rm-root"
        assert verdict.reason == "Blocked: destructive rm targeting / or ~"

    @pytest.mark.parametrize("command", [
        "rm -rf ./build",
        "rm -rf /tmp/x",
        "rm -rf ~/cache",
        "rm -r /",
        "rm -f ~",
        "rm -rf $HOME/cache",
        "echo rm -rf",
        "rm file.txt",
    ])
    def test_allowed(self, command):
        assert guard_command(command).allowed


class TestForcePush:
    def test_force_rejected(self):
        verdict = guard_command("git push --force origin main")
        assert not verdict.allowed
        assert verdict.rule == "force-push"
        assert "--force-with-lease" in verdict.reason

    def test_trailing_force_rejected(self):
        assert not guard_command("git push origin feat --force").allowed

    def test_short_flag_rejected(self):
        verdict = guard_command("git push -f origin main")
        assert not verdict.allowed
        assert verdict.reason == "Blocked: git push -f (use --force-with-lease instead)"

    def test_force_with_lease_allowed(self):
        assert guard_command("git push --force-with-lease origin feat").allowed

    def test_plain_push_allowed(self):
        assert guard_command("git push origin feat").allowed


class TestDrop:
    @pytest.mark.parametrize("command", [
        "psql -c 'DROP TABLE users'",
        "echo 'drop database prod' | mysql",
        "sqlite3 app.db 'Drop Table x'",
    ])
    def test_rejected(self, command):
        verdict = guard_command(command)
        assert not verdict.allowed
        assert verdict.rule == "drop"

    def test_select_allowed(self):
        assert guard_command("psql -c 'SELECT * FROM users'").allowed


class TestProtectedCommit:
    def test_rejected_on_main_with_store(self):
        context = GuardContext(branch="main", store_present=True)
        verdict = guard_command('git commit -m "wip"', context)
        assert not verdict.allowed
        assert verdict.rule == "protected-commit"
        assert "main" in verdict.reason
        assert "feature branch" in verdict.reason

    def test_allowed_on_feature_branch(self):
        context = GuardContext(branch="feat/login", store_present=True)
        assert guard_command('git commit -m "wip"', context).allowed

    def test_allowed_without_store(self):
        context = GuardContext(branch="master", store_present=False)
        assert guard_command('git commit -m "wip"', context).allowed

    def test_custom_protected_branches(self):
        context = GuardContext(branch="trunk", store_present=True, protected_branches=("trunk",))
        assert not guard_command("git commit", context).allowed

    def test_default_context_allows_commit(self):
        assert guard_command("git commit -am fix").allowed


class TestGuardCommand:
    def test_empty_command_allowed(self):
        assert guard_command("").allowed
        assert guard_command("   ").allowed

    def test_first_rule_wins(self):
        verdict = guard_command("rm -rf / && git push --force")
        assert verdict.rule == "rm-root"

    def test_pure(self):
        context = GuardContext(branch="main", store_present=True)
        assert guard_command("git commit", context) == guard_command("git commit", context)


class TestGuardContextFor:
    @patch("featureflow.guard.command_guard.get_current_branch", return_value="main")
    def test_collects_branch_and_store(self, mock_branch, project_config):
        context = guard_context_for(project_config.project_dir, project_config)
        assert context.branch == "main"
        assert context.store_present
        assert context.protected_branches == ("main", "master")
        mock_branch.assert_called_once_with(project_config.project_dir)
