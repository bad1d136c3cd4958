"""
Tests for doctor command.
"""

from unittest.mock import patch

from crossroot.cli.parser import CLI
from crossroot.toolchain.preflight import CheckResult, FixResult


def _result(name, passed, fixable=False):
    return CheckResult(
        name=name,
        passed=passed,
        message="ok" if passed else "missing",
        fixable=fixable,
        fix_command=None if passed else f"fix {name}",
    )


class TestDoctorCommand:
    """Test doctor command."""

    @patch("crossroot.cli.commands.doctor.PreflightRunner")
    def test_all_passed(self, mock_runner_class, temp_dir, capsys):
        """Test exit code 0 when every check passes."""
        mock_runner_class.return_value.run_all_checks.return_value = [
            _result("Rust Target", True),
            _result("Cross Linker", True),
        ]

        result = CLI().run(["--project-root", str(temp_dir), "doctor"])

        assert result == 0
        assert "Summary: 2 passed, 0 failed" in capsys.readouterr().out

    @patch("crossroot.cli.commands.doctor.PreflightRunner")
    def test_reports_every_failure(self, mock_runner_class, temp_dir, capsys):
        """Test that both failures are printed with remediation."""
        mock_runner_class.return_value.run_all_checks.return_value = [
            _result("Rust Target", False, fixable=True),
            _result("Cross Linker", False),
        ]

        result = CLI().run(["--project-root", str(temp_dir), "doctor"])

        out = capsys.readouterr().out
        assert result == 1
        assert "fix Rust Target" in out
        assert "fix Cross Linker" in out
        assert "Summary: 0 passed, 2 failed" in out

    @patch("crossroot.cli.commands.doctor.PreflightRunner")
    def test_fix(self, mock_runner_class, temp_dir):
        """Test that --fix only runs when something is fixable."""
        runner = mock_runner_class.return_value
        runner.run_all_checks.side_effect = [
            [_result("Rust Target", False, fixable=True), _result("Cross Linker", True)],
            [_result("Rust Target", True), _result("Cross Linker", True)],
        ]
        runner.fix_all.return_value = [FixResult(success=True, message="Installed")]

        result = CLI().run(["--project-root", str(temp_dir), "doctor", "--fix"])

        assert result == 0
        runner.fix_all.assert_called_once()

    @patch("crossroot.cli.commands.doctor.PreflightRunner")
    def test_uses_configured_target(self, mock_runner_class, temp_dir):
        """Test that the target comes from crossroot.yaml."""
        (temp_dir / "crossroot.yaml").write_text("target: aarch64-unknown-linux-gnu\n")
        mock_runner_class.return_value.run_all_checks.return_value = []

        CLI().run(["--project-root", str(temp_dir), "doctor"])

        mock_runner_class.assert_called_once_with("aarch64-unknown-linux-gnu")
