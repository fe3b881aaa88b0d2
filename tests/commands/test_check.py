"""Tests for the check CLI command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from snapvalidate.cli import cli
from tests.conftest import write_config


@pytest.mark.usefixtures("_isolated_cwd")
class TestCheckCommand:
    def test_valid_email(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check", "email", "john@example.com"])
        assert result.exit_code == 0
        assert "VALID" in result.output
        assert result.stderr == ""

    def test_invalid_email_exits_nonzero(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check", "email", "not-an-email"])
        assert result.exit_code == 1
        assert result.stdout == ""
        assert "INVALID" in result.stderr
        assert "Invalid email format" in result.stderr

    def test_json_reports_normalized_value(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "check", "email", " John@Example.COM "])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["op"] == "check"
        assert data["valid"] is True
        assert data["data"] == {"kind": "email", "value": "john@example.com"}

    def test_json_errors_on_stderr(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "check", "credit-card", "4111111111111112"])
        assert result.exit_code == 1
        data = json.loads(result.stderr)
        assert data["errors"] == ["Invalid credit card number"]

    def test_phone_format(self, cli_runner: CliRunner) -> None:
        args = ["check", "phone", "+447911123456", "--format", "international"]
        assert cli_runner.invoke(cli, args).exit_code == 0
        assert cli_runner.invoke(cli, ["check", "phone", "+447911123456"]).exit_code == 1

    def test_zip_country(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check", "zip-code", "K1A 0B1", "--country", "ca"])
        assert result.exit_code == 0

    def test_password_options(self, cli_runner: CliRunner) -> None:
        args = ["--json", "check", "password", "Passw0rd"]
        args += ["--min-length", "10", "--require-special"]
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 1
        assert json.loads(result.stderr)["errors"] == [
            "Password must be at least 10 characters",
            "Password must contain at least one special character",
        ]

    def test_password_policy_from_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        write_config(tmp_path, "[password]\nrequire_special_chars = true\n")
        result = cli_runner.invoke(cli, ["check", "password", "Passw0rd"])
        assert result.exit_code == 1
        assert "special character" in result.stderr

    def test_max_input_length_from_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        write_config(tmp_path, "[regex]\nmax_input_length = 5\n")
        result = cli_runner.invoke(cli, ["check", "alphanumeric", "abcdef"])
        assert result.exit_code == 1
        assert "Input exceeds maximum length of 5 characters" in result.stderr

    def test_unknown_kind(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check", "ssn", "123"])
        assert result.exit_code == 2

    def test_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["check", "--examples"])
        assert result.exit_code == 0
        assert "snapvalidate check email" in result.output
