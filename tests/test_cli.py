"""Tests for CLI argument parsing and the analyze command."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest

from tests.conftest import FIXTURE_DIR
from validspec import __version__
from validspec.cli import _build_parser, main

SIGNUP = str(FIXTURE_DIR / "rust" / "signup.rs")
SHAPES = str(FIXTURE_DIR / "rust" / "shapes.rs")


@pytest.fixture(autouse=True)
def _no_logging_setup() -> Iterator[None]:
    """Keep the root logger untouched by CLI runs."""
    with patch("validspec.cli.setup_logging"):
        yield


class TestArgParser:
    def test_version_flag(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(["--version"])
        assert args.version is True

    def test_analyze_defaults(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(["analyze", "src/lib.rs"])
        assert args.command == "analyze"
        assert args.source == "src/lib.rs"
        assert args.struct_name is None
        assert args.consumer is None
        assert args.format == "json"
        assert args.verbose is False

    def test_analyze_with_options(self) -> None:
        parser = _build_parser()
        args = parser.parse_args(
            [
                "analyze",
                "src/lib.rs",
                "--struct",
                "SignupForm",
                "--consumer",
                "validify",
                "--format",
                "text",
                "--verbose",
            ]
        )
        assert args.struct_name == "SignupForm"
        assert args.consumer == "validify"
        assert args.format == "text"
        assert args.verbose is True

    def test_invalid_consumer_rejected(self) -> None:
        parser = _build_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["analyze", "a.rs", "--consumer", "serde"])

    def test_no_command_prints_help(self) -> None:
        parser = _build_parser()
        args = parser.parse_args([])
        assert args.command is None


class TestMain:
    def test_version_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["--version"])
        assert capsys.readouterr().out.strip() == f"validspec {__version__}"

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["analyze", SIGNUP])
        data = json.loads(capsys.readouterr().out)
        assert [d["name"] for d in data] == ["SignupForm", "Lookup", "Inner"]
        email = data[0]["fields"][0]
        assert email["name"] == "email_address"
        assert email["original_name"] == "emailAddress"
        assert email["validations"][0]["code"] == "bad_email"
        assert [m["kind"] for m in email["modifiers"]] == ["trim", "lowercase"]

    def test_text_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["analyze", SIGNUP, "--struct", "SignupForm", "-f", "text"])
        out = capsys.readouterr().out
        assert out.startswith("SignupForm (Validify)")
        assert "  email_address: String [as emailAddress]" in out
        assert "    validate email code=bad_email" in out
        assert "    modify lowercase" in out
        assert "    validate range min=MIN_AGE max=130 code=range" in out

    def test_analysis_error_reported_with_location(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["analyze", SHAPES, "--struct", "Pair"])
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert err.startswith(f"{SHAPES}:2:12: error: ")
        assert "named fields" in err

    def test_consumer_override_reports_ownership(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit):
            main(["analyze", SIGNUP, "-s", "Lookup", "-c", "validify"])
        assert "owned data" in capsys.readouterr().err

    def test_missing_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["analyze", str(tmp_path / "missing.rs")])
        assert exc_info.value.code == 1
        assert "does not exist" in capsys.readouterr().err

    def test_unknown_struct(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            main(["analyze", SIGNUP, "--struct", "Nope"])
        assert "No struct, enum or union named 'Nope'" in capsys.readouterr().err

    def test_verbose_sets_debug(self) -> None:
        with patch("validspec.cli.setup_logging") as mock_setup:
            main(["analyze", SIGNUP, "-s", "Inner", "-v"])
        mock_setup.assert_called_once_with("DEBUG")
