"""Tests for Settings validators and environment loading."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from validspec.config import Settings


class TestDefaults:
    def test_default_namespaces(self) -> None:
        s = Settings(_env_file=None)
        assert s.rule_attribute == "validate"
        assert s.modifier_attribute == "modify"
        assert s.serde_attribute == "serde"

    def test_default_policies(self) -> None:
        s = Settings(_env_file=None)
        assert s.allow_references is True
        assert s.reject_unusual_types is False
        assert s.grammar_module == "tree_sitter_rust"


class TestEnvironment:
    def test_prefixed_variables_read(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """VALIDSPEC_* variables override defaults."""
        monkeypatch.setenv("VALIDSPEC_RULE_ATTRIBUTE", "check")
        monkeypatch.setenv("VALIDSPEC_REJECT_UNUSUAL_TYPES", "true")
        s = Settings(_env_file=None)
        assert s.rule_attribute == "check"
        assert s.reject_unusual_types is True

    def test_env_file_read(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A .env file in the working directory is honoured."""
        (tmp_path / ".env").write_text("VALIDSPEC_LOG_LEVEL=DEBUG\n")
        monkeypatch.chdir(tmp_path)
        assert Settings().log_level == "DEBUG"


class TestNamespaceValidation:
    def test_names_are_stripped(self) -> None:
        s = Settings(_env_file=None, modifier_attribute="  fix ")
        assert s.modifier_attribute == "fix"

    def test_empty_name_raises(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            Settings(_env_file=None, rule_attribute="  ")

    def test_same_namespace_raises(self) -> None:
        with pytest.raises(ValueError, match="must differ"):
            Settings(
                _env_file=None,
                rule_attribute="check",
                modifier_attribute="check",
            )

    def test_serde_shadowing_warns(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Reusing an annotation namespace for serde logs a warning."""
        with caplog.at_level(logging.WARNING, logger="validspec.config"):
            Settings(_env_file=None, serde_attribute="validate")
        assert "shadows an annotation namespace" in caplog.text

    def test_no_warning_by_default(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="validspec.config"):
            Settings(_env_file=None)
        assert "shadows" not in caplog.text
