"""Unit tests for core.config and the option schemas built on it."""

import pytest
from pydantic import ValidationError

from buildexec.core import config
from buildexec.core.config import Settings
from buildexec.schemas import ExecuteOptions, StubOptions


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("SCRIPT_SEARCH_PATH", raising=False)
        s = Settings(_env_file=None)
        assert s.SCRIPT_RUNTIME_MODULE == "RestrictedPython"
        assert s.SCRIPT_FETCH_TIMEOUT is None
        assert s.SCRIPT_CONTINUE_EXECUTING is False
        assert s.script_search_path == []

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCRIPT_CONTINUE_EXECUTING", "true")
        monkeypatch.setenv("SCRIPT_FETCH_TIMEOUT", "2.5")
        monkeypatch.setenv("SCRIPT_SEARCH_PATH", " libs , vendor.zip,, ")
        s = Settings(_env_file=None)
        assert s.SCRIPT_CONTINUE_EXECUTING is True
        assert s.SCRIPT_FETCH_TIMEOUT == 2.5
        assert s.script_search_path == ["libs", "vendor.zip"]

    def test_empty_value_is_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SCRIPT_SHELL_CLASS", "")
        s = Settings(_env_file=None)
        assert s.SCRIPT_SHELL_CLASS == "buildexec.engines.script.sandbox.RestrictedShell"


class TestOptions:
    def test_defaults_follow_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config.settings, "SCRIPT_ALLOW_SYSTEM_EXITS", True)
        assert ExecuteOptions().allow_system_exits is True
        assert ExecuteOptions(allow_system_exits=False).allow_system_exits is False

    def test_unknown_encoding_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Unknown source encoding"):
            ExecuteOptions(source_encoding="no-such-codec")

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ExecuteOptions(fetch_timeout=0)

    def test_options_are_frozen(self) -> None:
        opts = StubOptions()
        with pytest.raises(ValidationError):
            opts.skip = True
