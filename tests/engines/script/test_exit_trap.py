"""Unit tests for engines.script.exit_trap."""

import builtins
import os
import sys

import pytest

from buildexec.engines.script.exit_trap import (
    ExitBlockedError,
    ExitTrapError,
    current_policy,
    exit_trap,
    install,
    is_installed,
    restore,
)


@pytest.fixture(autouse=True)
def _no_trap_left_behind() -> None:
    before = current_policy()
    yield
    assert not is_installed()
    assert current_policy() == before


class TestInstallRestore:
    def test_blocks_sys_exit(self) -> None:
        policy = install()
        try:
            with pytest.raises(ExitBlockedError, match="sys.exit"):
                sys.exit(1)
            with pytest.raises(ExitBlockedError):
                os._exit(1)
            with pytest.raises(ExitBlockedError):
                builtins.exit()
        finally:
            restore(policy)

    def test_restore_reinstalls_captured_hooks(self) -> None:
        original_exit = sys.exit
        policy = install()
        assert sys.exit is not original_exit
        restore(policy)
        assert sys.exit is original_exit

    def test_second_install_is_rejected(self) -> None:
        policy = install()
        try:
            with pytest.raises(ExitTrapError, match="already installed"):
                install()
        finally:
            restore(policy)

    def test_restore_without_install(self) -> None:
        with pytest.raises(ExitTrapError):
            restore(current_policy())


class TestExitTrapScope:
    def test_restores_after_error(self) -> None:
        before = current_policy()
        with pytest.raises(ValueError):
            with exit_trap():
                assert is_installed()
                raise ValueError("script failed")
        assert current_policy() == before

    def test_disabled_leaves_policy_untouched(self) -> None:
        before = current_policy()
        with exit_trap(enabled=False) as policy:
            assert policy is None
            assert not is_installed()
            assert current_policy() == before
