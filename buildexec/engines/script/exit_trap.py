"""
Exit trap: stop scripts from terminating the host process while they run.

install() swaps the process-wide termination hooks (sys.exit, os._exit, os.abort,
builtins.exit, builtins.quit) for blockers and returns the captured policy;
restore(policy) puts the captured hooks back. Only one trap may be active per
process.
"""

import builtins
import logging
import os
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

_log = logging.getLogger(__name__)

_MISSING = object()
_HOOKS: tuple[tuple[Any, str], ...] = (
    (sys, "exit"),
    (os, "_exit"),
    (os, "abort"),
    (builtins, "exit"),
    (builtins, "quit"),
)

_trap_lock = threading.Lock()


class ExitBlockedError(RuntimeError):
    """Raised in place of process termination while the exit trap is installed."""


class ExitTrapError(RuntimeError):
    """Raised on misuse of the trap: a second install, or restore without install."""


@dataclass(frozen=True)
class ExitPolicy:
    """Snapshot of the termination hooks: ((qualified name, callable or _MISSING), ...)."""

    hooks: tuple[tuple[str, Any], ...]

    def get(self, name: str) -> Any:
        return dict(self.hooks).get(name, _MISSING)


def _hook_name(owner: Any, attr: str) -> str:
    return f"{owner.__name__}.{attr}"


def current_policy() -> ExitPolicy:
    return ExitPolicy(
        hooks=tuple(
            (_hook_name(owner, attr), getattr(owner, attr, _MISSING)) for owner, attr in _HOOKS
        )
    )


def _make_blocker(name: str) -> Any:
    def _blocked(*args: Any, **kwargs: Any) -> None:
        status = args[0] if args else kwargs.get("status", kwargs.get("code"))
        raise ExitBlockedError(
            f"{name}({status!r}) called while scripts are not allowed to exit the process"
        )

    _blocked.__name__ = name.rsplit(".", 1)[-1]
    return _blocked


def is_installed() -> bool:
    return _trap_lock.locked()


def install() -> ExitPolicy:
    """Block process termination; returns the policy to hand back to restore()."""
    if not _trap_lock.acquire(blocking=False):
        raise ExitTrapError("An exit trap is already installed in this process")
    policy = current_policy()
    for owner, attr in _HOOKS:
        setattr(owner, attr, _make_blocker(_hook_name(owner, attr)))
    _log.debug("Exit trap installed")
    return policy


def restore(policy: ExitPolicy) -> None:
    """Reinstall the hooks captured by install() and release the trap."""
    if not _trap_lock.locked():
        raise ExitTrapError("No exit trap is installed")
    try:
        for owner, attr in _HOOKS:
            original = policy.get(_hook_name(owner, attr))
            if original is _MISSING:
                if hasattr(owner, attr):
                    delattr(owner, attr)
            else:
                setattr(owner, attr, original)
    finally:
        _trap_lock.release()
    _log.debug("Exit trap removed")


@contextmanager
def exit_trap(enabled: bool = True) -> Iterator[ExitPolicy | None]:
    """Block process exits for the duration of the block; no-op when *enabled* is False."""
    if not enabled:
        yield None
        return
    policy = install()
    try:
        yield policy
    finally:
        restore(policy)
