"""
RestrictedShell: the default script shell, backed by RestrictedPython.

The executor never imports this module; it is reached by dotted name
(SCRIPT_SHELL_CLASS) through the reflective invoker like any other shell.

Allowed: RestrictedPython safe builtins, list/dict/set/tuple/len/range/min/max/sum/abs/sorted,
json, datetime/date/time/timedelta, print (forwarded to the buildexec.script logger)
and the bound variables.

Blocked: open, exec, eval, __import__, compile, and with them os, sys, subprocess, etc.
"""

import builtins
import json
import logging
from datetime import date, datetime, time, timedelta
from typing import Any

from RestrictedPython import compile_restricted
from RestrictedPython.Eval import default_guarded_getitem, default_guarded_getiter
from RestrictedPython.Guards import (
    full_write_guard,
    guarded_iter_unpack_sequence,
    guarded_unpack_sequence,
    safe_builtins,
    safer_getattr,
)
from RestrictedPython.PrintCollector import PrintCollector

script_log = logging.getLogger("buildexec.script")

_NO_RESULT = object()


class _LoggingPrintCollector(PrintCollector):
    """print() inside scripts: collected into `printed` and logged at info."""

    def _call_print(self, *objects: Any, **kwargs: Any) -> None:
        if kwargs.get("file") is None:
            sep = kwargs.get("sep")
            script_log.info("%s", (" " if sep is None else sep).join(str(o) for o in objects))
        super()._call_print(*objects, **kwargs)


def _make_guard_globals() -> dict[str, Any]:
    """Guards required by RestrictedPython's rewritten bytecode."""
    return {
        "_getattr_": safer_getattr,
        "_getiter_": default_guarded_getiter,
        "_getitem_": default_guarded_getitem,
        "_iter_unpack_sequence_": guarded_iter_unpack_sequence,
        "_unpack_sequence_": guarded_unpack_sequence,
        "_write_": full_write_guard,
        "_print_": _LoggingPrintCollector,
    }


def _make_extra_globals() -> dict[str, Any]:
    return {
        "json": json,
        "datetime": datetime,
        "date": date,
        "time": time,
        "timedelta": timedelta,
    }


def compile_script(script: str, filename: str = "<script>") -> Any:
    """Compile with RestrictedPython. Raises SyntaxError on failure."""
    code = compile_restricted(script, filename, "exec")
    if code is None:
        raise SyntaxError("RestrictedPython: compile failed")
    return code


def build_restricted_globals(variables: dict[str, Any] | None = None) -> dict[str, Any]:
    """Globals for exec(compiled, globals): safe builtins, guards, json/datetime and *variables*."""
    safe = dict(safe_builtins)
    g: dict[str, Any] = {
        "__builtins__": safe,
        "__name__": "script",
    }
    g.update(_make_guard_globals())
    g.update(_make_extra_globals())
    for name in ("list", "dict", "set", "tuple", "len", "range", "min", "max", "sum", "abs", "sorted"):
        obj = safe.get(name, getattr(builtins, name, None))
        if obj is not None:
            g[name] = obj
    g.update(variables or {})
    return g


class RestrictedShell:
    """
    Execution environment shared by all scripts of one run.

    Bound variables and names assigned by a script stay visible to later scripts.
    """

    def __init__(self) -> None:
        self._globals = build_restricted_globals()
        self._reserved = set(self._globals)
        self._bound: set[str] = set()

    def set_property(self, name: str, value: object) -> None:
        self._bound.add(name)
        self._globals[name] = value

    def get_property(self, name: str) -> Any:
        if name not in self.variables:
            raise KeyError(name)
        return self._globals[name]

    @property
    def variables(self) -> dict[str, Any]:
        """Bound variables plus public names assigned by scripts."""
        return {
            k: v
            for k, v in self._globals.items()
            if k in self._bound or (k not in self._reserved and not k.startswith("_"))
        }

    def evaluate(self, source: str) -> Any:
        """
        Run *source*; returns the value the script assigned to `result`, if any.

        A `result` left over from binding or from an earlier script is not a return value.
        """
        code = compile_script(source)
        before = self._globals.get("result", _NO_RESULT)
        exec(code, self._globals)
        after = self._globals.get("result", _NO_RESULT)
        return None if after is before else after
