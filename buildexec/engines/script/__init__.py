"""
Script engine: run build scripts in a shell reached through the runtime layer.

Exports: ScriptExecutor, ExecutionOutcome, BuildContext, ScriptSourceResolver and the exit trap errors.
The default shell (sandbox.RestrictedShell) is deliberately not imported here.
"""

from .context import BuildContext
from .executor import ExecutionOutcome, ScriptExecutor, reflection_build_error
from .exit_trap import ExitBlockedError, ExitPolicy, ExitTrapError
from .source import ScriptFetchError, ScriptSource, ScriptSourceResolver

__all__ = [
    "BuildContext",
    "ExecutionOutcome",
    "ExitBlockedError",
    "ExitPolicy",
    "ExitTrapError",
    "ScriptExecutor",
    "ScriptFetchError",
    "ScriptSource",
    "ScriptSourceResolver",
    "reflection_build_error",
]
