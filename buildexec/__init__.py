"""
buildexec: run build-time scripts in a scripting runtime located on a late-bound search path.
"""

from buildexec.core.errors import BuildError, BuildExecError, BuildFailure
from buildexec.engines import (
    BuildContext,
    ExecutionOutcome,
    ScriptExecutor,
    StubGenerationRunner,
)
from buildexec.schemas import ExecuteOptions, StubOptions

__all__ = [
    "BuildContext",
    "BuildError",
    "BuildExecError",
    "BuildFailure",
    "ExecuteOptions",
    "ExecutionOutcome",
    "ScriptExecutor",
    "StubGenerationRunner",
    "StubOptions",
]
