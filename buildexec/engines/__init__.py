"""
Engines: runtime discovery, script execution, test stub generation.
"""

from buildexec.engines.script import BuildContext, ExecutionOutcome, ScriptExecutor
from buildexec.engines.stubs import StubGenerationRunner

__all__ = [
    "BuildContext",
    "ExecutionOutcome",
    "ScriptExecutor",
    "StubGenerationRunner",
]
