"""
Build signals raised out of a script execution or stub generation run.

BuildFailure: an expected problem the user can fix (a script failed and the run
was not configured to continue). BuildError: an unexpected or environmental
problem (runtime missing from the search path, a runtime class that cannot be
resolved, instantiated or called).
"""


class BuildExecError(Exception):
    """Base error for buildexec runs."""


class BuildError(BuildExecError):
    """Unexpected or environmental failure; the underlying error is chained as __cause__."""


class BuildFailure(BuildExecError):
    """A script failed and execution was aborted."""

    def __init__(self, message: str, *, ordinal: int | None = None) -> None:
        super().__init__(message)
        self.ordinal = ordinal


class ConcurrentExecutionError(BuildError):
    """Raised when a run is started while another run is active in this process."""
