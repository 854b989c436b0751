"""
ScriptExecutor: run the configured scripts, in order, in one shell bound to the build context.

Sequence: runtime capability check -> shell setup (reflective) -> variable binding ->
per script: resolve source -> evaluate -> continue or abort. Process exits are
blocked for the whole run unless allow_system_exits is set.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any

from buildexec.core.errors import BuildError, BuildFailure, ConcurrentExecutionError
from buildexec.engines.runtime import (
    InstantiationError,
    InvocationTargetError,
    MemberAccessError,
    Method,
    ReflectionError,
    RuntimeLocator,
    RuntimeStatus,
    TypeNotFoundError,
    find_constructor,
    find_method,
    invoke_constructor,
    invoke_method,
    resolve_type,
)
from buildexec.schemas import ExecuteOptions

from .context import BuildContext
from .exit_trap import ExitTrapError, exit_trap
from .source import ScriptFetchError, ScriptSourceResolver

_log = logging.getLogger(__name__)

_run_lock = threading.Lock()


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of one script; ordinal is 1-based."""

    ordinal: int
    script: str
    error: BaseException | None = None
    skipped: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error is None


def reflection_build_error(e: ReflectionError, runtime: str) -> BuildError:
    """Build error for a reflective failure outside script evaluation. Raise it `from e` to keep the kind."""
    if isinstance(e, TypeNotFoundError):
        msg = (
            f"Unable to get a class from the search path. Do you have {runtime} "
            "installed in your project or on the search path?"
        )
    elif isinstance(e, InvocationTargetError):
        msg = f"Error occurred while calling a method on a {runtime} class."
    elif isinstance(e, InstantiationError):
        msg = f"Error occurred while instantiating a {runtime} class."
    elif isinstance(e, MemberAccessError):
        msg = f"Unable to access a method on a {runtime} class."
    else:
        msg = f"Error occurred while using a {runtime} class."
    return BuildError(f"{msg} ({e.target}: {e})")


class ScriptExecutor:
    """
    execute(context) -> list[ExecutionOutcome]

    Only one run may be active per process (the exit trap is process-wide).
    """

    def __init__(
        self,
        options: ExecuteOptions,
        *,
        locator: RuntimeLocator | None = None,
        resolver: ScriptSourceResolver | None = None,
    ) -> None:
        self.options = options
        self.locator = locator or RuntimeLocator(
            options.runtime_module,
            distribution=options.runtime_distribution,
            search_path=options.search_path,
        )
        self.resolver = resolver or ScriptSourceResolver(
            encoding=options.source_encoding,
            timeout=options.fetch_timeout,
        )

    def execute(self, context: BuildContext | None = None) -> list[ExecutionOutcome]:
        """
        Run all scripts. Returns the outcome of every script that was attempted;
        [] when the runtime version is too old or no scripts are configured.

        Raises BuildFailure when a script fails and continue_executing is off,
        BuildError for a missing runtime or a failing shell setup.
        """
        if not _run_lock.acquire(blocking=False):
            raise ConcurrentExecutionError(
                "Script execution is already running in this process; runs cannot overlap."
            )
        try:
            return self._execute(context or BuildContext())
        finally:
            _run_lock.release()

    def _execute(self, context: BuildContext) -> list[ExecutionOutcome]:
        opts = self.options
        capability = self.locator.check(opts.min_runtime_version)
        if capability.status is RuntimeStatus.RUNTIME_NOT_FOUND:
            raise BuildError(
                f"Unable to find the scripting runtime {capability.runtime!r} on the search path. "
                "Is it installed in your project or on the search path?"
            )
        if not capability.supported:
            _log.error(
                "Your %s version (%s) doesn't support script execution. "
                "The minimum version of %s required is %s. Skipping script execution.",
                capability.runtime,
                capability.detected_version or "unknown",
                capability.runtime,
                capability.minimum_version,
            )
            return []

        self.locator.log_version("script execution")
        _log.debug("Runtime search path: %s", opts.search_path)

        if not opts.scripts:
            _log.info("No scripts specified for execution. Skipping.")
            return []

        try:
            with exit_trap(enabled=not opts.allow_system_exits):
                try:
                    shell_cls = resolve_type(opts.shell_class, opts.search_path)
                    shell = self.setup_shell(shell_cls, context.to_bindings())
                    evaluate = find_method(shell_cls, "evaluate", str)
                    return self.execute_scripts(shell, evaluate)
                except ReflectionError as e:
                    raise reflection_build_error(e, capability.runtime) from e
        except ExitTrapError as e:
            raise BuildError(f"Unable to block process exits for script execution: {e}") from e

    def setup_shell(self, shell_cls: Any, bindings: dict[str, Any]) -> Any:
        """Create the shell and bind the build context (flattened or as one `properties` variable)."""
        shell = invoke_constructor(find_constructor(shell_cls))
        set_property = find_method(shell_cls, "set_property", str, object)
        if self.options.bind_properties_to_separate_variables:
            for name, value in bindings.items():
                invoke_method(set_property, shell, name, value)
        else:
            invoke_method(set_property, shell, "properties", bindings)
        return shell

    def execute_scripts(self, shell: Any, evaluate: Method) -> list[ExecutionOutcome]:
        outcomes: list[ExecutionOutcome] = []
        for ordinal, script in enumerate(self.options.scripts, start=1):
            try:
                skipped = self._run_script(shell, evaluate, script)
            except (ScriptFetchError, InvocationTargetError) as e:
                outcomes.append(ExecutionOutcome(ordinal=ordinal, script=script, error=e))
                if not self.options.continue_executing:
                    raise BuildFailure(
                        f"An error occurred while executing script {ordinal}: {e}",
                        ordinal=ordinal,
                    ) from e
                _log.error(
                    "An error occurred while executing script %d. Continuing to execute remaining scripts.",
                    ordinal,
                    exc_info=True,
                )
                continue
            outcomes.append(ExecutionOutcome(ordinal=ordinal, script=script, skipped=skipped))
        return outcomes

    def _run_script(self, shell: Any, evaluate: Method, script: str) -> bool:
        """Resolve and evaluate one script. Returns True when a fetched script was empty."""
        source = self.resolver.resolve(script)
        if source.url is not None and source.is_empty:
            _log.debug("Script fetched from %s is empty; nothing to evaluate", source.url)
            return True
        try:
            invoke_method(evaluate, shell, source.text)
        except SystemExit as e:
            if self.options.allow_system_exits:
                raise
            raise InvocationTargetError(
                f"{evaluate.target}() raised SystemExit({e.code!r}) while process exits are blocked",
                target=evaluate.target,
            ) from e
        return False
