"""
Test stub generation through a generator type reached on the search path.

Only the invocation is handled here: skip flag, runtime capability check,
reflective construction and call, error mapping. Scanning sources and writing
stubs is the generator's job.
"""

import logging
from collections.abc import Sequence

from buildexec.core.errors import BuildError
from buildexec.engines.runtime import (
    ReflectionError,
    RuntimeLocator,
    RuntimeStatus,
    find_constructor,
    find_method,
    invoke_constructor,
    invoke_method,
    resolve_type,
)
from buildexec.engines.script.executor import reflection_build_error
from buildexec.schemas import StubOptions

_log = logging.getLogger(__name__)


class StubGenerationRunner:
    """generate(sources, output_dir) -> stub paths written by the configured generator."""

    def __init__(self, options: StubOptions, *, locator: RuntimeLocator | None = None) -> None:
        self.options = options
        self.locator = locator or RuntimeLocator(
            options.runtime_module,
            distribution=options.runtime_distribution,
            search_path=options.search_path,
        )

    def generate(self, sources: Sequence[str], output_dir: str) -> list[str]:
        opts = self.options
        if opts.skip:
            _log.info("Skipping generation of test stubs because skip was set to true.")
            return []

        capability = self.locator.check(opts.min_runtime_version)
        if capability.status is RuntimeStatus.RUNTIME_NOT_FOUND:
            raise BuildError(
                f"Unable to find the scripting runtime {capability.runtime!r} on the search path. "
                "Is it installed in your project or on the search path?"
            )
        if not capability.supported:
            _log.error(
                "Your %s version (%s) doesn't support stub generation. "
                "The minimum version of %s required is %s. Skipping stub generation.",
                capability.runtime,
                capability.detected_version or "unknown",
                capability.runtime,
                capability.minimum_version,
            )
            return []
        if not opts.generator_class:
            raise BuildError("No stub generator configured (generator_class / STUB_GENERATOR_CLASS).")

        self.locator.log_version("test stub generation")
        try:
            generator_cls = resolve_type(opts.generator_class, opts.search_path)
            generator = invoke_constructor(find_constructor(generator_cls))
            generate = find_method(generator_cls, "generate", list, str)
            stubs = invoke_method(generate, generator, list(sources), output_dir)
        except ReflectionError as e:
            raise reflection_build_error(e, capability.runtime) from e

        stubs = [str(s) for s in (stubs or [])]
        _log.info("Generated %d stubs.", len(stubs))
        return stubs
