"""
Pydantic schemas for buildexec runs: script execution and stub generation options.

Every option defaults to the matching value in core.config.settings.
"""

import codecs

from pydantic import BaseModel, ConfigDict, Field, field_validator

from buildexec.core.config import settings


class _RuntimeOptions(BaseModel):
    """Where to find the scripting runtime and which version it must be."""

    model_config = ConfigDict(frozen=True)

    runtime_module: str = Field(
        default_factory=lambda: settings.SCRIPT_RUNTIME_MODULE,
        min_length=1,
        description="Top-level module of the scripting runtime.",
    )
    runtime_distribution: str | None = Field(
        default_factory=lambda: settings.SCRIPT_RUNTIME_DISTRIBUTION,
        description="Distribution whose metadata carries the runtime version.",
    )
    search_path: list[str] = Field(
        default_factory=lambda: settings.script_search_path,
        description="Directories / zip files searched before sys.path.",
    )


class ExecuteOptions(_RuntimeOptions):
    """Options for one script execution run."""

    scripts: list[str] = Field(
        default_factory=list,
        description="Scripts to run, in order. Each is a URL (local or remote) or a script body.",
    )
    continue_executing: bool = Field(
        default_factory=lambda: settings.SCRIPT_CONTINUE_EXECUTING,
        description="Keep running the remaining scripts when one fails.",
    )
    source_encoding: str | None = Field(
        default_factory=lambda: settings.SCRIPT_SOURCE_ENCODING,
        description="Encoding of fetched scripts; None means the platform default.",
    )
    bind_properties_to_separate_variables: bool = Field(
        default_factory=lambda: settings.SCRIPT_BIND_SEPARATE_VARIABLES,
        description="Bind every property as its own variable instead of one `properties` mapping.",
    )
    allow_system_exits: bool = Field(
        default_factory=lambda: settings.SCRIPT_ALLOW_SYSTEM_EXITS,
        description="Let scripts terminate the host process.",
    )
    min_runtime_version: str = Field(
        default_factory=lambda: settings.SCRIPT_MIN_RUNTIME_VERSION,
        min_length=1,
    )
    shell_class: str = Field(
        default_factory=lambda: settings.SCRIPT_SHELL_CLASS,
        min_length=1,
        description="Dotted name of the shell type: set_property(name, value) and evaluate(source).",
    )
    fetch_timeout: float | None = Field(
        default_factory=lambda: settings.SCRIPT_FETCH_TIMEOUT,
        gt=0,
        description="Seconds to wait on a remote script; None waits indefinitely.",
    )

    @field_validator("source_encoding")
    @classmethod
    def encoding_must_exist(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown source encoding: {v!r}") from e
        return v


class StubOptions(_RuntimeOptions):
    """Options for test stub generation."""

    skip: bool = Field(default_factory=lambda: settings.STUB_SKIP)
    generator_class: str | None = Field(
        default_factory=lambda: settings.STUB_GENERATOR_CLASS,
        description="Dotted name of the generator type: generate(sources, output_dir) -> list of paths.",
    )
    min_runtime_version: str = Field(
        default_factory=lambda: settings.STUB_MIN_RUNTIME_VERSION,
        min_length=1,
    )
